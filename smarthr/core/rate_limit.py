from __future__ import annotations

from slowapi import Limiter
from slowapi.util import get_remote_address

from smarthr.core.config import Settings


def build_limiter(settings: Settings) -> Limiter:
    """Limiter applied to every route through ``SlowAPIMiddleware``."""
    return Limiter(
        key_func=get_remote_address,
        default_limits=[settings.rate_limit],
        enabled=settings.rate_limit_enabled,
    )

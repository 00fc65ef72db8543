import logging

import sentry_sdk
from fastapi import FastAPI
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from smarthr.api.v1.candidates import router as candidates_router
from smarthr.api.v1.health import router as health_router
from smarthr.core.config import Settings, load_settings
from smarthr.core.cors import install_cors
from smarthr.core.lifespan import Services, lifespan
from smarthr.core.rate_limit import build_limiter


def create_app(settings: Settings | None = None, services: Services | None = None) -> FastAPI:
    settings = settings or load_settings()
    logging.basicConfig(level=settings.log_level, format="%(message)s")
    if settings.sentry_dsn:
        sentry_sdk.init(dsn=settings.sentry_dsn)

    app = FastAPI(title=settings.app_name, version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.services = services

    install_cors(app, settings)
    app.state.limiter = build_limiter(settings)
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    app.include_router(health_router, prefix="/v1", tags=["Health"])
    app.include_router(candidates_router, prefix="/v1", tags=["Candidates"])
    return app


app = create_app()

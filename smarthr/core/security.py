from __future__ import annotations

import secrets

from fastapi import Header, HTTPException, Request, status


def check_api_key(expected: str | None, x_api_key: str | None) -> None:
    if not expected:
        return
    if not x_api_key or not secrets.compare_digest(x_api_key, expected):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Please provide a valid API key.",
        )


async def require_api_key(request: Request, x_api_key: str | None = Header(default=None)) -> None:
    check_api_key(request.app.state.settings.api_key, x_api_key)

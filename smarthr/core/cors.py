from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from smarthr.core.config import Settings


def cors_allowed_origins(settings: Settings) -> list[str]:
    return list(settings.cors_allowed_origins)


def install_cors(app: FastAPI, settings: Settings) -> None:
    origins = cors_allowed_origins(settings)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        # Browsers reject credentialed requests against a wildcard origin.
        allow_credentials=settings.cors_allow_credentials and "*" not in origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tasky.config.settings import Settings


def add_cors(app: FastAPI, settings: Settings) -> None:
    """Allow the configured front-end origins (plus any origin matching the regex)."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allowed_origins,
        allow_origin_regex=settings.cors_allowed_origin_regex or None,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

"""
CORS middleware configuration.

Configures Cross-Origin Resource Sharing from settings.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware


def configure_cors(app: FastAPI, allowed_origins: list[str]) -> None:
    """
    Apply CORS settings to the app.

    Args:
        app: FastAPI application instance
        allowed_origins: Origins allowed to call the upload endpoints
    """
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
        max_age=3600,  # Cache preflight requests for 1 hour
    )

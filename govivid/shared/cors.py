"""Central CORS configuration for the API."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from govivid.shared.config import Settings

ALLOWED_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
ALLOWED_HEADERS = [
    "Origin",
    "X-Requested-With",
    "Content-Type",
    "Accept",
    "Authorization",
    "x-admin-secret",
]


def get_allowed_origins(settings: Settings) -> list[str]:
    """Return the configured origins, or ["*"] when none are set."""
    return list(settings.cors_origins) or ["*"]


def setup_cors(app: FastAPI, settings: Settings) -> None:
    """Add CORS middleware to a FastAPI app."""
    origins = get_allowed_origins(settings)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        # Browsers refuse credentials with a wildcard origin
        allow_credentials="*" not in origins,
        allow_methods=ALLOWED_METHODS,
        allow_headers=ALLOWED_HEADERS,
    )

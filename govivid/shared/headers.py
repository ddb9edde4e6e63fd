"""Security headers for API responses."""

from fastapi import FastAPI, Request
from fastapi.responses import Response

from govivid.shared.config import Settings


def setup_nosniff_header(app: FastAPI) -> None:
    """Add X-Content-Type-Options header."""

    @app.middleware("http")
    async def add_nosniff_header(request: Request, call_next) -> Response:
        response = await call_next(request)
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        return response


def setup_clickjacking_headers(app: FastAPI) -> None:
    """Add X-Frame-Options header."""

    @app.middleware("http")
    async def add_x_frame_options(request: Request, call_next) -> Response:
        response = await call_next(request)
        response.headers.setdefault("X-Frame-Options", "DENY")
        return response


def setup_hsts_header(app: FastAPI) -> None:
    """Add Strict-Transport-Security header."""

    @app.middleware("http")
    async def add_hsts_header(request: Request, call_next) -> Response:
        response = await call_next(request)
        response.headers.setdefault(
            "Strict-Transport-Security",
            "max-age=31536000; includeSubDomains",
        )
        return response


def setup_security_headers(app: FastAPI, settings: Settings) -> None:
    setup_nosniff_header(app)
    setup_clickjacking_headers(app)
    # HSTS only makes sense behind TLS
    if settings.is_production:
        setup_hsts_header(app)

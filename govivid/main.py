"""
GoVivid Media API

Contact form relay, portfolio catalog and image uploads for the marketing
site. Run with ``govivid-server`` or ``uvicorn govivid.main:app``.
"""
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI
from fastapi.staticfiles import StaticFiles
from starlette.concurrency import run_in_threadpool

from govivid.catalog.routes import router as catalog_router
from govivid.catalog.schemas import CategoryResponse, ProjectResponse
from govivid.catalog.service import Catalog
from govivid.catalog.store import JsonCollectionStore
from govivid.contact.relay import MailRelay, TransportFactory
from govivid.contact.routes import router as contact_router
from govivid.shared.config import Settings
from govivid.shared.context import ServerContext, get_context
from govivid.shared.cors import setup_cors
from govivid.shared.errors import setup_error_handlers
from govivid.shared.headers import setup_security_headers
from govivid.uploads.handler import UploadHandler
from govivid.uploads.routes import router as uploads_router

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
def health(context: ServerContext = Depends(get_context)):
    """Health check endpoint - reports readiness, never fails."""
    return {
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "cors": "enabled",
        "smtpReady": context.mail.ready,
    }


def build_context(
    settings: Settings,
    transport_factory: Optional[TransportFactory] = None,
) -> ServerContext:
    catalog = Catalog(
        projects=JsonCollectionStore(settings.projects_file, "projects", ProjectResponse),
        categories=JsonCollectionStore(settings.categories_file, "categories", CategoryResponse),
    )
    return ServerContext(
        settings=settings,
        catalog=catalog,
        mail=MailRelay(settings.smtp, transport_factory),
        uploads=UploadHandler(
            settings.upload_dir,
            base_url=settings.upload_base_url,
            max_bytes=settings.max_upload_bytes,
        ),
    )


def create_app(
    settings: Optional[Settings] = None,
    transport_factory: Optional[TransportFactory] = None,
) -> FastAPI:
    """Build the API app. Settings default to the process environment."""
    settings = settings or Settings.from_env()
    context = build_context(settings, transport_factory)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await run_in_threadpool(context.startup)
        logger.info(f"API ready - projects: {settings.projects_file}, uploads: {settings.upload_dir}")
        yield

    app = FastAPI(
        title="GoVivid Media API",
        version="1.0.0",
        description="Contact form relay and portfolio catalog with image uploads",
        lifespan=lifespan,
    )
    app.state.context = context

    setup_error_handlers(app)
    setup_cors(app, settings)
    setup_security_headers(app, settings)

    app.include_router(router)
    app.include_router(contact_router)
    app.include_router(catalog_router)
    app.include_router(uploads_router)

    # The directory is created on startup, not when the app is built
    app.mount(
        "/uploads",
        StaticFiles(directory=settings.upload_dir, check_dir=False),
        name="uploads",
    )

    return app


def run() -> None:
    """Console entry point."""
    import uvicorn

    settings = Settings.from_env()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logger.info(f"Starting GoVivid API on port {settings.port}")
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


app = create_app()

"""FastAPI application entry point for Parcel Notify."""

import logging
from contextlib import asynccontextmanager
from datetime import timedelta

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from parcel_notify import __version__
from parcel_notify.api.routes import router
from parcel_notify.config import Settings, get_settings
from parcel_notify.exceptions import ResourceExhaustedError
from parcel_notify.services.i18n import Translator
from parcel_notify.services.mailer import Mailer, SmtpMailer
from parcel_notify.services.maps import MapLinker
from parcel_notify.services.renderer import Renderer
from parcel_notify.services.uploader import CloudinaryUploader, ImageUploader
from parcel_notify.store.sweeper import TokenSweeper
from parcel_notify.store.token_store import TokenStore

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    settings: Settings = app.state.settings

    # Startup
    logger.info(f"Starting Parcel Notify v{__version__}")
    if not settings.mail_configured:
        logger.warning("SMTP credentials not set (SMTP_USERNAME / SMTP_PASSWORD)")
    if not settings.uploads_configured:
        logger.warning("Cloudinary credentials not set; image uploads will fail")
    if not settings.mapbox_token:
        logger.info("MAPBOX_TOKEN not set; emails will carry map links only")

    sweeper: TokenSweeper = app.state.sweeper
    sweeper.start()

    yield

    # Shutdown
    await sweeper.stop()
    logger.info("Shutting down Parcel Notify")


async def resource_exhausted_handler(
    request: Request,
    exc: ResourceExhaustedError,
) -> JSONResponse:
    logger.error(f"Token store exhausted: {exc}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "success": False,
            "message": "Service is busy, please try again later.",
        },
    )


def create_app(
    settings: Settings | None = None,
    token_store: TokenStore | None = None,
    mailer: Mailer | None = None,
    uploader: ImageUploader | None = None,
    map_linker: MapLinker | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Collaborators default to ones built from settings; tests pass their own.
    """
    if settings is None:
        settings = get_settings()

    app = FastAPI(
        title="Parcel Notify",
        description="Package notifications with short-lived authorization links",
        version=__version__,
        lifespan=lifespan,
        debug=settings.debug,
    )

    store = token_store if token_store is not None else TokenStore(
        ttl=timedelta(seconds=settings.token_ttl_seconds),
        entropy_bits=settings.token_entropy_bits,
        max_tokens=settings.token_max_live,
    )

    app.state.settings = settings
    app.state.token_store = store
    app.state.sweeper = TokenSweeper(
        store, interval_seconds=settings.token_sweep_interval_seconds
    )
    app.state.mailer = mailer if mailer is not None else SmtpMailer(
        host=settings.smtp_host,
        port=settings.smtp_port,
        username=settings.smtp_username,
        password=settings.smtp_password,
        sender=settings.mail_from,
        timeout=settings.smtp_timeout,
    )
    app.state.uploader = uploader if uploader is not None else CloudinaryUploader(
        cloud_name=settings.cloudinary_cloud_name,
        api_key=settings.cloudinary_api_key,
        api_secret=settings.cloudinary_api_secret,
    )
    app.state.map_linker = map_linker if map_linker is not None else MapLinker(
        access_token=settings.mapbox_token,
        width=settings.map_width,
        height=settings.map_height,
    )
    app.state.renderer = Renderer(
        Translator(default_locale=settings.default_locale),
        brand_name=settings.brand_name,
    )

    app.add_exception_handler(ResourceExhaustedError, resource_exhausted_handler)
    app.include_router(router)

    return app


# Create app instance for uvicorn
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "parcel_notify.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )

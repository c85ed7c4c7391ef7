import logging
import sys

import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration

from .config import Settings, settings
from .middleware import RequestLoggingMiddleware
from .middleware.logging import ACCESS_LOGGER_NAME
from .routers import documents, health, ui, upload

logger = logging.getLogger("doctrack")


def configure_logging() -> None:
    logging.basicConfig(level=logging.INFO, handlers=[logging.StreamHandler(sys.stdout)])
    logging.getLogger(ACCESS_LOGGER_NAME).setLevel(logging.INFO)


def init_sentry(config: Settings) -> bool:
    dsn = str(config.sentry_dsn or "").strip()
    if not dsn.lower().startswith(("http://", "https://")):
        return False
    sentry_sdk.init(
        dsn=dsn,
        environment=config.environment,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            LoggingIntegration(level=logging.INFO, event_level=logging.ERROR),
        ],
        traces_sample_rate=config.sentry_traces_sample_rate,
        profiles_sample_rate=config.sentry_profiles_sample_rate,
    )
    return True


def create_app(config: Settings = settings) -> FastAPI:
    application = FastAPI(title="DocTrack API", version="0.1.0")
    application.add_middleware(RequestLoggingMiddleware)

    if config.metrics_enabled:
        Instrumentator(should_group_status_codes=True, should_ignore_untemplated=True).instrument(application).expose(
            application, include_in_schema=False
        )

    # Browser UI is served from the same origin; CORS covers external API clients.
    application.add_middleware(
        CORSMiddleware,
        allow_origins=config.allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.include_router(health.router, tags=["health"])
    application.include_router(upload.router, tags=["upload"])
    application.include_router(documents.router, tags=["documents"])
    application.include_router(ui.router, include_in_schema=False)

    logger.info(
        "app_configured env=%s metadata_backend=%s blob_configured=%s",
        config.environment,
        config.metadata.backend,
        config.blob.has_write_credentials,
    )
    return application


configure_logging()
init_sentry(settings)
app = create_app()

from typing import Optional

from fastapi import Depends, FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from chat_api.config import Settings, get_settings
from chat_api.database import Database
from chat_api.exceptions import (
    ChatAPIError,
    chat_api_error_handler,
    request_validation_error_handler,
    unhandled_error_handler,
)
from chat_api.logging_config import configure_logging
from chat_api.middleware.rate_limit import build_limiter, enforce_rate_limit
from chat_api.middleware.request_id import RequestIDMiddleware
from chat_api.routers import api, friends, messages, users
from chat_api.services.storage import LocalFileStorage
from chat_api.utils.logger import get_logger

logger = get_logger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application from ``settings``.

    The database handle, blob storage and rate limiter are created here and
    kept on ``app.state``; handlers reach them through the dependencies in
    ``chat_api.dependencies``.
    """
    settings = settings or get_settings()
    configure_logging(settings)

    # Conditional docs configuration
    if settings.DEBUG:
        docs_config = {"docs_url": "/docs", "redoc_url": "/redoc", "openapi_url": "/openapi.json"}
        logger.info("DEBUG mode: Swagger docs enabled at /docs")
    else:
        docs_config = {"docs_url": None, "redoc_url": None, "openapi_url": None}

    app = FastAPI(
        title=settings.APP_NAME,
        description="Backend API for registration, friend requests and direct messages",
        version="1.0.0",
        # One per-client budget shared by every route
        dependencies=[Depends(enforce_rate_limit)],
        **docs_config
    )

    database = Database(settings)
    database.create_all()
    storage = LocalFileStorage(settings.FILES_DIR, settings.FILES_URL_PREFIX)

    app.state.settings = settings
    app.state.database = database
    app.state.storage = storage

    # Set up rate limiting
    app.state.limiter = build_limiter(settings)

    app.add_exception_handler(ChatAPIError, chat_api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    logger.info(f"CORS_ORIGINS: {settings.CORS_ORIGINS}")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Added last so it wraps everything and every log line carries the ID
    app.add_middleware(RequestIDMiddleware)

    app.include_router(api.router)
    app.include_router(users.router)
    app.include_router(friends.router)
    app.include_router(messages.router)

    # Uploaded images
    app.mount(storage.url_prefix, StaticFiles(directory=str(storage.root)), name="files")

    @app.on_event("shutdown")
    def shutdown_event():
        database.dispose()

    logger.info(f"{settings.APP_NAME} started in {'DEBUG' if settings.DEBUG else 'PRODUCTION'} mode")
    return app

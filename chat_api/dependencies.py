from fastapi import Request
from typing import Iterator, Optional
from sqlalchemy.orm import Session

from chat_api.config import Settings
from chat_api.services.storage import LocalFileStorage


def get_settings(request: Request) -> Settings:
    """Settings the running application was created with."""
    return request.app.state.settings


def get_db(request: Request) -> Iterator[Session]:
    """
    Database dependency for FastAPI.
    Provides a session from the application's Database with automatic cleanup.
    """
    yield from request.app.state.database.session()


def get_storage(request: Request) -> LocalFileStorage:
    """Blob storage for uploaded message images."""
    return request.app.state.storage


def get_optional_request_id(request: Request) -> Optional[str]:
    """
    FastAPI dependency to get the current request ID (optional).

    Returns None if no request ID is available, making it safe to use in any context.
    """
    return getattr(request.state, 'request_id', None)

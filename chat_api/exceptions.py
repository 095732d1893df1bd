from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from chat_api.utils.logger import get_logger

logger = get_logger(__name__)


class ChatAPIError(Exception):
    """Base class for errors raised by the stores and engines.

    Each subclass carries the HTTP status it maps to, so handlers can let
    these propagate and the application-level handler renders them.
    """
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Internal server error"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class ValidationFailed(ChatAPIError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid request"


class NotFound(ChatAPIError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "User not found"


class Conflict(ChatAPIError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Conflicting state"


class DuplicateEmail(Conflict):
    default_detail = "Email already exists"


class AlreadyRequested(Conflict):
    default_detail = "Friend request already sent"


class AlreadyFriends(Conflict):
    default_detail = "Already friends"


class Unauthorized(ChatAPIError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Invalid credentials"


class RateLimited(ChatAPIError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_detail = "Rate limit exceeded"


class InternalError(ChatAPIError):
    """Store or blob-storage failure."""
    default_detail = "Internal server error"


async def chat_api_error_handler(request: Request, exc: ChatAPIError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.detail}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    """Missing or malformed fields are a plain 400 for this API, not 422."""
    errors = exc.errors()
    messages = []
    for err in errors:
        location = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        messages.append(f"{location}: {err.get('msg')}" if location else err.get("msg"))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "; ".join(messages) or "Invalid request body"},
    )


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Something went wrong!"},
    )

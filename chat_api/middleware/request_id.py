import uuid
from typing import Callable
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from chat_api.utils.logger import set_request_context, clear_request_context, get_logger

logger = get_logger(__name__)

# Checked in order; the first header present wins
REQUEST_ID_HEADERS = ("X-Correlation-ID", "X-Request-ID")
RESPONSE_HEADER = "X-Request-ID"


def resolve_request_id(request: Request) -> str:
    for header in REQUEST_ID_HEADERS:
        value = request.headers.get(header)
        if value:
            return value
    return str(uuid.uuid4())


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Tag every request with an ID for log correlation.

    The ID is taken from the client's correlation headers or generated,
    kept on ``request.state.request_id`` and in the logging context for the
    duration of the request, and returned in ``X-Request-ID``.
    """

    async def dispatch(self, request: Request, call_next: Callable):
        request_id = resolve_request_id(request)
        request.state.request_id = request_id
        set_request_context(request_id)

        route = f"{request.method} {request.url.path}"
        logger.info(f"Request started: {route}")
        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(f"Request failed: {route} - Error: {e}")
            raise
        finally:
            clear_request_context()

        response.headers[RESPONSE_HEADER] = request_id
        logger.info(f"Request completed: {route} - Status: {response.status_code}", request_id=request_id)
        return response

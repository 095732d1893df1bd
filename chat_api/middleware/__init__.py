# Middleware package for the chat API

from .request_id import RequestIDMiddleware
from .rate_limit import build_limiter, enforce_rate_limit, get_client_key

__all__ = [
    "RequestIDMiddleware",
    "build_limiter",
    "enforce_rate_limit",
    "get_client_key"
]

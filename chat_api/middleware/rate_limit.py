from limits import parse_many
from slowapi import Limiter
from slowapi.util import get_remote_address
from fastapi import Request
import redis
from chat_api.config import Settings
from chat_api.exceptions import RateLimited
from chat_api.utils.logger import get_logger

logger = get_logger(__name__)

GLOBAL_SCOPE = "global"


def get_client_key(request: Request):
    """Rate limit bucket for a request: the client IP, honouring X-Forwarded-For."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return f"ip:{forwarded.split(',')[0].strip()}"
    return f"ip:{get_remote_address(request)}"


def _redis_storage_uri(settings: Settings) -> str:
    """Use Redis for limiter storage when it answers a ping, memory otherwise."""
    if not settings.REDIS_URL:
        return "memory://"
    try:
        client = redis.Redis.from_url(
            settings.REDIS_URL,
            socket_connect_timeout=5,
            socket_timeout=5,
        )
        client.ping()
        logger.info("Rate limiting Redis connected")
        return settings.REDIS_URL
    except Exception as e:
        logger.warning(f"Rate limiting Redis connection failed: {e}. Using in-memory fallback.")
        return "memory://"


def build_limiter(settings: Settings) -> Limiter:
    """Create the limiter for one application; the budget itself is applied by ``enforce_rate_limit``."""
    storage_uri = _redis_storage_uri(settings) if settings.RATE_LIMIT_ENABLED else "memory://"
    return Limiter(
        key_func=get_client_key,
        storage_uri=storage_uri,
        enabled=settings.RATE_LIMIT_ENABLED,
    )


def enforce_rate_limit(request: Request):
    """
    App-wide dependency charging every request against RATE_LIMIT_DEFAULT.

    All routes share one per-client budget. The check does not depend on
    resolving the matched route, so it holds however routers are included.

    Raises:
        RateLimited: once the client has used up its budget
    """
    limiter: Limiter = request.app.state.limiter
    if not limiter.enabled:
        return
    key = get_client_key(request)
    for item in parse_many(request.app.state.settings.RATE_LIMIT_DEFAULT):
        if not limiter.limiter.hit(item, key, GLOBAL_SCOPE):
            logger.warning(f"Rate limit {item} exceeded for {key} on {request.method} {request.url.path}")
            raise RateLimited(f"Rate limit exceeded: {item}")

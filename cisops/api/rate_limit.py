import logging

from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.requests import Request

from cisops.core.config import settings

logger = logging.getLogger(__name__)


def get_client_identifier(request: Request) -> str:
    """Rate limit key: client IP address."""
    return get_remote_address(request)


RATE_LIMITS = {
    "login": "20/minute" if settings.ENV.lower() == "prod" else "1000/minute",
    "register": "5/minute" if settings.ENV.lower() == "prod" else "1000/minute",
}

limiter = Limiter(
    key_func=get_client_identifier,
    default_limits=[settings.RATE_LIMIT_DEFAULT],
    storage_uri="memory://",
)
logger.info("Rate limiter using in-memory storage (default %s)", settings.RATE_LIMIT_DEFAULT)

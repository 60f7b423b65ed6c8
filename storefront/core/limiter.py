import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from storefront.core.config import settings

logger = logging.getLogger(__name__)

IS_TESTING = settings.environment == "testing"


def cart_session_or_address(request: Request) -> str:
    """Count a browser by its cart cookie; cookieless clients share their IP's budget."""
    session_id = request.cookies.get(settings.cart_cookie_name)
    if session_id:
        return f"session:{session_id}"
    return f"ip:{get_remote_address(request)}"


# Limits are shared across workers only when carts already live in Redis
limiter = Limiter(
    key_func=cart_session_or_address,
    storage_uri=settings.redis_url if settings.cart_storage == "redis" and not IS_TESTING else "memory://",
    strategy="fixed-window",
    enabled=not IS_TESTING,
)


def init_limiter_error_handlers(app: FastAPI):
    @app.exception_handler(RateLimitExceeded)
    async def _contact_rate_limited(request: Request, exc: RateLimitExceeded):
        logger.warning(f"Rate limit exceeded for {cart_session_or_address(request)}: {exc.detail}")
        return JSONResponse(
            status_code=429,
            content={"detail": "Too many messages. Please try again in a minute."},
        )

"""
Rate Limiting for the SOHO School Transport API
===============================================
Implements rate limiting of the credential endpoints using slowapi.

Limits are keyed by client address:
- /api/auth/register: 3 req/min
- /api/auth/login: 5 req/min (brute force protection)
- /api/auth/refresh: 10 req/min

Set RATE_LIMIT_ENABLED=false to disable (tests, local load testing).
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi import Request
from fastapi.responses import JSONResponse

from soho_transport.core.config import settings
from soho_transport.core.logging_config import logger


def get_client_identifier(request: Request) -> str:
    """Rate limit key: the client address"""
    return f"ip:{get_remote_address(request)}"


limiter = Limiter(
    key_func=get_client_identifier,
    enabled=settings.RATE_LIMIT_ENABLED,
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    strategy="fixed-window",
)


def register_rate_limit():
    return limiter.limit(settings.REGISTER_RATE_LIMIT)


def login_rate_limit():
    return limiter.limit(settings.LOGIN_RATE_LIMIT)


def refresh_rate_limit():
    return limiter.limit(settings.REFRESH_RATE_LIMIT)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """
    Custom handler for rate limit exceeded errors.

    Returns the standard envelope with a Retry-After header.
    """
    logger.warning(
        f"[RateLimit] Exceeded for {get_client_identifier(request)} on {request.url.path}: {exc.detail}",
        extra={"event_type": "rate_limit_exceeded", "http_path": request.url.path}
    )

    return JSONResponse(
        status_code=429,
        content={
            "success": False,
            "message": "Too many requests. Please try again later.",
            "code": "RATE_LIMIT_EXCEEDED",
        },
        headers={"Retry-After": "60"},
    )

"""
Rate Limiting for the Noticeboard API
=====================================
Implements rate limiting of the credential endpoints using slowapi.

- /api/login: LOGIN_RATE_LIMIT (default 10/minute per client IP)
- /api/register: REGISTER_RATE_LIMIT (default 5/minute per client IP)

Other routes are only reachable with a session and are not limited.
Disable with RATE_LIMIT_ENABLED=false (the test suite does).
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi import Request
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.logging_config import logger


def get_client_identifier(request: Request) -> str:
    """Rate limit key: client IP (callers of these routes are not logged in yet)"""
    return f"ip:{get_remote_address(request)}"


# Create limiter instance
limiter = Limiter(
    key_func=get_client_identifier,
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    strategy="fixed-window",
    enabled=settings.RATE_LIMIT_ENABLED,
)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    """
    Custom handler for rate limit exceeded errors.

    Keeps the API's error contract: a JSON body with ``message`` plus a
    Retry-After header.
    """
    retry_after = exc.detail.split(":")[-1].strip() if exc.detail else "60"

    logger.warning(
        f"[RateLimit] Exceeded for {get_client_identifier(request)} on {request.url.path}: {exc.detail}"
    )

    return JSONResponse(
        status_code=429,
        content={
            "message": "Too many requests. Please slow down.",
            "code": "RATE_LIMITED",
            "detail": str(exc.detail),
        },
        headers={"Retry-After": retry_after if retry_after.isdigit() else "60"},
    )


def login_rate_limit():
    """Rate limit for /api/login"""
    return limiter.limit(settings.LOGIN_RATE_LIMIT)


def register_rate_limit():
    """Rate limit for /api/register"""
    return limiter.limit(settings.REGISTER_RATE_LIMIT)

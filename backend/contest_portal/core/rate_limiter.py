"""
Rate Limiting for the Contest Portal API
========================================
Implements rate limiting using slowapi.

Only the credential endpoints are limited:
- /auth/login: LOGIN_RATE_LIMIT (brute force protection)
- /auth/register: REGISTER_RATE_LIMIT

Storage defaults to in-process memory; point RATE_LIMIT_STORAGE_URI at
redis:// to share counters between workers.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi import Request
from fastapi.responses import JSONResponse

from contest_portal.core.config import settings
from contest_portal.core.logging_config import logger


limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    enabled=settings.RATE_LIMIT_ENABLED,
)

login_rate_limit = settings.LOGIN_RATE_LIMIT
register_rate_limit = settings.REGISTER_RATE_LIMIT


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Return the standard error envelope when a limit is hit"""
    logger.warning(
        f"Rate limit exceeded: {request.method} {request.url.path}",
        extra={
            "event_type": "rate_limited",
            "client_ip": get_remote_address(request),
            "limit": str(exc.detail),
        }
    )
    return JSONResponse(
        status_code=429,
        content={
            "success": False,
            "message": "Too many requests, please try again later",
            "code": "RATE_LIMITED",
        }
    )

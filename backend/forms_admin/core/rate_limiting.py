"""Rate limiting configuration using slowapi.

Security: Slows down code guessing on /forms/verify, mail flooding on
/forms/login and /contact, and junk submissions on /forms/submit.

All endpoints are keyed on the socket peer address. Admin sign-in has no
user identity until a session exists, and intake callers are anonymous
browsers. Forwarding headers are client-controlled and never feed the key;
behind a proxy, run uvicorn with --proxy-headers and --forwarded-allow-ips
so the peer is rewritten by a trusted hop.

Usage in routers:
    from forms_admin.core.rate_limiting import limiter

    @router.post("/login")
    @limiter.limit(settings.rate_limit_login)
    async def login(request: Request, ...):
        ...
"""

from fastapi import Request, Response
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.responses import JSONResponse

from forms_admin.core.config import settings
from forms_admin.core.responses import ErrorResponse


def _rate_limit_key_func(request: Request) -> str:
    """Get rate limit key from request.

    Key format: "ip:{peer}". CF-Connecting-IP and X-Forwarded-For are
    ignored: a client could rotate them to reset its bucket.

    Args:
        request: The incoming request.

    Returns:
        Rate limit key string.
    """
    return f"ip:{get_remote_address(request)}"


# Global limiter instance
# Configured with in-memory storage (suitable for single-instance deployment)
# For multi-instance, configure Redis storage via RATELIMIT_STORAGE_URL
limiter = Limiter(
    key_func=_rate_limit_key_func,
    enabled=settings.rate_limit_enabled,
)


def rate_limit_exceeded_handler(
    _request: Request,
    exc: RateLimitExceeded,
) -> Response:
    """Handle rate limit exceeded errors.

    Security: Returns 429 Too Many Requests with standard error envelope.

    Args:
        request: The incoming request.
        exc: The rate limit exception.

    Returns:
        JSONResponse with 429 status and retry-after header.
    """
    # Parse retry-after from exception detail (e.g., "10 per 1 minute")
    # Fallback to 60 seconds if parsing fails
    try:
        retry_after = str(exc.detail.split()[-1])
        int(retry_after.rstrip("s"))
    except (ValueError, AttributeError, IndexError):
        retry_after = "60"

    return JSONResponse(
        status_code=429,
        content=ErrorResponse(
            error=f"Rate limit exceeded: {exc.detail}",
            code="RATE_LIMITED",
        ).to_content(),
        headers={"Retry-After": retry_after},
    )

"""FastAPI application entry point.

This module creates and configures the FastAPI application, including:
- Security headers middleware
- Exception handlers for API and upstream errors
- /api router mounting
- Health check endpoint

There is no global CORS middleware. The dashboard is same-origin, and the
two cross-origin endpoints (/api/forms/submit, /api/contact) answer their
own preflights with per-site headers.
"""

import logging

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from forms_admin.api.routes.contact import CONTACT_CORS_HEADERS
from forms_admin.api.routes.router import router as api_router
from forms_admin.core.config import settings
from forms_admin.core.errors import APIError, DataStoreError, MailDeliveryError
from forms_admin.core.rate_limiting import limiter, rate_limit_exceeded_handler
from forms_admin.core.responses import ErrorResponse
from forms_admin.services.intake_service import echo_origin_headers

logger = structlog.get_logger()

_GENERIC_ERROR_MSG = "An unexpected error occurred"
_MAIL_ERROR_MSG = "Unable to send email."

_INTAKE_PATH = "/api/forms/submit"
_CONTACT_PATH = "/api/contact"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware to add security headers to all responses.

    Headers added:
    - X-Frame-Options: Prevents clickjacking attacks
    - X-Content-Type-Options: Prevents MIME sniffing
    - Referrer-Policy: Controls referrer information leakage
    - Cache-Control: Prevents caching of API responses
    - Content-Security-Policy: Restricts resource loading (API returns no HTML)
    - Strict-Transport-Security: Forces HTTPS (production only)

    No COOP/COEP/CORP: client sites read /api/forms/submit responses
    cross-origin.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        """Add security headers to response."""
        response = await call_next(request)

        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        # Session state and submissions must never sit in a shared cache
        if request.url.path.startswith("/api/"):
            response.headers["Cache-Control"] = "no-store, max-age=0"

        response.headers["Content-Security-Policy"] = (
            "default-src 'none'; frame-ancestors 'none'"
        )

        # HSTS only in production (assumes HTTPS at the edge)
        if settings.environment == "production":
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains"
            )

        return response


def _cross_origin_headers(request: Request) -> dict[str, str]:
    """CORS headers for error responses on the browser-facing routes.

    Rate limiting and unhandled errors bypass the route code that normally
    adds these, and without them the embedding page cannot read the error.
    """
    if request.url.path == _INTAKE_PATH:
        return echo_origin_headers(request.headers.get("origin", ""))
    if request.url.path == _CONTACT_PATH:
        return dict(CONTACT_CORS_HEADERS)
    return {}


def _error_response(
    status_code: int,
    error: ErrorResponse,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=error.to_content(),
        headers=headers,
    )


def api_error_handler(_request: Request, exc: APIError) -> JSONResponse:
    """Handle custom API errors.

    Extra headers on the error (CORS headers from the intake endpoints)
    are copied onto the response.

    Args:
        request: The incoming request.
        exc: The APIError that was raised.

    Returns:
        JSONResponse with error envelope and appropriate status code.
    """
    return _error_response(
        exc.status_code,
        ErrorResponse(error=exc.message, code=exc.code, details=exc.details),
        exc.headers,
    )


def validation_error_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle Pydantic validation errors from FastAPI.

    Converts FastAPI's 422 into a 400 with the standard envelope.

    Args:
        request: The incoming request.
        exc: The RequestValidationError from Pydantic.

    Returns:
        JSONResponse with VALIDATION_ERROR code and field-level details.
    """
    return _error_response(
        400,
        ErrorResponse(
            error="Request validation failed",
            code="VALIDATION_ERROR",
            details=[
                {"loc": list(e["loc"]), "msg": e["msg"], "type": e["type"]}
                for e in exc.errors()
            ],
        ),
    )


def data_store_error_handler(request: Request, exc: DataStoreError) -> JSONResponse:
    """Row store failures become a generic 500; upstream detail is logged only."""
    logger.error(
        "data_store_error",
        path=str(request.url.path),
        status_code=exc.status_code,
        body=exc.body[:500],
        error=str(exc),
    )
    return _error_response(
        500,
        ErrorResponse(error=_GENERIC_ERROR_MSG, code="INTERNAL_ERROR"),
        _cross_origin_headers(request),
    )


def rate_limited_handler(request: Request, exc: RateLimitExceeded) -> Response:
    """429 envelope, plus CORS headers on the browser-facing routes."""
    response = rate_limit_exceeded_handler(request, exc)
    response.headers.update(_cross_origin_headers(request))
    return response


def mail_delivery_error_handler(
    request: Request, exc: MailDeliveryError
) -> JSONResponse:
    """Mail provider failures become a 500 with a short message."""
    logger.error(
        "mail_delivery_error",
        path=str(request.url.path),
        status_code=exc.status_code,
        body=exc.body[:500],
        error=str(exc),
    )
    return _error_response(
        500,
        ErrorResponse(error=_MAIL_ERROR_MSG, code="INTERNAL_ERROR"),
        _cross_origin_headers(request),
    )


def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unhandled exceptions.

    Returns 500 INTERNAL_ERROR without exposing stack traces.

    Args:
        request: The incoming request.
        exc: The unhandled exception.

    Returns:
        JSONResponse with generic error message (500).
    """
    logger.exception("Unhandled exception", exc_info=exc, path=str(request.url.path))

    return _error_response(
        500,
        ErrorResponse(error=_GENERIC_ERROR_MSG, code="INTERNAL_ERROR"),
        _cross_origin_headers(request),
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    logging.getLogger("forms_admin").setLevel(settings.log_level.upper())

    app = FastAPI(
        title="Forms Admin API",
        version="1.0.0",
        description="Site form intake and passwordless admin dashboard",
    )

    app.add_middleware(SecurityHeadersMiddleware)

    # Register exception handlers
    # Order matters: specific handlers first, then catch-all
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limited_handler)
    app.add_exception_handler(DataStoreError, data_store_error_handler)
    app.add_exception_handler(MailDeliveryError, mail_delivery_error_handler)
    app.add_exception_handler(Exception, internal_error_handler)

    # Rate limiting (Security)
    app.state.limiter = limiter

    app.include_router(api_router, prefix="/api")

    # Health check endpoint (outside the /api tree)
    @app.get("/health")
    def health_check() -> dict:
        """Health check endpoint for monitoring.

        Returns:
            {"status": "healthy"} if service is running.
        """
        return {"status": "healthy"}

    return app


# Create the application instance
# Used by uvicorn: uvicorn forms_admin.main:app
app = create_app()

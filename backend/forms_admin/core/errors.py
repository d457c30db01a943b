"""API error classes.

Every client-visible failure is an APIError subclass rendered by the
handlers in ``forms_admin.main``. Upstream collaborator failures
(row store, mail provider) have their own exception types that carry
diagnostic detail for the logs and are always rendered as a generic 500.

WHY CUSTOM ERROR CLASSES:
- Consistent error response format across all endpoints
- Easy to map to HTTP status codes in exception handlers
- Type-safe error handling in services/repositories
"""


class APIError(Exception):
    """Base class for API errors.

    All API errors have a code, message, and HTTP status.
    Subclasses set default status_code.

    Attributes:
        code: Machine-readable error code (e.g., "UNAUTHORIZED").
        message: Human-readable error message.
        status_code: HTTP status code to return.
        details: Optional list of additional error details.
        headers: Extra response headers (e.g., CORS headers on intake errors).
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: list[dict] | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details
        self.headers = headers
        super().__init__(message)


class ValidationError(APIError):
    """Missing or malformed input (400).

    Use for request body validation errors, query param errors, etc.
    """

    def __init__(
        self,
        message: str,
        details: list[dict] | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(
            code="VALIDATION_ERROR",
            message=message,
            status_code=400,
            details=details,
            headers=headers,
        )


class UnauthorizedError(APIError):
    """Missing or invalid credential, code, or session (401).

    Messages are intentionally generic so callers cannot tell which
    check failed.
    """

    def __init__(
        self,
        message: str = "Authentication required",
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(
            code="UNAUTHORIZED",
            message=message,
            status_code=401,
            headers=headers,
        )


class ForbiddenError(APIError):
    """Caller identified but not allowed (403).

    Use for non-allow-listed admin emails and disallowed submission origins.
    """

    def __init__(
        self,
        message: str = "Access denied",
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(
            code="FORBIDDEN",
            message=message,
            status_code=403,
            headers=headers,
        )


class InternalError(APIError):
    """Unexpected server error (500).

    Never expose stack traces or upstream detail to clients.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(
            code="INTERNAL_ERROR",
            message=message,
            status_code=500,
            headers=headers,
        )


class DataStoreError(Exception):
    """Row store responded non-2xx or could not be reached.

    Callers treat this as a hard failure. The status and body are for
    server-side logs only.

    Attributes:
        status_code: Upstream HTTP status (None for transport failures).
        body: Upstream response body text, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        body: str = "",
    ) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(message)


class MailDeliveryError(Exception):
    """Mail provider rejected the message or could not be reached.

    Attributes:
        status_code: Upstream HTTP status (None for transport failures).
        body: Upstream response body text, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        body: str = "",
    ) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(message)

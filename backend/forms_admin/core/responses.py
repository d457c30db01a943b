"""Response envelope models.

Every JSON body carries a ``success`` flag. Errors carry the human-readable
message in ``error`` (the dashboard shows it verbatim) plus a
machine-readable ``code``.

Success:
    {"success": true, ...endpoint fields...}

Error:
    {"success": false, "error": "Invalid site.", "code": "UNAUTHORIZED"}
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class SuccessResponse(BaseModel):
    """Base envelope for successful responses.

    Fields serialize as camelCase (``expires_at`` -> ``expiresAt``) to match
    the dashboard client. Subclasses add endpoint-specific fields.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: Literal[True] = True


class ErrorResponse(BaseModel):
    """Standard error response envelope.

    Attributes:
        error: Human-readable error message.
        code: Machine-readable error code (e.g., "UNAUTHORIZED").
        details: Optional list of field-level errors (for validation).
    """

    success: Literal[False] = False
    error: str
    code: str
    details: list[dict] | None = None

    def to_content(self) -> dict:
        """Serialize for JSONResponse, omitting empty details."""
        return self.model_dump(exclude_none=True)

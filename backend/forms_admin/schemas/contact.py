"""Lead contact form response schema.

The request body is an open JSON object (the multi-step form's fields),
so there is no request model.
"""

from forms_admin.core.responses import SuccessResponse


class ContactResponse(SuccessResponse):
    """Response for POST /contact (identical for delivered and dropped leads)."""

    message: str

"""Pydantic request/response schemas for API endpoints."""

from forms_admin.schemas.contact import ContactResponse
from forms_admin.schemas.forms import (
    LoginRequest,
    LoginResponse,
    MeResponse,
    SiteSummary,
    SitesResponse,
    SubmissionSummary,
    SubmissionsResponse,
    VerifyRequest,
)

__all__ = [
    "ContactResponse",
    "LoginRequest",
    "LoginResponse",
    "MeResponse",
    "SiteSummary",
    "SitesResponse",
    "SubmissionSummary",
    "SubmissionsResponse",
    "VerifyRequest",
]

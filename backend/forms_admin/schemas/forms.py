"""Forms admin request/response schemas.

Request and envelope fields use camelCase on the wire (``challengeId``,
``expiresAt``) to match the dashboard client. Row payloads (sites,
submissions) keep the row store's snake_case column names.

Sign-in requests use ConfigDict(extra="forbid") to reject unexpected fields.
Missing values are allowed through so the service can answer with its own
"required" messages.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from forms_admin.core.responses import SuccessResponse
from forms_admin.models.site import Site
from forms_admin.models.submission import Submission

# =============================================================================
# Sign-in
# =============================================================================


class LoginRequest(BaseModel):
    """Request body for POST /forms/login."""

    model_config = ConfigDict(extra="forbid")

    email: str | None = None


class VerifyRequest(BaseModel):
    """Request body for POST /forms/verify."""

    model_config = ConfigDict(
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    email: str | None = None
    code: str | None = None
    challenge_id: str | None = None


class LoginResponse(SuccessResponse):
    """Response for POST /forms/login."""

    challenge_id: str
    expires_in_minutes: int


class MeResponse(SuccessResponse):
    """Response for GET /forms/me."""

    email: str
    expires_at: datetime


# =============================================================================
# Dashboard reads
# =============================================================================


class SiteSummary(BaseModel):
    """Site as listed on the dashboard (never includes site_key)."""

    site_id: str
    site_name: str | None = None
    allowed_origins: list[str] = []

    @classmethod
    def from_site(cls, site: Site) -> "SiteSummary":
        return cls(
            site_id=site.site_id,
            site_name=site.site_name,
            allowed_origins=site.allowed_origins,
        )


class SitesResponse(SuccessResponse):
    """Response for GET /forms/sites."""

    sites: list[SiteSummary]


class SubmissionSummary(BaseModel):
    """Submission as listed on the dashboard (no ip / user_agent)."""

    id: str | int | None = None
    site_id: str
    form_id: str | None = None
    submitted_at: datetime | None = None
    origin: str | None = None
    page_url: str | None = None
    referrer: str | None = None
    data: dict[str, Any] | None = None

    @classmethod
    def from_submission(cls, submission: Submission) -> "SubmissionSummary":
        return cls.model_validate(
            submission.model_dump(exclude={"ip", "user_agent"})
        )


class SubmissionsResponse(SuccessResponse):
    """Response for GET /forms/submissions."""

    submissions: list[SubmissionSummary]

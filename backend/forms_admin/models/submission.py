"""Submission model - stored form payloads.

Created once per intake call and never modified. ``data`` is an open
mapping with no schema; field labels and formatting belong to the dashboard.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel

SUBMISSIONS_TABLE = "forms_submissions"


class Submission(BaseModel):
    """Form submission row.

    Attributes:
        id: Row id (assigned by the store).
        site_id: Submitting site.
        form_id: Optional free-form label for the form on that site.
        data: Submitted fields, stored verbatim. Intake always writes an
            object; None only for rows provisioned out of band.
        origin: Origin header of the submitting page.
        ip: Client IP (not exposed on the admin read path).
        user_agent: Client user agent (not exposed on the admin read path).
        page_url: Page URL reported by the embed script.
        referrer: Reported referrer, else the Referer header.
        submitted_at: Store-assigned insert timestamp.
    """

    id: str | int | None = None
    site_id: str
    form_id: str | None = None
    data: dict[str, Any] | None = None
    origin: str | None = None
    ip: str | None = None
    user_agent: str | None = None
    page_url: str | None = None
    referrer: str | None = None
    submitted_at: datetime | None = None

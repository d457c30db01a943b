"""Row models for the four row-store collections.

All models are exported from this module for convenient imports:
    from forms_admin.models import AuthCode, FormSession, Site, Submission

- auth_code.py: AuthCode (one-time sign-in codes)
- session.py: FormSession (admin dashboard sessions)
- site.py: Site (client sites allowed to submit)
- submission.py: Submission (stored form payloads)
"""

from forms_admin.models.auth_code import AUTH_CODES_TABLE, AuthCode
from forms_admin.models.session import SESSIONS_TABLE, FormSession
from forms_admin.models.site import SITES_TABLE, Site
from forms_admin.models.submission import SUBMISSIONS_TABLE, Submission

__all__ = [
    "AUTH_CODES_TABLE",
    "SESSIONS_TABLE",
    "SITES_TABLE",
    "SUBMISSIONS_TABLE",
    "AuthCode",
    "FormSession",
    "Site",
    "Submission",
]

"""Session model - admin dashboard sessions.

The plain token lives only in the client's cookie; the row holds its digest.
"""

from datetime import datetime

from pydantic import BaseModel

SESSIONS_TABLE = "forms_sessions"


class FormSession(BaseModel):
    """Admin session row.

    Attributes:
        id: Row id (assigned by the store).
        email: Admin email the session belongs to.
        token_hash: Digest of ``session:{token}``.
        expires_at: Session expiry timestamp.
        ip: Client IP at sign-in.
        user_agent: Client user agent at sign-in.
        last_used_at: Refreshed on each authenticated request.
    """

    id: str | int | None = None
    email: str
    token_hash: str = ""
    expires_at: datetime
    ip: str | None = None
    user_agent: str | None = None
    last_used_at: datetime | None = None

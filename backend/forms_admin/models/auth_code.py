"""Auth code model - one-time sign-in codes.

Created on login request, consumed once on successful verification, never
deleted (expires logically via expires_at). The row id doubles as the
challenge id handed to the client.
"""

from datetime import datetime

from pydantic import BaseModel

AUTH_CODES_TABLE = "forms_auth_codes"


class AuthCode(BaseModel):
    """One-time sign-in code row.

    Attributes:
        id: Challenge id (UUID string).
        email: Normalized admin email.
        code_hash: Digest of ``code:{code}:{email}:{id}``.
        expires_at: Code expiry timestamp.
        consumed_at: Set once on successful verification.
        ip: Requesting client IP.
        user_agent: Requesting user agent.
    """

    id: str
    email: str = ""
    code_hash: str
    expires_at: datetime
    consumed_at: datetime | None = None
    ip: str | None = None
    user_agent: str | None = None

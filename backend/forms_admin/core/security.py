"""Secret generation, digests, and session cookie helpers.

Shared utilities used by the sign-in endpoints and the session dependency.

Pipeline:
- generate_code / generate_challenge_id: one-time sign-in code issuance
- generate_session_token: opaque session token for the cookie
- code_digest / session_digest: context-bound one-way digests for storage
- set_session_cookie / clear_session_cookie: cookie management
- clear_session_cookie_headers: the same expiry for error responses
"""

import hashlib
import hmac
import secrets
import uuid

from fastapi import Response

from forms_admin.core.config import Settings

# 6-digit numeric codes
_CODE_SPACE = 1_000_000
_CODE_LENGTH = 6

# 32 random bytes, URL-safe base64 without padding (43 chars)
_SESSION_TOKEN_BYTES = 32


def normalize_email(email: str | None) -> str:
    """Trim and lowercase an email address (None -> empty string)."""
    return (email or "").strip().lower()


def generate_code() -> str:
    """Generate a zero-padded 6-digit code from a CSPRNG."""
    return str(secrets.randbelow(_CODE_SPACE)).zfill(_CODE_LENGTH)


def generate_challenge_id() -> str:
    """Generate an opaque challenge identifier (also the auth code row id)."""
    return str(uuid.uuid4())


def generate_session_token() -> str:
    """Generate a 32-byte URL-safe session token."""
    return secrets.token_urlsafe(_SESSION_TOKEN_BYTES)


def digest(value: str, settings: Settings) -> str:
    """Hex digest of a context-bound secret.

    HMAC-SHA256 keyed with FORMS_HASH_SECRET when configured, plain SHA-256
    otherwise (rows written by earlier deployments stay verifiable).

    Args:
        value: Context-prefixed secret, e.g. ``"session:<token>"``.
        settings: Application settings.

    Returns:
        64-char lowercase hex digest.
    """
    key = settings.forms_hash_secret.get_secret_value()
    if key:
        return hmac.new(key.encode(), value.encode(), hashlib.sha256).hexdigest()
    return hashlib.sha256(value.encode()).hexdigest()


def code_digest(code: str, email: str, challenge_id: str, settings: Settings) -> str:
    """Digest binding a code to its email and challenge."""
    return digest(f"code:{code}:{email}:{challenge_id}", settings)


def session_digest(token: str, settings: Settings) -> str:
    """Digest of a session token."""
    return digest(f"session:{token}", settings)


def digests_match(expected: str, candidate: str) -> bool:
    """Constant-time comparison of two hex digests."""
    return hmac.compare_digest(expected.encode(), candidate.encode())


def set_session_cookie(
    response: Response,
    token: str,
    settings: Settings,
) -> None:
    """Set the session cookie on a response.

    Security: HttpOnly prevents script access, Secure restricts to HTTPS,
    SameSite=Strict blocks cross-site sends. Max-Age matches the session TTL.

    Args:
        response: FastAPI response object.
        token: Plain session token (never stored server-side).
        settings: Application settings (cookie name, TTL).
    """
    response.set_cookie(
        key=settings.forms_session_cookie,
        value=token,
        max_age=settings.session_ttl_seconds,
        path="/",
        secure=True,
        httponly=True,
        samesite="strict",
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    """Expire the session cookie (Max-Age=0).

    Attributes must match set_session_cookie() for browsers to delete it.
    """
    response.delete_cookie(
        key=settings.forms_session_cookie,
        path="/",
        secure=True,
        httponly=True,
        samesite="strict",
    )


def clear_session_cookie_headers(settings: Settings) -> dict[str, str]:
    """The Set-Cookie header that expires the session, for error responses."""
    response = Response()
    clear_session_cookie(response, settings)
    return {"set-cookie": response.headers["set-cookie"]}

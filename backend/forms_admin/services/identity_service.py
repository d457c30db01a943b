"""Admin sign-in: one-time email codes and opaque session tokens.

Flow:
1. request_code(email) -> LoginChallenge (code emailed, digest stored)
2. verify_code(challenge, code) -> IssuedSession (code consumed, session stored)
3. resolve_session(token) -> ActiveSession | None on every dashboard request
4. logout(token) deletes the session row

Security:
- Plain codes and tokens are never stored or logged; only context-bound
  digests reach the row store.
- Every verify failure produces the same message so callers cannot tell
  a wrong code from an unknown, expired or already-used challenge.
- Code consumption is a conditional update: two concurrent verifications
  of the same code cannot both mint a session.
"""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import structlog

from forms_admin.core.config import Settings
from forms_admin.core.database import RowStoreClient
from forms_admin.core.email import send_code_email
from forms_admin.core.errors import (
    DataStoreError,
    ForbiddenError,
    UnauthorizedError,
    ValidationError,
)
from forms_admin.core.request_meta import RequestMeta
from forms_admin.core.security import (
    code_digest,
    digests_match,
    generate_challenge_id,
    generate_code,
    generate_session_token,
    normalize_email,
    session_digest,
)
from forms_admin.repositories.auth_code_repository import AuthCodeRepository
from forms_admin.repositories.session_repository import SessionRepository

logger = structlog.get_logger()

EMAIL_REQUIRED_MSG = "Email is required."
EMAIL_NOT_AUTHORIZED_MSG = "Email is not authorized."
VERIFY_FIELDS_REQUIRED_MSG = "Email, code, and challenge ID are required."
INVALID_CODE_MSG = "Invalid or expired code."


@dataclass(frozen=True)
class LoginChallenge:
    """State carried from the login step to the verify step.

    Attributes:
        email: Normalized admin email.
        challenge_id: Auth code row id.
        expires_in_minutes: Code TTL (set when issued, informational on verify).
    """

    email: str
    challenge_id: str
    expires_in_minutes: int | None = None


@dataclass(frozen=True)
class IssuedSession:
    """A freshly minted session.

    Attributes:
        token: Plain session token. Delivered only via the cookie.
        email: Session owner.
        expires_at: Session expiry.
        max_age_seconds: Cookie Max-Age.
    """

    token: str
    email: str
    expires_at: datetime
    max_age_seconds: int


@dataclass(frozen=True)
class ActiveSession:
    """A resolved, non-expired session."""

    email: str
    expires_at: datetime


class IdentityService:
    """Sign-in code and session lifecycle.

    Args:
        store: Row store client.
        settings: Application settings (allow-list, TTLs, hash key).
    """

    def __init__(self, store: RowStoreClient, settings: Settings) -> None:
        self._store = store
        self._settings = settings

    def is_allowed_admin(self, email: str) -> bool:
        """Exact, case-insensitive allow-list membership."""
        return normalize_email(email) in self._settings.admin_emails

    async def request_code(self, email: str | None, meta: RequestMeta) -> LoginChallenge:
        """Issue a sign-in code and email it to an allow-listed admin.

        Args:
            email: Address as typed by the user.
            meta: Request metadata (stored with the code, shown in the email).

        Returns:
            LoginChallenge for the verify step.

        Raises:
            ValidationError: Email missing.
            ForbiddenError: Email not on the admin allow-list.
            DataStoreError: Code could not be stored.
            MailDeliveryError: Code email could not be sent.
        """
        normalized = normalize_email(email)
        if not normalized:
            raise ValidationError(EMAIL_REQUIRED_MSG)

        if not self.is_allowed_admin(normalized):
            logger.info("sign_in_code_refused", ip=meta.ip)
            raise ForbiddenError(EMAIL_NOT_AUTHORIZED_MSG)

        ttl_minutes = self._settings.forms_code_ttl_minutes
        code = generate_code()
        challenge_id = generate_challenge_id()
        expires_at = datetime.now(UTC) + timedelta(minutes=ttl_minutes)

        await AuthCodeRepository.create(
            self._store,
            challenge_id=challenge_id,
            email=normalized,
            code_hash=code_digest(code, normalized, challenge_id, self._settings),
            expires_at=expires_at,
            ip=meta.ip,
            user_agent=meta.user_agent,
        )

        await send_code_email(
            self._settings,
            to_email=normalized,
            code=code,
            expires_minutes=ttl_minutes,
            ip=meta.ip,
            user_agent=meta.user_agent,
        )

        logger.info("sign_in_code_issued", email=normalized, challenge_id=challenge_id)
        return LoginChallenge(
            email=normalized,
            challenge_id=challenge_id,
            expires_in_minutes=ttl_minutes,
        )

    async def verify_code(
        self,
        challenge: LoginChallenge,
        code: str | None,
        meta: RequestMeta,
    ) -> IssuedSession:
        """Exchange a valid code for a new session.

        Args:
            challenge: Email + challenge id from the login step.
            code: Code as typed by the user.
            meta: Request metadata stored with the session.

        Returns:
            IssuedSession carrying the plain token for the cookie.

        Raises:
            ValidationError: Email, code or challenge id missing.
            UnauthorizedError: Any code check failed (single generic message).
            DataStoreError: Row store failure.
        """
        email = normalize_email(challenge.email)
        challenge_id = (challenge.challenge_id or "").strip()
        code = (code or "").strip()

        if not email or not code or not challenge_id:
            raise ValidationError(VERIFY_FIELDS_REQUIRED_MSG)

        now = datetime.now(UTC)
        record = await AuthCodeRepository.get_active(
            self._store,
            challenge_id=challenge_id,
            email=email,
            now=now,
        )
        if record is None:
            logger.info("sign_in_code_rejected", reason="no_active_code")
            raise UnauthorizedError(INVALID_CODE_MSG)

        expected = code_digest(code, email, challenge_id, self._settings)
        if not digests_match(record.code_hash, expected):
            logger.info("sign_in_code_rejected", reason="mismatch")
            raise UnauthorizedError(INVALID_CODE_MSG)

        consumed = await AuthCodeRepository.consume(
            self._store,
            challenge_id=challenge_id,
            consumed_at=now,
        )
        if not consumed:
            logger.info("sign_in_code_rejected", reason="already_consumed")
            raise UnauthorizedError(INVALID_CODE_MSG)

        token = generate_session_token()
        ttl_seconds = self._settings.session_ttl_seconds
        expires_at = now + timedelta(seconds=ttl_seconds)

        await SessionRepository.create(
            self._store,
            email=email,
            token_hash=session_digest(token, self._settings),
            expires_at=expires_at,
            ip=meta.ip,
            user_agent=meta.user_agent,
            last_used_at=now,
        )

        logger.info("session_created", email=email)
        return IssuedSession(
            token=token,
            email=email,
            expires_at=expires_at,
            max_age_seconds=ttl_seconds,
        )

    async def resolve_session(self, token: str | None) -> ActiveSession | None:
        """Resolve a cookie token to an active session.

        Fails closed: a missing, unknown or expired token returns None.
        The last_used_at refresh is best-effort; its failure is logged and
        does not invalidate the session.

        Raises:
            DataStoreError: The session lookup itself failed.
        """
        if not token:
            return None

        token_hash = session_digest(token, self._settings)
        now = datetime.now(UTC)
        session = await SessionRepository.get_active_by_hash(
            self._store,
            token_hash=token_hash,
            now=now,
        )
        if session is None:
            return None

        try:
            await SessionRepository.touch(
                self._store,
                token_hash=token_hash,
                last_used_at=now,
            )
        except DataStoreError as exc:
            logger.warning(
                "session_refresh_failed",
                status_code=exc.status_code,
            )

        return ActiveSession(email=session.email, expires_at=session.expires_at)

    async def logout(self, token: str | None) -> None:
        """Delete the session for this token, if any. Idempotent."""
        if not token:
            return
        await SessionRepository.delete_by_hash(
            self._store,
            token_hash=session_digest(token, self._settings),
        )

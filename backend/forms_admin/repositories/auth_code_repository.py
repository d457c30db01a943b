"""Repository for AuthCode row operations.

One-time sign-in codes stored as context-bound digests, looked up by
(challenge id, email) and consumed with a conditional update.
"""

from datetime import datetime

from forms_admin.core.database import RowStoreClient
from forms_admin.core.query import Query
from forms_admin.models.auth_code import AUTH_CODES_TABLE, AuthCode


class AuthCodeRepository:
    """Stateless repository for forms_auth_codes operations.

    All methods are static; no instance state.
    """

    @staticmethod
    async def create(
        store: RowStoreClient,
        *,
        challenge_id: str,
        email: str,
        code_hash: str,
        expires_at: datetime,
        ip: str,
        user_agent: str,
    ) -> None:
        """Store a new sign-in code.

        Args:
            store: Row store client.
            challenge_id: Row id handed back to the client.
            email: Normalized admin email.
            code_hash: Digest of the plain code bound to email + challenge.
            expires_at: Code expiry timestamp.
            ip: Requesting client IP.
            user_agent: Requesting user agent.
        """
        await store.insert(
            AUTH_CODES_TABLE,
            {
                "id": challenge_id,
                "email": email,
                "code_hash": code_hash,
                "expires_at": expires_at.isoformat(),
                "ip": ip,
                "user_agent": user_agent,
            },
        )

    @staticmethod
    async def get_active(
        store: RowStoreClient,
        *,
        challenge_id: str,
        email: str,
        now: datetime,
    ) -> AuthCode | None:
        """Look up an unconsumed, unexpired code for (challenge id, email).

        Returns:
            AuthCode if found, None otherwise.
        """
        query = (
            Query(AUTH_CODES_TABLE)
            .select("id", "email", "code_hash", "expires_at", "consumed_at")
            .eq("email", email)
            .eq("id", challenge_id)
            .is_null("consumed_at")
            .gt("expires_at", now)
            .limit(1)
        )
        rows = await store.select(query)
        return AuthCode.model_validate(rows[0]) if rows else None

    @staticmethod
    async def consume(
        store: RowStoreClient,
        *,
        challenge_id: str,
        consumed_at: datetime,
    ) -> bool:
        """Mark a code consumed if it is still unconsumed.

        The ``consumed_at IS NULL`` filter makes this a conditional update,
        so of two racing verifications only one sees a row come back.

        Returns:
            True if this call consumed the code, False if it was already used.
        """
        query = Query(AUTH_CODES_TABLE).eq("id", challenge_id).is_null("consumed_at")
        rows = await store.update(
            query,
            {"consumed_at": consumed_at.isoformat()},
            returning=True,
        )
        return bool(rows)

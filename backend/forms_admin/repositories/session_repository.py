"""Repository for admin session row operations."""

from datetime import datetime

from forms_admin.core.database import RowStoreClient
from forms_admin.core.query import Query
from forms_admin.models.session import SESSIONS_TABLE, FormSession


class SessionRepository:
    """Stateless repository for forms_sessions operations.

    Sessions are addressed by token digest; the plain token never reaches
    the store.
    """

    @staticmethod
    async def create(
        store: RowStoreClient,
        *,
        email: str,
        token_hash: str,
        expires_at: datetime,
        ip: str,
        user_agent: str,
        last_used_at: datetime,
    ) -> None:
        """Store a new session row."""
        await store.insert(
            SESSIONS_TABLE,
            {
                "email": email,
                "token_hash": token_hash,
                "expires_at": expires_at.isoformat(),
                "ip": ip,
                "user_agent": user_agent,
                "last_used_at": last_used_at.isoformat(),
            },
        )

    @staticmethod
    async def get_active_by_hash(
        store: RowStoreClient,
        *,
        token_hash: str,
        now: datetime,
    ) -> FormSession | None:
        """Look up a non-expired session by token digest.

        Returns:
            FormSession if found, None otherwise.
        """
        query = (
            Query(SESSIONS_TABLE)
            .select("id", "email", "expires_at")
            .eq("token_hash", token_hash)
            .gt("expires_at", now)
            .limit(1)
        )
        rows = await store.select(query)
        return FormSession.model_validate(rows[0]) if rows else None

    @staticmethod
    async def touch(
        store: RowStoreClient,
        *,
        token_hash: str,
        last_used_at: datetime,
    ) -> None:
        """Refresh last_used_at for a session."""
        await store.update(
            Query(SESSIONS_TABLE).eq("token_hash", token_hash),
            {"last_used_at": last_used_at.isoformat()},
        )

    @staticmethod
    async def delete_by_hash(store: RowStoreClient, *, token_hash: str) -> None:
        """Delete the session with this token digest (no-op if absent)."""
        await store.delete(Query(SESSIONS_TABLE).eq("token_hash", token_hash))

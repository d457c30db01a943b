"""Repository for form submission rows.

Submissions are insert-only. The admin read path projects a fixed column
set that leaves out ip and user_agent.
"""

from typing import Any

from forms_admin.core.database import RowStoreClient
from forms_admin.core.query import Query
from forms_admin.models.submission import SUBMISSIONS_TABLE, Submission

LIST_COLUMNS = (
    "id",
    "site_id",
    "form_id",
    "submitted_at",
    "origin",
    "page_url",
    "referrer",
    "data",
)


class SubmissionRepository:
    """Stateless repository for forms_submissions operations."""

    @staticmethod
    async def create(
        store: RowStoreClient,
        *,
        site_id: str,
        form_id: str | None,
        data: dict[str, Any],
        origin: str | None,
        ip: str | None,
        user_agent: str | None,
        page_url: str | None,
        referrer: str | None,
    ) -> None:
        """Store one submission. submitted_at is assigned by the store."""
        await store.insert(
            SUBMISSIONS_TABLE,
            {
                "site_id": site_id,
                "form_id": form_id,
                "data": data,
                "origin": origin,
                "ip": ip,
                "user_agent": user_agent,
                "page_url": page_url,
                "referrer": referrer,
            },
        )

    @staticmethod
    async def list_recent(
        store: RowStoreClient,
        *,
        limit: int,
        site_id: str | None = None,
    ) -> list[Submission]:
        """List the newest submissions, optionally for one site.

        Args:
            store: Row store client.
            limit: Row cap (already clamped by the caller).
            site_id: Optional site filter.

        Returns:
            Submissions ordered by submitted_at descending.
        """
        query = Query(SUBMISSIONS_TABLE).select(*LIST_COLUMNS)
        if site_id:
            query.eq("site_id", site_id)
        query.order("submitted_at", descending=True).limit(limit)

        rows = await store.select(query)
        return [Submission.model_validate(row) for row in rows]

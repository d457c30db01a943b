"""Read queries behind the session-gated dashboard endpoints."""

import re

from forms_admin.core.database import RowStoreClient
from forms_admin.models.site import Site
from forms_admin.models.submission import Submission
from forms_admin.repositories.site_repository import SiteRepository
from forms_admin.repositories.submission_repository import SubmissionRepository

DEFAULT_SUBMISSION_LIMIT = 50
MAX_SUBMISSION_LIMIT = 200

# Leading integer, like parseInt: "25", " 7", "10abc", "-3"
_LEADING_INT_RE = re.compile(r"\s*([+-]?\d+)")


def parse_limit(raw: str | None) -> int:
    """Parse the ``limit`` query value.

    Missing, non-numeric or zero values fall back to 50; everything else is
    clamped to [1, 200].

    Examples:
        >>> parse_limit("9999")
        200
        >>> parse_limit("abc")
        50
        >>> parse_limit("0")
        50
    """
    match = _LEADING_INT_RE.match(raw or "")
    value = int(match.group(1)) if match else 0
    if value == 0:
        value = DEFAULT_SUBMISSION_LIMIT
    return min(max(value, 1), MAX_SUBMISSION_LIMIT)


class AdminQueryService:
    """Sites and submissions for the dashboard.

    Args:
        store: Row store client.
    """

    def __init__(self, store: RowStoreClient) -> None:
        self._store = store

    async def list_sites(self) -> list[Site]:
        """All sites ascending by site_id (small, operator-provisioned list)."""
        return await SiteRepository.list_all(self._store)

    async def list_submissions(
        self,
        limit: str | None = None,
        site_id: str | None = None,
    ) -> list[Submission]:
        """Newest submissions first, capped and optionally filtered by site."""
        return await SubmissionRepository.list_recent(
            self._store,
            limit=parse_limit(limit),
            site_id=(site_id or "").strip() or None,
        )

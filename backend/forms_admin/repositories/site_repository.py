"""Repository for client site lookups (read-only)."""

from forms_admin.core.database import RowStoreClient
from forms_admin.core.query import Query
from forms_admin.models.site import SITES_TABLE, Site


class SiteRepository:
    """Stateless repository for forms_sites reads."""

    @staticmethod
    async def get_by_site_id(store: RowStoreClient, site_id: str) -> Site | None:
        """Fetch one site including its shared key.

        Returns:
            Site if found, None otherwise.
        """
        query = (
            Query(SITES_TABLE)
            .select("site_id", "site_name", "site_key", "allowed_origins")
            .eq("site_id", site_id)
            .limit(1)
        )
        rows = await store.select(query)
        return Site.model_validate(rows[0]) if rows else None

    @staticmethod
    async def list_all(store: RowStoreClient) -> list[Site]:
        """List every site without keys, ascending by site_id."""
        query = (
            Query(SITES_TABLE)
            .select("site_id", "site_name", "allowed_origins")
            .order("site_id")
        )
        rows = await store.select(query)
        return [Site.model_validate(row) for row in rows]

"""Row store client and dependency.

The backing store is Supabase's PostgREST endpoint. Every call carries the
service-role credential (``apikey`` + bearer) injected here; callers never
see or supply it. Each logical operation is exactly one HTTP round trip:
no transactions, no batching.
"""

import json
from typing import Any

import httpx

from forms_admin.core.config import Settings, settings
from forms_admin.core.errors import DataStoreError
from forms_admin.core.query import REST_PREFIX, Query

_RETURN_MINIMAL = {"Prefer": "return=minimal"}
_RETURN_REPRESENTATION = {"Prefer": "return=representation"}


class RowStoreClient:
    """Credentialed JSON client for the row store.

    Args:
        base_url: Store base URL (trailing slash trimmed).
        service_key: Service-role key sent as ``apikey`` and bearer token.
        timeout: Per-request timeout in seconds.
        transport: Optional httpx transport (tests inject a MockTransport).
    """

    def __init__(
        self,
        base_url: str,
        service_key: str,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._service_key = service_key
        self._timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(
        cls,
        app_settings: Settings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "RowStoreClient":
        """Build a client from application settings."""
        return cls(
            app_settings.supabase_base_url,
            app_settings.supabase_service_role_key.get_secret_value(),
            timeout=app_settings.supabase_timeout_seconds,
            transport=transport,
        )

    async def fetch_json(
        self,
        path_and_query: str,
        *,
        method: str = "GET",
        headers: dict[str, str] | None = None,
        body: Any = None,
    ) -> Any:
        """Perform one request and return the parsed JSON body.

        Args:
            path_and_query: Path relative to the base URL, with query string.
            method: HTTP method.
            headers: Extra headers (e.g., ``Prefer``).
            body: JSON-serializable request body.

        Returns:
            Parsed JSON, or None for 204 / empty responses.

        Raises:
            DataStoreError: Store not configured, transport failure, or
                any non-2xx response.
        """
        if not self._base_url or not self._service_key:
            raise DataStoreError("Row store is not configured.")

        path = path_and_query if path_and_query.startswith("/") else f"/{path_and_query}"
        request_headers = {
            "apikey": self._service_key,
            "Authorization": f"Bearer {self._service_key}",
            "Content-Type": "application/json",
            **(headers or {}),
        }

        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                resp = await client.request(
                    method,
                    f"{self._base_url}{path}",
                    headers=request_headers,
                    content=json.dumps(body) if body is not None else None,
                    timeout=self._timeout,
                )
        except httpx.HTTPError as exc:
            raise DataStoreError(
                f"Row store request failed: {type(exc).__name__}"
            ) from exc

        if resp.is_error:
            raise DataStoreError(
                f"Row store error: {resp.status_code}",
                status_code=resp.status_code,
                body=resp.text,
            )

        if resp.status_code == 204 or not resp.content:
            return None
        return resp.json()

    async def select(self, query: Query) -> list[dict[str, Any]]:
        """Fetch rows matching a query."""
        rows = await self.fetch_json(query.path)
        return rows or []

    async def insert(
        self,
        table: str,
        row: dict[str, Any],
        *,
        returning: bool = False,
    ) -> list[dict[str, Any]] | None:
        """Insert one row. Returns the stored row(s) when ``returning``."""
        return await self.fetch_json(
            Query(table).path,
            method="POST",
            headers=_RETURN_REPRESENTATION if returning else _RETURN_MINIMAL,
            body=row,
        )

    async def update(
        self,
        query: Query,
        values: dict[str, Any],
        *,
        returning: bool = False,
    ) -> list[dict[str, Any]] | None:
        """Patch rows matching the query's filters.

        With ``returning=True`` the affected rows come back, which lets
        callers detect a conditional update that matched nothing.
        """
        rows = await self.fetch_json(
            query.path,
            method="PATCH",
            headers=_RETURN_REPRESENTATION if returning else _RETURN_MINIMAL,
            body=values,
        )
        if returning:
            return rows or []
        return rows

    async def delete(self, query: Query) -> None:
        """Delete rows matching the query's filters."""
        await self.fetch_json(query.path, method="DELETE", headers=_RETURN_MINIMAL)

    def __repr__(self) -> str:
        return f"RowStoreClient({self._base_url}{REST_PREFIX})"


def get_row_store() -> RowStoreClient:
    """Dependency that provides a row store client."""
    return RowStoreClient.from_settings(settings)

"""Typed query builder for the PostgREST row store.

Call sites never hand-format query strings. Column names are checked
against a strict identifier pattern and every filter value is
percent-encoded.

Supported grammar (the subset the service uses):
- ``select=a,b``       column projection
- ``col=eq.value``     equality
- ``col=gt.value``     strictly greater than
- ``col=is.null``      null check
- ``order=col.asc``    ordering (``.desc`` for descending)
- ``limit=N``          row cap

Usage:
    query = (
        Query("forms_sessions")
        .select("id", "email", "expires_at")
        .eq("token_hash", token_hash)
        .gt("expires_at", now)
        .limit(1)
    )
    rows = await store.select(query)
"""

import re
from datetime import datetime
from urllib.parse import quote

REST_PREFIX = "/rest/v1"

_IDENTIFIER_RE = re.compile(r"^[a-z_][a-z0-9_]*$")

FilterValue = str | int | datetime


def _check_identifier(name: str) -> str:
    """Reject anything that is not a plain snake_case identifier."""
    if not _IDENTIFIER_RE.match(name):
        msg = f"Invalid identifier: {name!r}"
        raise ValueError(msg)
    return name


def _encode_value(value: FilterValue) -> str:
    if isinstance(value, datetime):
        value = value.isoformat()
    return quote(str(value), safe="")


class Query:
    """Fluent builder for one row-store request path.

    Methods mutate and return the builder so calls chain. ``path`` renders
    ``/rest/v1/{table}?select=...&{filters}&order=...&limit=...``.
    """

    def __init__(self, table: str) -> None:
        self.table = _check_identifier(table)
        self._columns: list[str] = []
        self._filters: list[tuple[str, str]] = []
        self._order: str | None = None
        self._limit: int | None = None

    def select(self, *columns: str) -> "Query":
        """Project the given columns."""
        self._columns.extend(_check_identifier(c) for c in columns)
        return self

    def eq(self, column: str, value: FilterValue) -> "Query":
        """Filter ``column = value``."""
        self._filters.append((_check_identifier(column), f"eq.{_encode_value(value)}"))
        return self

    def gt(self, column: str, value: FilterValue) -> "Query":
        """Filter ``column > value``."""
        self._filters.append((_check_identifier(column), f"gt.{_encode_value(value)}"))
        return self

    def is_null(self, column: str) -> "Query":
        """Filter ``column IS NULL``."""
        self._filters.append((_check_identifier(column), "is.null"))
        return self

    def order(self, column: str, *, descending: bool = False) -> "Query":
        """Order by one column."""
        direction = "desc" if descending else "asc"
        self._order = f"{_check_identifier(column)}.{direction}"
        return self

    def limit(self, count: int) -> "Query":
        """Cap the number of returned rows."""
        if count < 1:
            msg = f"limit must be positive, got {count}"
            raise ValueError(msg)
        self._limit = count
        return self

    @property
    def path(self) -> str:
        """Rendered path and query string."""
        params: list[str] = []
        if self._columns:
            params.append(f"select={','.join(self._columns)}")
        params.extend(f"{column}={expr}" for column, expr in self._filters)
        if self._order:
            params.append(f"order={self._order}")
        if self._limit is not None:
            params.append(f"limit={self._limit}")

        base = f"{REST_PREFIX}/{self.table}"
        return f"{base}?{'&'.join(params)}" if params else base

    def __repr__(self) -> str:
        return f"Query({self.path!r})"

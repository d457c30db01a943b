"""Shared test fixtures.

The row store is replaced by ``FakeRowStore``, an in-memory emulation of
the PostgREST subset the service uses, served through
``httpx.MockTransport``. API tests point ``get_row_store`` at it through
``app.dependency_overrides``, so requests travel the real client, query
builder, and JSON encoding paths.
"""

import json
import uuid
from collections.abc import AsyncGenerator, Iterator
from datetime import UTC, datetime
from itertools import count
from typing import Any
from unittest.mock import AsyncMock, patch

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from pydantic import SecretStr

from forms_admin.core.config import settings
from forms_admin.core.database import RowStoreClient
from forms_admin.core.query import REST_PREFIX

# Test row store (the transport never leaves the process)
TEST_STORE_URL = "https://store.test"
TEST_SERVICE_KEY = "test-service-role-key"  # nosec B105  # gitleaks:allow

# Admin allow-list used by every test
ADMIN_EMAIL = "ops@example.com"
SECOND_ADMIN_EMAIL = "owner@example.com"

# A provisioned client site
SITE_ID = "acme"
SITE_KEY = "acme-site-key"  # nosec B105  # gitleaks:allow
SITE_ORIGIN = "https://acme.example"

PATCH_SEND_CODE_EMAIL = "forms_admin.services.identity_service.send_code_email"

# Columns the store fills in on insert
_GENERATED_IDS = {"forms_sessions", "forms_submissions"}
_TIMESTAMP_DEFAULTS = {"forms_submissions": "submitted_at"}


# =============================================================================
# PostgREST emulator
# =============================================================================


def _as_comparable(value: Any) -> Any:
    """Parse ISO timestamps so gt/order compare chronologically."""
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            return value
    return value


def _matches(row: dict[str, Any], column: str, expr: str) -> bool:
    op, _, operand = expr.partition(".")
    value = row.get(column)
    if op == "eq":
        return value is not None and str(value) == operand
    if op == "gt":
        return value is not None and _as_comparable(value) > _as_comparable(operand)
    if op == "is" and operand == "null":
        return value is None
    msg = f"Unsupported filter: {column}={expr}"
    raise AssertionError(msg)


class FakeRowStore:
    """In-memory PostgREST stand-in.

    Supports select/eq/gt/is.null/order/limit reads, POST inserts, PATCH
    and DELETE with filters, and ``Prefer: return=representation``.

    Attributes:
        tables: Rows per table, mutated in place.
        requests: Every request received, for assertions.
        failures: ``(method, table) -> status`` responses to force.
    """

    def __init__(self) -> None:
        self.tables: dict[str, list[dict[str, Any]]] = {}
        self.requests: list[httpx.Request] = []
        self.failures: dict[tuple[str, str], int] = {}
        self._ids = count(1)

    def rows(self, table: str) -> list[dict[str, Any]]:
        return self.tables.setdefault(table, [])

    def add_site(
        self,
        site_id: str = SITE_ID,
        *,
        site_key: str = SITE_KEY,
        allowed_origins: Any = None,
        site_name: str | None = "Acme Co",
    ) -> dict[str, Any]:
        row = {
            "site_id": site_id,
            "site_name": site_name,
            "site_key": site_key,
            "allowed_origins": [SITE_ORIGIN] if allowed_origins is None else allowed_origins,
        }
        self.rows("forms_sites").append(row)
        return row

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if request.headers.get("apikey") != TEST_SERVICE_KEY:
            return httpx.Response(401, json={"message": "Invalid API key"})

        table = request.url.path.removeprefix(f"{REST_PREFIX}/")
        forced = self.failures.get((request.method, table))
        if forced:
            return httpx.Response(forced, json={"message": "forced failure"})

        params = request.url.params
        filters = [
            (key, value)
            for key, value in params.multi_items()
            if key not in ("select", "order", "limit")
        ]
        rows = self.rows(table)
        matched = [
            row for row in rows if all(_matches(row, col, expr) for col, expr in filters)
        ]
        wants_rows = "return=representation" in request.headers.get("prefer", "")

        if request.method == "GET":
            return httpx.Response(200, json=self._read(matched, params))

        if request.method == "POST":
            body = json.loads(request.content)
            inserted = [self._insert(table, row) for row in (body if isinstance(body, list) else [body])]
            return httpx.Response(201, json=inserted) if wants_rows else httpx.Response(201)

        if request.method == "PATCH":
            values = json.loads(request.content)
            for row in matched:
                row.update(values)
            return httpx.Response(200, json=matched) if wants_rows else httpx.Response(204)

        if request.method == "DELETE":
            self.tables[table] = [row for row in rows if row not in matched]
            return httpx.Response(204)

        return httpx.Response(405)

    def _read(self, rows: list[dict[str, Any]], params: httpx.QueryParams) -> list[dict[str, Any]]:
        order = params.get("order")
        if order:
            column, _, direction = order.partition(".")
            rows = sorted(
                rows,
                key=lambda row: str(row.get(column) or ""),
                reverse=direction == "desc",
            )
        limit = params.get("limit")
        if limit:
            rows = rows[: int(limit)]
        select = params.get("select")
        if select:
            columns = select.split(",")
            rows = [{col: row.get(col) for col in columns} for row in rows]
        return rows

    def _insert(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        stored = dict(row)
        if table in _GENERATED_IDS:
            stored.setdefault("id", next(self._ids))
        timestamp_column = _TIMESTAMP_DEFAULTS.get(table)
        if timestamp_column:
            stored.setdefault(timestamp_column, datetime.now(UTC).isoformat())
        self.rows(table).append(stored)
        return stored


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def row_store() -> FakeRowStore:
    """Empty in-memory row store with one provisioned site."""
    store = FakeRowStore()
    store.add_site()
    return store


@pytest.fixture
def store_client(row_store: FakeRowStore) -> RowStoreClient:
    """Real RowStoreClient wired to the in-memory store."""
    return RowStoreClient(
        TEST_STORE_URL,
        TEST_SERVICE_KEY,
        transport=row_store.transport(),
    )


@pytest_asyncio.fixture
async def client(store_client: RowStoreClient) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against the app with the row store overridden."""
    from forms_admin.core.database import get_row_store
    from forms_admin.main import app

    app.dependency_overrides[get_row_store] = lambda: store_client
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.pop(get_row_store, None)


@pytest.fixture
def mock_send_code() -> Iterator[AsyncMock]:
    """Capture sign-in code emails instead of calling Resend."""
    with patch(PATCH_SEND_CODE_EMAIL, new_callable=AsyncMock) as mock:
        yield mock


def session_cookie_header(token: str) -> dict[str, str]:
    """Cookie header for an authenticated request.

    The session cookie is Secure, so httpx will not replay it over the
    plain-http test transport on its own.
    """
    return {"Cookie": f"{settings.forms_session_cookie}={token}"}


def session_token_from(response: httpx.Response) -> str | None:
    """Pull the session token out of a Set-Cookie header."""
    for header in response.headers.get_list("set-cookie"):
        name, _, rest = header.partition("=")
        if name == settings.forms_session_cookie:
            return rest.split(";", 1)[0] or None
    return None


async def sign_in(client: AsyncClient, mock_send_code: AsyncMock, email: str = ADMIN_EMAIL) -> str:
    """Run login + verify and return the plain session token."""
    login = await client.post("/api/forms/login", json={"email": email})
    assert login.status_code == 200
    code = mock_send_code.call_args.kwargs["code"]

    verify = await client.post(
        "/api/forms/verify",
        json={"email": email, "code": code, "challengeId": login.json()["challengeId"]},
    )
    assert verify.status_code == 200
    token = session_token_from(verify)
    assert token
    return token


@pytest_asyncio.fixture
async def session_token(client: AsyncClient, mock_send_code: AsyncMock) -> str:
    """A valid session token for ADMIN_EMAIL."""
    return await sign_in(client, mock_send_code)


# =============================================================================
# Autouse Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def configure_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    """Known settings for every test, independent of the host environment."""
    monkeypatch.setattr(settings, "environment", "test")
    monkeypatch.setattr(settings, "forms_admin_emails", f"{ADMIN_EMAIL}, {SECOND_ADMIN_EMAIL}")
    monkeypatch.setattr(settings, "forms_hash_secret", SecretStr(""))
    monkeypatch.setattr(settings, "forms_code_ttl_minutes", 10)
    monkeypatch.setattr(settings, "forms_session_ttl_hours", 168)
    monkeypatch.setattr(settings, "resend_api_key", SecretStr("re_test_key"))
    monkeypatch.setattr(settings, "google_service_account_email", "")
    monkeypatch.setattr(settings, "google_private_key", SecretStr(""))
    monkeypatch.setattr(settings, "google_spreadsheet_id", "")


@pytest.fixture(autouse=True)
def disable_rate_limiting() -> Iterator[None]:
    """Disable rate limiting during tests.

    Security: Rate limiting is tested separately; disable for other tests
    to avoid flaky failures from rate limit triggers.

    Yields:
        None (autouse fixture).
    """
    from forms_admin.core.rate_limiting import limiter

    original_enabled = limiter.enabled
    limiter.enabled = False

    yield

    limiter.enabled = original_enabled

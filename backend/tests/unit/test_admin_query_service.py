"""Tests for dashboard queries and the submissions limit parser."""

from datetime import UTC, datetime, timedelta

import pytest

from forms_admin.services.admin_query_service import AdminQueryService, parse_limit


class TestParseLimit:
    """Tests for parse_limit()."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            (None, 50),
            ("", 50),
            ("abc", 50),
            ("0", 50),
            ("25", 25),
            (" 7", 7),
            ("10abc", 10),
            ("200", 200),
            ("201", 200),
            ("9999", 200),
            ("-3", 1),
        ],
    )
    def test_parse_limit(self, raw, expected):
        assert parse_limit(raw) == expected


def _seed_submissions(row_store, count: int, site_id: str = "acme") -> None:
    base = datetime(2025, 1, 1, tzinfo=UTC)
    for i in range(count):
        row_store.rows("forms_submissions").append(
            {
                "id": len(row_store.rows("forms_submissions")) + 1,
                "site_id": site_id,
                "form_id": None,
                "data": {"n": i},
                "origin": None,
                "ip": "10.0.0.1",
                "user_agent": "ua",
                "page_url": None,
                "referrer": None,
                "submitted_at": (base + timedelta(minutes=i)).isoformat(),
            }
        )


class TestAdminQueryService:
    """Tests for AdminQueryService."""

    async def test_list_sites_sorted_without_keys(self, store_client, row_store):
        row_store.add_site("beta", site_key="k2", allowed_origins=[])
        row_store.add_site("alpha", site_key="k3", allowed_origins=[])

        sites = await AdminQueryService(store_client).list_sites()

        assert [s.site_id for s in sites] == ["acme", "alpha", "beta"]
        assert all(s.site_key is None for s in sites)

    async def test_list_submissions_newest_first(self, store_client, row_store):
        _seed_submissions(row_store, 3)

        rows = await AdminQueryService(store_client).list_submissions()

        assert [r.data["n"] for r in rows] == [2, 1, 0]

    async def test_list_submissions_filters_by_site(self, store_client, row_store):
        _seed_submissions(row_store, 2, site_id="acme")
        _seed_submissions(row_store, 3, site_id="other")

        rows = await AdminQueryService(store_client).list_submissions(site_id=" other ")

        assert len(rows) == 3
        assert {r.site_id for r in rows} == {"other"}

    async def test_list_submissions_respects_limit(self, store_client, row_store):
        _seed_submissions(row_store, 5)

        rows = await AdminQueryService(store_client).list_submissions(limit="2")

        assert len(rows) == 2

    async def test_projection_excludes_ip_and_user_agent(self, store_client, row_store):
        _seed_submissions(row_store, 1)

        await AdminQueryService(store_client).list_submissions()

        select = row_store.requests[-1].url.params["select"]
        assert "ip" not in select.split(",")
        assert "user_agent" not in select.split(",")

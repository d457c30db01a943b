"""Tests for the row-store query builder."""

from datetime import UTC, datetime

import pytest

from forms_admin.core.query import Query


class TestQueryPath:
    """Tests for rendered request paths."""

    def test_bare_table_has_no_query_string(self):
        """A query with no clauses renders just the table path."""
        assert Query("forms_sites").path == "/rest/v1/forms_sites"

    def test_clauses_render_in_fixed_order(self):
        """select, filters, order, then limit regardless of call order."""
        query = (
            Query("forms_submissions")
            .limit(5)
            .order("submitted_at", descending=True)
            .eq("site_id", "acme")
            .select("id", "data")
        )
        assert query.path == (
            "/rest/v1/forms_submissions?select=id,data&site_id=eq.acme"
            "&order=submitted_at.desc&limit=5"
        )

    def test_order_defaults_to_ascending(self):
        """order() without descending sorts ascending."""
        assert Query("forms_sites").order("site_id").path.endswith("order=site_id.asc")

    def test_is_null_filter(self):
        """is_null renders the is.null operator."""
        assert Query("forms_auth_codes").is_null("consumed_at").path.endswith(
            "consumed_at=is.null"
        )

    def test_filter_values_are_percent_encoded(self):
        """Reserved characters in values cannot inject extra parameters."""
        path = Query("forms_sites").eq("site_id", "a&b=c,d").path
        assert path == "/rest/v1/forms_sites?site_id=eq.a%26b%3Dc%2Cd"

    def test_email_values_are_encoded(self):
        """'@' and '+' are encoded so the store sees the literal address."""
        path = Query("forms_auth_codes").eq("email", "ops+x@example.com").path
        assert "email=eq.ops%2Bx%40example.com" in path

    def test_datetime_values_use_isoformat(self):
        """Datetimes render as ISO 8601 with the offset encoded."""
        when = datetime(2025, 1, 2, 3, 4, 5, tzinfo=UTC)
        path = Query("forms_sessions").gt("expires_at", when).path
        assert path.endswith("expires_at=gt.2025-01-02T03%3A04%3A05%2B00%3A00")

    def test_integer_values(self):
        """Non-string values are stringified."""
        assert Query("forms_sessions").eq("id", 42).path.endswith("id=eq.42")


class TestQueryValidation:
    """Tests for identifier and limit checks."""

    @pytest.mark.parametrize("name", ["Sites", "forms-sites", "x;drop", "", "1abc"])
    def test_rejects_invalid_table_names(self, name):
        """Only snake_case identifiers are accepted as table names."""
        with pytest.raises(ValueError, match="Invalid identifier"):
            Query(name)

    def test_rejects_invalid_column_names(self):
        """Column names go through the same identifier check."""
        with pytest.raises(ValueError, match="Invalid identifier"):
            Query("forms_sites").eq("site_id=eq.x&site_key", "y")

    @pytest.mark.parametrize("count", [0, -1])
    def test_rejects_non_positive_limit(self, count):
        """limit must be at least 1."""
        with pytest.raises(ValueError, match="limit must be positive"):
            Query("forms_sites").limit(count)

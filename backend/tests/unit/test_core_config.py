"""Tests for application configuration.

Covers defaults, derived properties, and production validation.
"""

import pytest
from pydantic import SecretStr, ValidationError

from forms_admin.core.config import Settings

_PRODUCTION = "production"


def _production_settings(**overrides) -> Settings:
    values = {
        "environment": _PRODUCTION,
        "supabase_url": "https://db.example.supabase.co",
        "supabase_service_role_key": SecretStr("service-key"),
        "resend_api_key": SecretStr("re_live"),
        "forms_admin_emails": "ops@example.com",
    }
    values.update(overrides)
    return Settings(**values)


class TestDefaults:
    """Tests for default values."""

    def test_ttl_and_cookie_defaults(self):
        s = Settings()
        assert s.forms_code_ttl_minutes == 10
        assert s.forms_session_ttl_hours == 168
        assert s.forms_session_cookie == "tfm_forms_session"
        assert s.session_ttl_seconds == 168 * 3600

    def test_rate_limit_defaults(self):
        s = Settings()
        assert s.rate_limit_login == "5/minute"
        assert s.rate_limit_verify == "10/minute"
        assert s.rate_limit_submit == "30/minute"
        assert s.rate_limit_contact == "5/minute"


class TestDerivedProperties:
    """Tests for computed settings."""

    def test_admin_emails_normalized(self):
        """The allow-list is split on commas, trimmed, lowercased, blanks dropped."""
        s = Settings(forms_admin_emails=" Ops@Example.com,, owner@example.com ,")
        assert s.admin_emails == frozenset({"ops@example.com", "owner@example.com"})

    def test_code_sender_prefers_forms_from_email(self):
        s = Settings(forms_from_email="forms@example.com", from_email="site@example.com")
        assert s.code_from_email == "forms@example.com"

    def test_code_sender_falls_back_to_from_email(self):
        s = Settings(forms_from_email="", from_email="site@example.com")
        assert s.code_from_email == "site@example.com"

    def test_code_sender_default(self):
        s = Settings(forms_from_email="", from_email="")
        assert s.code_from_email == "noreply@updates.topfundmanager.com"

    def test_contact_sender_default(self):
        s = Settings(from_email="")
        assert s.contact_from_email == "noreply@topfundmanager.com"

    def test_supabase_base_url_trims_trailing_slash(self):
        s = Settings(supabase_url="https://db.example.supabase.co/")
        assert s.supabase_base_url == "https://db.example.supabase.co"

    def test_sheets_enabled_requires_all_credentials(self):
        partial = Settings(google_service_account_email="svc@example.iam", google_spreadsheet_id="")
        assert partial.sheets_enabled is False

        full = Settings(
            google_service_account_email="svc@example.iam",
            google_private_key=SecretStr("key"),
            google_spreadsheet_id="sheet-1",
        )
        assert full.sheets_enabled is True


class TestValidation:
    """Tests for the settings validator."""

    @pytest.mark.parametrize("field", ["forms_code_ttl_minutes", "forms_session_ttl_hours"])
    def test_rejects_non_positive_ttls(self, field):
        with pytest.raises(ValidationError, match="must be positive"):
            Settings(**{field: 0})

    def test_valid_production_settings(self):
        s = _production_settings()
        assert s.environment == _PRODUCTION

    def test_production_requires_row_store(self):
        with pytest.raises(ValidationError, match="SUPABASE_URL"):
            _production_settings(supabase_url="")

    def test_production_requires_resend_key(self):
        with pytest.raises(ValidationError, match="RESEND_API_KEY"):
            _production_settings(resend_api_key=SecretStr(""))

    def test_production_requires_admin_emails(self):
        with pytest.raises(ValidationError, match="FORMS_ADMIN_EMAILS"):
            _production_settings(forms_admin_emails=" , ")

    def test_development_allows_missing_services(self):
        s = Settings(environment="development", supabase_url="", resend_api_key=SecretStr(""))
        assert s.supabase_url == ""

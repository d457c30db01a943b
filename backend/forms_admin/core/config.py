"""Application configuration loaded from environment variables.

Settings for the row store, mail provider, admin sign-in, session cookie,
lead contact form, and rate limiting. Uses pydantic-settings for validation
and .env file support.

The ``settings`` instance is built once at import time and handed to
services explicitly (see ``forms_admin.api.deps.get_settings``).
"""

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_DEFAULT_FROM_EMAIL = "noreply@updates.topfundmanager.com"
_DEFAULT_CONTACT_FROM_EMAIL = "noreply@topfundmanager.com"
_DEFAULT_CONTACT_TO_EMAIL = "contact@topfundmanager.com"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    environment: str = "development"
    log_level: str = "INFO"

    # Row store (Supabase PostgREST)
    supabase_url: str = ""
    supabase_service_role_key: SecretStr = SecretStr("")
    supabase_timeout_seconds: float = 10.0

    # Mail provider (Resend)
    resend_api_key: SecretStr = SecretStr("")
    from_email: str = ""
    to_email: str = _DEFAULT_CONTACT_TO_EMAIL

    # Forms admin sign-in
    # Comma-separated allow-list, compared case-insensitively
    forms_admin_emails: str = ""
    forms_from_email: str = ""
    forms_code_ttl_minutes: int = 10
    forms_session_ttl_hours: int = 168
    forms_session_cookie: str = "tfm_forms_session"
    # Optional HMAC key for code/session digests. Empty = plain SHA-256.
    forms_hash_secret: SecretStr = SecretStr("")

    # Lead contact form
    contact_min_fill_seconds: int = 3
    contact_max_links: int = 3

    # Google Sheets lead archive (optional)
    google_service_account_email: str = ""
    google_private_key: SecretStr = SecretStr("")
    google_spreadsheet_id: str = ""
    google_sheet_name: str = "Sheet1"

    # Rate Limiting (Security)
    # Format: "count/period" (e.g., "10/minute", "100/hour")
    rate_limit_login: str = "5/minute"
    rate_limit_verify: str = "10/minute"
    rate_limit_submit: str = "30/minute"
    rate_limit_contact: str = "5/minute"
    rate_limit_enabled: bool = True  # Disable for testing

    @property
    def admin_emails(self) -> frozenset[str]:
        """Normalized admin allow-list."""
        return frozenset(
            email.strip().lower()
            for email in self.forms_admin_emails.split(",")
            if email.strip()
        )

    @property
    def code_from_email(self) -> str:
        """Sender for sign-in code emails (FORMS_FROM_EMAIL, then FROM_EMAIL)."""
        return self.forms_from_email or self.from_email or _DEFAULT_FROM_EMAIL

    @property
    def contact_from_email(self) -> str:
        """Sender for lead notification emails."""
        return self.from_email or _DEFAULT_CONTACT_FROM_EMAIL

    @property
    def session_ttl_seconds(self) -> int:
        """Session lifetime in seconds (also the cookie Max-Age)."""
        return self.forms_session_ttl_hours * 3600

    @property
    def supabase_base_url(self) -> str:
        """Row store base URL without a trailing slash."""
        return self.supabase_url.rstrip("/")

    @property
    def sheets_enabled(self) -> bool:
        """True when all Google Sheets credentials are present."""
        return bool(
            self.google_service_account_email
            and self.google_private_key.get_secret_value()
            and self.google_spreadsheet_id
        )

    @model_validator(mode="after")
    def check_security(self) -> "Settings":
        """Validate TTLs and production requirements.

        Checks:
        - Code and session TTLs must be positive (all environments)
        - Row store URL and service key must be set in production
        - Resend API key must be set in production
        - Admin allow-list must not be empty in production
        """
        if self.forms_code_ttl_minutes <= 0:
            msg = (
                "FORMS_CODE_TTL_MINUTES must be positive. "
                f"Got: {self.forms_code_ttl_minutes}"
            )
            raise ValueError(msg)
        if self.forms_session_ttl_hours <= 0:
            msg = (
                "FORMS_SESSION_TTL_HOURS must be positive. "
                f"Got: {self.forms_session_ttl_hours}"
            )
            raise ValueError(msg)

        if self.environment == "production":
            if (
                not self.supabase_url
                or not self.supabase_service_role_key.get_secret_value()
            ):
                msg = (
                    "SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set "
                    "in production."
                )
                raise ValueError(msg)
            if not self.resend_api_key.get_secret_value():
                msg = "RESEND_API_KEY must be set in production."
                raise ValueError(msg)
            if not self.admin_emails:
                msg = (
                    "FORMS_ADMIN_EMAILS must list at least one address "
                    "in production."
                )
                raise ValueError(msg)

        return self


settings = Settings()

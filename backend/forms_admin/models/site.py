"""Site model - client sites allowed to submit forms.

Provisioned out of band; read-only for this service.
"""

import json
from typing import Any

from pydantic import BaseModel, field_validator

SITES_TABLE = "forms_sites"


class Site(BaseModel):
    """Client site row.

    Attributes:
        site_id: Unique site key used by embedded forms.
        site_name: Display name for the dashboard.
        site_key: Shared secret presented in X-Forms-Site-Key.
        allowed_origins: Origins allowed to submit. Empty = any origin.
    """

    site_id: str
    site_name: str | None = None
    site_key: str | None = None
    allowed_origins: list[str] = []

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def coerce_allowed_origins(cls, value: Any) -> list[str]:
        """Accept a JSON array or a JSON-encoded array string.

        Anything else (null, malformed JSON, scalars) means no restriction.
        """
        if isinstance(value, str):
            try:
                value = json.loads(value)
            except ValueError:
                return []
        if not isinstance(value, list):
            return []
        return [str(origin) for origin in value]

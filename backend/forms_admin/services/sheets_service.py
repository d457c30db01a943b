"""Google Sheets lead archive.

Appends each accepted lead as one row to a spreadsheet using a service
account: a self-signed RS256 JWT assertion is exchanged for a short-lived
OAuth access token, then the Sheets ``values:append`` endpoint is called.

Optional: only active when GOOGLE_SERVICE_ACCOUNT_EMAIL, GOOGLE_PRIVATE_KEY
and GOOGLE_SPREADSHEET_ID are all set. Callers treat failures as non-fatal.
"""

from collections.abc import Mapping
from datetime import UTC, datetime, timedelta
from typing import Any
from urllib.parse import quote

import httpx
import jwt

from forms_admin.core.config import Settings

_TOKEN_URL = "https://oauth2.googleapis.com/token"
_SHEETS_API_URL = "https://sheets.googleapis.com/v4/spreadsheets"
_SHEETS_SCOPE = "https://www.googleapis.com/auth/spreadsheets"
_JWT_BEARER_GRANT = "urn:ietf:params:oauth:grant-type:jwt-bearer"
_ASSERTION_TTL = timedelta(hours=1)
_GOOGLE_TIMEOUT = 10.0

# Column order after the timestamp (A = timestamp, B..U = these fields)
SHEET_COLUMNS = (
    "firstName",
    "lastName",
    "email",
    "phone",
    "howFound",
    "previousApplication",
    "occupation",
    "cityState",
    "goals",
    "areasNeedHelp",
    "experienceLevel",
    "currentRealEstate",
    "rentalUnitsGoal",
    "currentIncome",
    "targetIncome",
    "mainObstacle",
    "whySelected",
    "investmentBudget",
    "alternativeOption",
    "creditScore",
)
_SHEET_RANGE = "A:U"


class SheetsAppendError(Exception):
    """Google token exchange or append failed."""


def build_sheet_row(form: Mapping[str, Any], timestamp: datetime) -> list[str]:
    """Timestamp followed by the lead fields in column order ("" for blanks)."""
    row = [timestamp.isoformat()]
    for column in SHEET_COLUMNS:
        value = form.get(column)
        row.append("" if value is None else str(value))
    return row


def build_assertion(settings: Settings, now: datetime | None = None) -> str:
    """Sign the service-account JWT assertion (RS256).

    The private key usually arrives from the environment with escaped
    newlines, which are restored before signing.
    """
    now = now or datetime.now(UTC)
    private_key = settings.google_private_key.get_secret_value().replace("\\n", "\n")
    claims = {
        "iss": settings.google_service_account_email,
        "scope": _SHEETS_SCOPE,
        "aud": _TOKEN_URL,
        "iat": now,
        "exp": now + _ASSERTION_TTL,
    }
    return jwt.encode(claims, private_key, algorithm="RS256")


async def _get_access_token(
    client: httpx.AsyncClient,
    settings: Settings,
) -> str:
    resp = await client.post(
        _TOKEN_URL,
        data={"grant_type": _JWT_BEARER_GRANT, "assertion": build_assertion(settings)},
        timeout=_GOOGLE_TIMEOUT,
    )
    if resp.is_error:
        msg = f"Failed to get access token: {resp.status_code}"
        raise SheetsAppendError(msg)

    token = resp.json().get("access_token")
    if not token:
        msg = "Token response had no access_token"
        raise SheetsAppendError(msg)
    return str(token)


async def append_lead_row(
    settings: Settings,
    form: Mapping[str, Any],
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> None:
    """Append one lead to the configured spreadsheet.

    Args:
        settings: Application settings (Google credentials, sheet id/name).
        form: Lead form fields.
        transport: Optional httpx transport (tests).

    Raises:
        SheetsAppendError: Token exchange or append returned an error.
        httpx.HTTPError: Network failure.
        jwt.PyJWTError: The private key could not sign the assertion.
    """
    sheet_range = quote(f"{settings.google_sheet_name}!{_SHEET_RANGE}", safe="!:")
    url = (
        f"{_SHEETS_API_URL}/{settings.google_spreadsheet_id}/values/"
        f"{sheet_range}:append"
    )

    async with httpx.AsyncClient(transport=transport) as client:
        access_token = await _get_access_token(client, settings)
        resp = await client.post(
            url,
            params={"valueInputOption": "USER_ENTERED"},
            headers={"Authorization": f"Bearer {access_token}"},
            json={"values": [build_sheet_row(form, datetime.now(UTC))]},
            timeout=_GOOGLE_TIMEOUT,
        )
    if resp.is_error:
        msg = f"Google Sheets API error: {resp.status_code}"
        raise SheetsAppendError(msg)

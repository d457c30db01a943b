"""Lead contact form (VIP 1-on-1 application).

The multi-step form on the marketing site posts its fields as one JSON
object. Accepted leads are emailed to the site owner and, when configured,
archived to Google Sheets.

Spam handling: submissions that trip the honeypot, arrive too soon after
the form loaded, or match spam patterns receive the same success response
as a real lead but nothing is sent, so automated senders get no signal.
"""

import html
import re
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

import httpx
import jwt
import structlog
from pydantic import EmailStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from forms_admin.core.config import Settings
from forms_admin.core.email import send_email
from forms_admin.core.errors import InternalError, MailDeliveryError, ValidationError
from forms_admin.services.sheets_service import SheetsAppendError, append_lead_row

logger = structlog.get_logger()

REQUIRED_FIELDS = ("firstName", "lastName", "email", "phone")
HONEYPOT_FIELD = "website"
STARTED_AT_FIELD = "formStartedAt"

NAME_FIELDS = ("firstName", "lastName")
NAME_MAX_LENGTH = 100
FIELD_MAX_LENGTH = 2000
PHONE_MIN_DIGITS = 7
PHONE_MAX_DIGITS = 20

SUCCESS_MESSAGE = "Application submitted successfully"
SEND_FAILED_MSG = "Failed to send email"

_URL_RE = re.compile(r"https?://|www\.", re.IGNORECASE)
_SPAM_PHRASE_RE = re.compile(
    r"\b(viagra|cialis|casino|backlinks?|seo services|crypto investment|"
    r"guest post|loan offer|bitcoin doubling)\b",
    re.IGNORECASE,
)
_EMAIL_ADAPTER = TypeAdapter(EmailStr)

# Email layout: section title -> (label, field) rows
_EMAIL_SECTIONS: tuple[tuple[str, tuple[tuple[str, str], ...]], ...] = (
    (
        "Background",
        (
            ("How did you find out about Justin?", "howFound"),
            ("Previous application?", "previousApplication"),
            ("Current occupation:", "occupation"),
            ("City/State:", "cityState"),
        ),
    ),
    (
        "Real Estate Experience",
        (
            ("Goals:", "goals"),
            ("Areas need help with:", "areasNeedHelp"),
            ("Experience level:", "experienceLevel"),
            ("Current real estate owned:", "currentRealEstate"),
        ),
    ),
    (
        "Financial Goals",
        (
            ("Rental units goal this year:", "rentalUnitsGoal"),
            ("Current monthly income:", "currentIncome"),
            ("Target monthly income:", "targetIncome"),
        ),
    ),
    (
        "Commitment",
        (
            ("Main obstacle:", "mainObstacle"),
            ("Why should you be selected?", "whySelected"),
            ("Investment budget:", "investmentBudget"),
            ("Alternative option:", "alternativeOption"),
            ("Credit score range:", "creditScore"),
        ),
    ),
)

_CELL = 'style="padding: 8px; border: 1px solid #ddd;"'
_TABLE = '<table style="border-collapse: collapse; width: 100%;">'


@dataclass(frozen=True)
class ContactResult:
    """Outcome of a contact submission.

    Attributes:
        delivered: True when the lead email was sent.
        spam_reason: Why the lead was silently dropped, if it was.
    """

    delivered: bool
    spam_reason: str | None = None


def _text(form: Mapping[str, Any], field: str) -> str:
    value = form.get(field)
    return "" if value is None else str(value).strip()


def detect_spam(
    form: Mapping[str, Any],
    settings: Settings,
    now: datetime | None = None,
) -> str | None:
    """Return a reason string when the submission looks automated.

    Checks, in order: honeypot filled, submitted under the minimum fill time,
    links in name fields, too many links overall, known spam phrases.
    """
    if _text(form, HONEYPOT_FIELD):
        return "honeypot"

    started_at = form.get(STARTED_AT_FIELD)
    if started_at not in (None, ""):
        try:
            started_ms = float(started_at)
        except (TypeError, ValueError):
            return "bad_timestamp"
        now = now or datetime.now(UTC)
        elapsed = now.timestamp() - started_ms / 1000
        if elapsed < settings.contact_min_fill_seconds:
            return "too_fast"

    if any(_URL_RE.search(_text(form, field)) for field in NAME_FIELDS):
        return "link_in_name"

    free_text = " ".join(
        str(value) for value in form.values() if isinstance(value, str)
    )
    if len(_URL_RE.findall(free_text)) > settings.contact_max_links:
        return "too_many_links"
    if _SPAM_PHRASE_RE.search(free_text):
        return "spam_phrase"

    return None


def validate_lead(form: Mapping[str, Any]) -> None:
    """Check required fields, formats and lengths.

    Raises:
        ValidationError: First failing check, with a user-facing message.
    """
    for field in REQUIRED_FIELDS:
        if not _text(form, field):
            raise ValidationError(f"Missing required field: {field}")

    try:
        _EMAIL_ADAPTER.validate_python(_text(form, "email"))
    except PydanticValidationError as exc:
        raise ValidationError("Invalid email address.") from exc

    digits = re.sub(r"\D", "", _text(form, "phone"))
    if not PHONE_MIN_DIGITS <= len(digits) <= PHONE_MAX_DIGITS:
        raise ValidationError("Invalid phone number.")

    for field, value in form.items():
        if not isinstance(value, str):
            continue
        limit = NAME_MAX_LENGTH if field in NAME_FIELDS else FIELD_MAX_LENGTH
        if len(value) > limit:
            raise ValidationError(f"Field too long: {field}")


def _row(label: str, value: str) -> str:
    return (
        f"<tr><td {_CELL}><strong>{html.escape(label)}</strong></td>"
        f"<td {_CELL}>{value}</td></tr>"
    )


def build_lead_email(form: Mapping[str, Any]) -> str:
    """Render the owner notification; every value is HTML-escaped."""

    def value(field: str) -> str:
        return html.escape(_text(form, field) or "Not provided")

    name = f"{html.escape(_text(form, 'firstName'))} {html.escape(_text(form, 'lastName'))}"
    parts = [
        "<h2>New VIP 1-on-1 Experience Application</h2>",
        "<h3>Contact Information</h3>",
        _TABLE,
        _row("Name:", name),
        _row("Email:", html.escape(_text(form, "email"))),
        _row("Phone:", html.escape(_text(form, "phone"))),
        "</table>",
    ]
    for title, rows in _EMAIL_SECTIONS:
        parts.append(f"<h3>{title}</h3>")
        parts.append(_TABLE)
        parts.extend(_row(label, value(field)) for label, field in rows)
        parts.append("</table>")
    return "\n".join(parts)


async def submit_lead(form: Mapping[str, Any], settings: Settings) -> ContactResult:
    """Screen, validate and deliver one lead.

    Args:
        form: Submitted form fields.
        settings: Application settings (mail addresses, spam thresholds).

    Returns:
        ContactResult. Spam is reported as not delivered, never as an error.

    Raises:
        ValidationError: Required field missing or malformed.
        InternalError: The notification email could not be sent.
    """
    spam_reason = detect_spam(form, settings)
    if spam_reason:
        logger.info("contact_spam_dropped", reason=spam_reason)
        return ContactResult(delivered=False, spam_reason=spam_reason)

    validate_lead(form)

    first, last = _text(form, "firstName"), _text(form, "lastName")
    try:
        await send_email(
            settings,
            from_email=settings.contact_from_email,
            to=settings.to_email,
            subject=f"VIP 1-on-1 Experience Application: {first} {last}",
            html_body=build_lead_email(form),
            reply_to=_text(form, "email"),
        )
    except MailDeliveryError as exc:
        logger.error("contact_email_failed", status_code=exc.status_code)
        raise InternalError(SEND_FAILED_MSG) from exc

    if settings.sheets_enabled:
        try:
            await append_lead_row(settings, form)
        except (SheetsAppendError, httpx.HTTPError, jwt.PyJWTError, ValueError) as exc:
            logger.warning("contact_sheet_append_failed", error=str(exc))

    logger.info("contact_lead_delivered")
    return ContactResult(delivered=True)

"""Email sending via Resend API.

Simple HTTP POST to Resend for sign-in codes and lead notifications.
Unlike background-task delivery, callers await the send and a failure
surfaces as MailDeliveryError so the endpoint can report it.
"""

import html
import logging

import httpx

from forms_admin.core.config import Settings
from forms_admin.core.errors import MailDeliveryError

logger = logging.getLogger(__name__)

_RESEND_API_URL = "https://api.resend.com/emails"
_RESEND_TIMEOUT = 10.0

CODE_EMAIL_SUBJECT = "Your Forms Admin Code"


async def send_email(
    settings: Settings,
    *,
    from_email: str,
    to: str,
    subject: str,
    html_body: str,
    reply_to: str | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> dict:
    """Send one HTML email through Resend.

    Args:
        settings: Application settings (Resend API key).
        from_email: Sender address.
        to: Recipient address.
        subject: Subject line.
        html_body: HTML message body.
        reply_to: Optional Reply-To address.
        transport: Optional httpx transport (tests).

    Returns:
        Parsed Resend response (contains the message id).

    Raises:
        MailDeliveryError: API key missing, non-2xx response, or network error.
    """
    api_key = settings.resend_api_key.get_secret_value()
    if not api_key:
        raise MailDeliveryError("Resend API key not configured")

    payload: dict[str, str] = {
        "from": from_email,
        "to": to,
        "subject": subject,
        "html": html_body,
    }
    if reply_to:
        payload["reply_to"] = reply_to

    try:
        async with httpx.AsyncClient(transport=transport) as client:
            resp = await client.post(
                _RESEND_API_URL,
                headers={"Authorization": f"Bearer {api_key}"},
                json=payload,
                timeout=_RESEND_TIMEOUT,
            )
    except httpx.HTTPError as exc:
        logger.warning("Resend request failed: %s", type(exc).__name__)
        raise MailDeliveryError("Resend request failed") from exc

    if resp.is_error:
        logger.warning(
            "Resend API error: status=%s body=%s", resp.status_code, resp.text[:500]
        )
        raise MailDeliveryError(
            "Resend API error", status_code=resp.status_code, body=resp.text
        )

    return resp.json() if resp.content else {}


def build_code_email(
    *, code: str, expires_minutes: int, ip: str, user_agent: str
) -> str:
    """Render the sign-in code email body."""
    details = (
        f"{html.escape(ip or 'Unknown IP')} · "
        f"{html.escape(user_agent or 'Unknown device')}"
    )
    return (
        "<h2>Your Forms Admin Code</h2>"
        "<p>Use the following code to finish signing in:</p>"
        f'<h1 style="letter-spacing: 4px;">{code}</h1>'
        f"<p>This code expires in {expires_minutes} minutes.</p>"
        '<p style="color:#6b7280; font-size: 12px;">'
        f"Request details: {details}</p>"
    )


async def send_code_email(
    settings: Settings,
    *,
    to_email: str,
    code: str,
    expires_minutes: int,
    ip: str,
    user_agent: str,
) -> None:
    """Send a one-time sign-in code to an admin.

    Args:
        settings: Application settings.
        to_email: Normalized admin address (also the recipient).
        code: Plain 6-digit code. Never logged.
        expires_minutes: Code TTL shown in the message.
        ip: Requesting client IP, shown so admins can spot foreign requests.
        user_agent: Requesting user agent.

    Raises:
        MailDeliveryError: Delivery failed.
    """
    sender = settings.code_from_email
    await send_email(
        settings,
        from_email=sender,
        to=to_email,
        subject=CODE_EMAIL_SUBJECT,
        html_body=build_code_email(
            code=code,
            expires_minutes=expires_minutes,
            ip=ip,
            user_agent=user_agent,
        ),
        reply_to=sender,
    )

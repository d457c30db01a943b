"""Lead contact form endpoint (VIP 1-on-1 application).

Open to any origin. Spam is answered exactly like a real lead so bots
cannot tell they were filtered.

Endpoints:
- OPTIONS /contact - CORS preflight
- POST /contact - screen, validate and deliver a lead
"""

from json import JSONDecodeError

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, Response

from forms_admin.api.deps import SettingsDep
from forms_admin.core.config import settings
from forms_admin.core.errors import APIError, ValidationError
from forms_admin.core.rate_limiting import limiter
from forms_admin.schemas.contact import ContactResponse
from forms_admin.services.contact_service import SUCCESS_MESSAGE, submit_lead

router = APIRouter()

CONTACT_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

INVALID_JSON_MSG = "Invalid JSON body."


@router.options("/contact")
async def contact_preflight() -> Response:
    """Answer the CORS preflight."""
    return Response(status_code=204, headers=CONTACT_CORS_HEADERS)


@router.post("/contact")
@limiter.limit(settings.rate_limit_contact)
async def contact(request: Request, app_settings: SettingsDep) -> JSONResponse:
    """Accept a lead from the multi-step application form.

    Rate limit: 5 per minute per IP.
    """
    try:
        form = await request.json()
    except (JSONDecodeError, UnicodeDecodeError) as exc:
        raise ValidationError(INVALID_JSON_MSG, headers=CONTACT_CORS_HEADERS) from exc
    if not isinstance(form, dict):
        raise ValidationError(INVALID_JSON_MSG, headers=CONTACT_CORS_HEADERS)

    try:
        await submit_lead(form, app_settings)
    except APIError as exc:
        exc.headers = {**CONTACT_CORS_HEADERS, **(exc.headers or {})}
        raise

    return JSONResponse(
        content=ContactResponse(message=SUCCESS_MESSAGE).model_dump(by_alias=True),
        headers=CONTACT_CORS_HEADERS,
    )

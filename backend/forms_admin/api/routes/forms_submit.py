"""Public submission intake.

Client sites post here from the browser, so every response (errors
included) carries CORS headers. The body is parsed by hand rather than
through a request model: a malformed payload must still get the
Origin-echo headers, which a framework validation error would not carry.

Endpoints:
- OPTIONS /forms/submit - CORS preflight
- POST /forms/submit - store one submission
"""

from json import JSONDecodeError

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, Response

from forms_admin.api.deps import IntakeServiceDep, MetaDep
from forms_admin.core.config import settings
from forms_admin.core.errors import ValidationError
from forms_admin.core.rate_limiting import limiter
from forms_admin.core.responses import SuccessResponse
from forms_admin.services.intake_service import (
    FIELDS_REQUIRED_MSG,
    SITE_KEY_HEADER,
    SubmissionMeta,
    echo_origin_headers,
    preflight_headers,
)

router = APIRouter()

INVALID_JSON_MSG = "Invalid JSON body."


@router.options("/submit")
async def submit_preflight(meta: MetaDep) -> Response:
    """Answer the CORS preflight for cross-site form posts."""
    return Response(status_code=204, headers=preflight_headers(meta.origin))


@router.post("/submit")
@limiter.limit(settings.rate_limit_submit)
async def submit(
    request: Request,
    intake: IntakeServiceDep,
    meta: MetaDep,
) -> JSONResponse:
    """Validate the site credentials and store the submission verbatim.

    Rate limit: 30 per minute per IP.
    """
    try:
        payload = await request.json()
    except (JSONDecodeError, UnicodeDecodeError) as exc:
        raise ValidationError(
            INVALID_JSON_MSG, headers=echo_origin_headers(meta.origin)
        ) from exc
    if not isinstance(payload, dict):
        raise ValidationError(
            FIELDS_REQUIRED_MSG, headers=echo_origin_headers(meta.origin)
        )

    result = await intake.submit(
        site_id=payload.get("siteId"),
        form_id=payload.get("formId"),
        data=payload.get("data"),
        meta=SubmissionMeta.from_payload(payload.get("meta")),
        request_meta=meta,
        presented_site_key=request.headers.get(SITE_KEY_HEADER),
    )
    return JSONResponse(
        content=SuccessResponse().model_dump(by_alias=True),
        headers=result.cors_headers,
    )

"""Admin sign-in and session endpoints.

Passwordless sign-in for the forms dashboard: an allow-listed admin asks
for a 6-digit code by email, then trades it for an httpOnly session cookie.

Endpoints:
- POST /forms/login - email a sign-in code
- POST /forms/verify - verify the code, set the session cookie
- POST /forms/logout - delete the session, clear the cookie
- GET /forms/me - current session owner and expiry
"""

import structlog
from fastapi import APIRouter, Request, Response

from forms_admin.api.deps import (
    CurrentSession,
    IdentityServiceDep,
    MetaDep,
    SessionToken,
    SettingsDep,
)
from forms_admin.core.config import settings
from forms_admin.core.errors import DataStoreError, InternalError
from forms_admin.core.rate_limiting import limiter
from forms_admin.core.responses import SuccessResponse
from forms_admin.core.security import (
    clear_session_cookie,
    clear_session_cookie_headers,
    set_session_cookie,
)
from forms_admin.schemas.forms import (
    LoginRequest,
    LoginResponse,
    MeResponse,
    VerifyRequest,
)
from forms_admin.services.identity_service import LoginChallenge

logger = structlog.get_logger()

router = APIRouter()


# ===================================================================
# POST /forms/login
# ===================================================================


@router.post("/login")
@limiter.limit(settings.rate_limit_login)
async def login(
    request: Request,  # noqa: ARG001 - required by @limiter.limit()
    body: LoginRequest,
    identity: IdentityServiceDep,
    meta: MetaDep,
) -> LoginResponse:
    """Email a one-time sign-in code to an allow-listed admin.

    Unlike a public sign-up flow this endpoint answers 403 for addresses
    outside the allow-list: the dashboard is operator-only.

    Rate limit: 5 per minute per IP.
    """
    challenge = await identity.request_code(body.email, meta)
    return LoginResponse(
        challenge_id=challenge.challenge_id,
        expires_in_minutes=challenge.expires_in_minutes,
    )


# ===================================================================
# POST /forms/verify
# ===================================================================


@router.post("/verify")
@limiter.limit(settings.rate_limit_verify)
async def verify(
    request: Request,  # noqa: ARG001 - required by @limiter.limit()
    response: Response,
    body: VerifyRequest,
    identity: IdentityServiceDep,
    app_settings: SettingsDep,
    meta: MetaDep,
) -> SuccessResponse:
    """Trade a valid code for a session cookie.

    The token itself only ever travels in the Set-Cookie header.

    Rate limit: 10 per minute per IP.
    """
    issued = await identity.verify_code(
        LoginChallenge(email=body.email or "", challenge_id=body.challenge_id or ""),
        body.code,
        meta,
    )
    set_session_cookie(response, issued.token, app_settings)
    return SuccessResponse()


# ===================================================================
# POST /forms/logout
# ===================================================================


@router.post("/logout")
async def logout(
    response: Response,
    token: SessionToken,
    identity: IdentityServiceDep,
    app_settings: SettingsDep,
) -> SuccessResponse:
    """Delete the session row (if any) and clear the cookie.

    No session required; clearing an absent cookie is harmless. A store
    failure still answers 500, but the cookie is expired either way.
    """
    try:
        await identity.logout(token)
    except DataStoreError as exc:
        logger.error(
            "logout_store_error",
            status_code=exc.status_code,
            body=exc.body[:500],
            error=str(exc),
        )
        raise InternalError(headers=clear_session_cookie_headers(app_settings)) from exc
    clear_session_cookie(response, app_settings)
    return SuccessResponse()


# ===================================================================
# GET /forms/me
# ===================================================================


@router.get("/me")
async def get_me(session: CurrentSession) -> MeResponse:
    """Return the signed-in admin's email and session expiry."""
    return MeResponse(email=session.email, expires_at=session.expires_at)

"""Shared dependencies for API endpoints.

Provides the row store client, settings, request metadata, service
factories, and the session gate used by the dashboard endpoints.

Tests swap collaborators with ``app.dependency_overrides``: overriding
``get_row_store`` points every service at an in-memory store.
"""

from typing import Annotated

from fastapi import Depends, Request

from forms_admin.core.config import Settings, settings
from forms_admin.core.database import RowStoreClient, get_row_store
from forms_admin.core.errors import UnauthorizedError
from forms_admin.core.request_meta import RequestMeta, get_request_meta
from forms_admin.services.admin_query_service import AdminQueryService
from forms_admin.services.identity_service import ActiveSession, IdentityService
from forms_admin.services.intake_service import IntakeService


def get_settings() -> Settings:
    """Dependency that provides the application settings."""
    return settings


StoreDep = Annotated[RowStoreClient, Depends(get_row_store)]
SettingsDep = Annotated[Settings, Depends(get_settings)]
MetaDep = Annotated[RequestMeta, Depends(get_request_meta)]


def get_identity_service(store: StoreDep, app_settings: SettingsDep) -> IdentityService:
    return IdentityService(store, app_settings)


def get_intake_service(store: StoreDep) -> IntakeService:
    return IntakeService(store)


def get_admin_query_service(store: StoreDep) -> AdminQueryService:
    return AdminQueryService(store)


IdentityServiceDep = Annotated[IdentityService, Depends(get_identity_service)]
IntakeServiceDep = Annotated[IntakeService, Depends(get_intake_service)]
AdminQueryServiceDep = Annotated[AdminQueryService, Depends(get_admin_query_service)]


def get_session_token(request: Request, app_settings: SettingsDep) -> str | None:
    """Read the plain session token from the session cookie."""
    return request.cookies.get(app_settings.forms_session_cookie) or None


SessionToken = Annotated[str | None, Depends(get_session_token)]


async def require_session(
    token: SessionToken,
    identity: IdentityServiceDep,
) -> ActiveSession:
    """Resolve the session cookie or reject the request.

    Security: The 401 message never says why the session was rejected
    (missing cookie, unknown token, expired).

    Returns:
        The active session.

    Raises:
        UnauthorizedError: No valid session.
    """
    session = await identity.resolve_session(token)
    if session is None:
        raise UnauthorizedError()
    return session


CurrentSession = Annotated[ActiveSession, Depends(require_session)]

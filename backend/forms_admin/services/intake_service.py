"""Site-scoped form submission intake.

Client sites embed a form that POSTs to /api/forms/submit with their
site id in the body and their shared key in X-Forms-Site-Key.

Check order:
1. siteId and data present (400)
2. site exists (401 "Invalid site.")
3. CORS headers computed from the site's allow-list
4. site key matches (401 "Invalid site key.")
5. Origin allowed when the allow-list is non-empty (403)
6. submission stored verbatim

Before the site is known, error responses only echo the request Origin.
Once it is known, every response (including 500s) carries the headers
computed from its allow-list.
"""

import hmac
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import structlog

from forms_admin.core.database import RowStoreClient
from forms_admin.core.errors import (
    DataStoreError,
    ForbiddenError,
    InternalError,
    UnauthorizedError,
    ValidationError,
)
from forms_admin.core.request_meta import RequestMeta
from forms_admin.repositories.site_repository import SiteRepository
from forms_admin.repositories.submission_repository import SubmissionRepository

logger = structlog.get_logger()

SITE_KEY_HEADER = "X-Forms-Site-Key"

FIELDS_REQUIRED_MSG = "siteId and data are required."
DATA_NOT_OBJECT_MSG = "data must be an object."
INVALID_SITE_MSG = "Invalid site."
INVALID_SITE_KEY_MSG = "Invalid site key."
ORIGIN_NOT_ALLOWED_MSG = "Origin not allowed."
SUBMIT_FAILED_MSG = "Unable to accept submission."

_CORS_COMMON = {
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": f"Content-Type, {SITE_KEY_HEADER}",
    "Access-Control-Max-Age": "86400",
    "Vary": "Origin",
}


def echo_origin_headers(origin: str) -> dict[str, str]:
    """Headers used before the site's allow-list is known."""
    if not origin:
        return {}
    return {"Access-Control-Allow-Origin": origin, "Vary": "Origin"}


def build_cors_headers(origin: str, allowed_origins: list[str]) -> dict[str, str]:
    """CORS headers for a known site.

    An empty allow-list mirrors any origin. Otherwise only a listed origin
    is mirrored; anything else (including no Origin) yields ``null``.
    """
    allow_all = not allowed_origins
    is_allowed = bool(origin) and (allow_all or origin in allowed_origins)
    return {
        "Access-Control-Allow-Origin": origin if is_allowed else "null",
        **_CORS_COMMON,
    }


def preflight_headers(origin: str) -> dict[str, str]:
    """Preflight headers: mirror the request Origin unconditionally.

    The preflight carries no site id, so the allow-list cannot be consulted
    here; the POST applies it.
    """
    return {"Access-Control-Allow-Origin": origin or "*", **_CORS_COMMON}


@dataclass(frozen=True)
class SubmissionMeta:
    """Page context reported by the embed script.

    Attributes:
        page_url: URL of the page hosting the form.
        referrer: document.referrer as seen by the page.
    """

    page_url: str | None = None
    referrer: str | None = None

    @classmethod
    def from_payload(cls, meta: Any) -> "SubmissionMeta":
        """Build from the request's ``meta`` object (non-objects ignored)."""
        if not isinstance(meta, Mapping):
            return cls()
        return cls(
            page_url=meta.get("pageUrl") or None,
            referrer=meta.get("referrer") or None,
        )


@dataclass(frozen=True)
class SubmitResult:
    """Outcome of an accepted submission."""

    site_id: str
    cors_headers: dict[str, str]


class IntakeService:
    """Validates site identity and stores submissions.

    Args:
        store: Row store client.
    """

    def __init__(self, store: RowStoreClient) -> None:
        self._store = store

    async def submit(
        self,
        *,
        site_id: Any,
        form_id: Any,
        data: Any,
        meta: SubmissionMeta,
        request_meta: RequestMeta,
        presented_site_key: str | None,
    ) -> SubmitResult:
        """Validate and store one submission.

        Args:
            site_id: siteId from the body.
            form_id: Optional formId from the body.
            data: Submitted fields (must be a JSON object).
            meta: Page context from the body.
            request_meta: Origin, referrer, IP and user agent of the request.
            presented_site_key: X-Forms-Site-Key header value.

        Returns:
            SubmitResult with the CORS headers for the response.

        Raises:
            ValidationError: siteId or data missing, or data not an object.
            UnauthorizedError: Unknown site or wrong site key.
            ForbiddenError: Origin not on a non-empty allow-list.
            InternalError: Row store failure (detail logged only).
        """
        origin = request_meta.origin
        cors_headers = echo_origin_headers(origin)

        site_id = str(site_id or "").strip()
        if not site_id or data is None:
            raise ValidationError(FIELDS_REQUIRED_MSG, headers=cors_headers)
        if not isinstance(data, dict):
            raise ValidationError(DATA_NOT_OBJECT_MSG, headers=cors_headers)

        try:
            site = await SiteRepository.get_by_site_id(self._store, site_id)
            if site is None:
                raise UnauthorizedError(INVALID_SITE_MSG, headers=cors_headers)

            cors_headers = build_cors_headers(origin, site.allowed_origins)

            if not _keys_match(site.site_key, presented_site_key):
                logger.info("submission_rejected", site_id=site_id, reason="site_key")
                raise UnauthorizedError(INVALID_SITE_KEY_MSG, headers=cors_headers)

            if site.allowed_origins and origin and origin not in site.allowed_origins:
                logger.info(
                    "submission_rejected",
                    site_id=site_id,
                    reason="origin",
                    origin=origin,
                )
                raise ForbiddenError(ORIGIN_NOT_ALLOWED_MSG, headers=cors_headers)

            await SubmissionRepository.create(
                self._store,
                site_id=site_id,
                form_id=_clean_form_id(form_id),
                data=data,
                origin=origin or None,
                ip=request_meta.ip or None,
                user_agent=request_meta.user_agent or None,
                page_url=meta.page_url,
                referrer=meta.referrer or request_meta.referrer or None,
            )
        except DataStoreError as exc:
            logger.error(
                "submission_store_failed",
                site_id=site_id,
                status_code=exc.status_code,
                body=exc.body[:500],
            )
            raise InternalError(SUBMIT_FAILED_MSG, headers=cors_headers) from exc

        logger.info("submission_accepted", site_id=site_id)
        return SubmitResult(site_id=site_id, cors_headers=cors_headers)


def _keys_match(stored: str | None, presented: str | None) -> bool:
    """Constant-time site key comparison; missing on either side fails."""
    if not stored or not presented:
        return False
    return hmac.compare_digest(stored.encode(), presented.encode())


def _clean_form_id(form_id: Any) -> str | None:
    if not form_id:
        return None
    return str(form_id).strip() or None

"""Session-gated dashboard reads.

Endpoints:
- GET /forms/sites - all sites (no site keys)
- GET /forms/submissions - newest submissions, optionally for one site
"""

from typing import Annotated

from fastapi import APIRouter, Query

from forms_admin.api.deps import AdminQueryServiceDep, CurrentSession
from forms_admin.schemas.forms import (
    SiteSummary,
    SitesResponse,
    SubmissionSummary,
    SubmissionsResponse,
)

router = APIRouter()


@router.get("/sites")
async def list_sites(
    _session: CurrentSession,
    queries: AdminQueryServiceDep,
) -> SitesResponse:
    """List sites ascending by site id."""
    sites = await queries.list_sites()
    return SitesResponse(sites=[SiteSummary.from_site(site) for site in sites])


@router.get("/submissions")
async def list_submissions(
    _session: CurrentSession,
    queries: AdminQueryServiceDep,
    limit: Annotated[str | None, Query()] = None,
    site_id: Annotated[str | None, Query(alias="siteId")] = None,
) -> SubmissionsResponse:
    """List submissions newest first.

    ``limit`` is taken as a raw string: junk values fall back to the
    default instead of failing validation.
    """
    submissions = await queries.list_submissions(limit=limit, site_id=site_id)
    return SubmissionsResponse(
        submissions=[SubmissionSummary.from_submission(s) for s in submissions]
    )

"""API router aggregator.

All public endpoints live under /api (mounted in ``forms_admin.main``).
"""

from fastapi import APIRouter

from forms_admin.api.routes import contact, dashboard, forms_auth, forms_submit

router = APIRouter()

# =============================================================================
# Forms admin (dashboard sign-in, reads, and site intake)
# =============================================================================

_FORMS_PREFIX = "/forms"

router.include_router(forms_auth.router, prefix=_FORMS_PREFIX, tags=["forms-auth"])
router.include_router(dashboard.router, prefix=_FORMS_PREFIX, tags=["forms-admin"])
router.include_router(forms_submit.router, prefix=_FORMS_PREFIX, tags=["forms-intake"])

# =============================================================================
# Marketing site lead form
# =============================================================================

router.include_router(contact.router, tags=["contact"])

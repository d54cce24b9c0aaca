"""
Top-level router for version 1 of the API.

This router aggregates the domain routers under their prefixes.  When a
new domain is introduced, include its router here.
"""

from fastapi import APIRouter

from .endpoints import (
    accommodations,
    audit,
    auth,
    blocks,
    events,
    health,
    hizbe_saifee_groups,
    miqaats,
    mumineen,
    pass_preferences,
    vaaz_centers,
)

router = APIRouter()

router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(mumineen.router, prefix="/mumineen", tags=["mumineen"])
router.include_router(miqaats.router, prefix="/miqaats", tags=["miqaats"])
router.include_router(events.router, prefix="/events", tags=["events"])
router.include_router(vaaz_centers.router, prefix="/vaaz-centers", tags=["vaaz-centers"])
router.include_router(blocks.router, prefix="/blocks", tags=["blocks"])
router.include_router(pass_preferences.router, prefix="/pass-preferences", tags=["pass-preferences"])
router.include_router(accommodations.router, prefix="/accommodations", tags=["accommodations"])
router.include_router(hizbe_saifee_groups.router, prefix="/hizbe-saifee-groups", tags=["hizbe-saifee-groups"])
router.include_router(audit.router, prefix="/audit", tags=["audit"])

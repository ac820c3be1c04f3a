"""
API v1 router aggregating all endpoints.
"""

from fastapi import APIRouter

from api.v1.admin import router as admin_router
from api.v1.auth import router as auth_router
from api.v1.events import router as events_router
from api.v1.live import router as live_router
from api.v1.voter import router as voter_router

router = APIRouter()

router.include_router(auth_router, prefix="/auth", tags=["Authentication"])
router.include_router(admin_router, prefix="/admin", tags=["Admin"])
router.include_router(events_router, prefix="/events", tags=["Events"])
router.include_router(voter_router, prefix="/voter", tags=["Voter"])
router.include_router(live_router, prefix="/live", tags=["Live Updates"])

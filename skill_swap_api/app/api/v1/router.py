"""
Top-level router for version 1 of the API.

Aggregates the domain routers under a single router that ``main``
mounts at ``/api/v1``.
"""

from fastapi import APIRouter

from .endpoints import admin, alerts, auth, ratings, swaps, users

router = APIRouter()

router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(swaps.router, prefix="/swaps", tags=["swaps"])
router.include_router(ratings.router, prefix="/ratings", tags=["ratings"])
router.include_router(admin.router, prefix="/admin", tags=["admin"])
router.include_router(alerts.router, prefix="/alerts", tags=["alerts"])

"""
HTTP routes for the Toilet Map API.
"""

from fastapi import APIRouter

from toiletmap.routes import admin, auth, reviews, search, toilets

router = APIRouter()
router.include_router(auth.router)
router.include_router(toilets.router)
router.include_router(reviews.router)
router.include_router(search.router)
router.include_router(admin.router)

"""
API routes for the calculation engine.
"""

from fastapi import APIRouter

from app.api import depreciation, financials

router = APIRouter()

# Include sub-routers
router.include_router(financials.router, prefix="/calculate", tags=["calculations"])
router.include_router(
    depreciation.router, prefix="/calculate/depreciation", tags=["depreciation"]
)

"""
API Routes Module.

This module combines all route modules into a single router for the address service.
"""
from fastapi import APIRouter

from .health import router as health_router
from .address import router as address_router

# Combined router that includes all sub-routers
router = APIRouter()

router.include_router(health_router)
router.include_router(address_router)

__all__ = ["router"]

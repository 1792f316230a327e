"""Health check endpoints."""
from fastapi import APIRouter

from models.schemas import HealthResponse
from services.address_lookup_service import get_cached_lookup

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Check if the service is up and whether the address lookup is cached.

    A missing lookup is reported, not treated as unhealthy: the selector
    simply stays disabled until a later load succeeds.
    """
    lookup = get_cached_lookup()
    return HealthResponse(
        status="ok",
        lookup_loaded=lookup is not None and not lookup.is_empty
    )

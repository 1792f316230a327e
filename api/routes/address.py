"""
Address selector endpoints.

Routes
------
GET  /address/lookup                     – loaded flag and table sizes
GET  /address/provinces                  – province control
GET  /address/districts?province=        – district control
GET  /address/municipalities?district=   – municipality control
GET  /address/wards?municipality=        – ward control
POST /address/change                     – apply one change, get the consolidated update
POST /address/validate                   – check a selection against the lookup
POST /address/bilingual                  – English/Nepali form of a selection

GET endpoints never fail on a missing lookup: they return disabled, empty
controls instead.
"""
import logging

from fastapi import APIRouter, Depends, Query

from data.nepal_locations import find_province_by_name
from models.address import (
    AddressLevel,
    AddressSelection,
    BilingualAddress,
    GeographicLookup,
    LevelControl,
    CASCADE_FIELDS,
)
from models.schemas import (
    AddressChangeRequest,
    AddressChangeResponse,
    AddressSelectionRequest,
    AddressValidationResponse,
    LookupStatusResponse,
)
from services.address_cascade import (
    apply_address_change,
    diff_selection,
    is_valid_option,
    validate_selection,
)
from services.address_lookup_service import get_address_lookup
from services.address_selector import build_level_control
from services.address_translation import to_bilingual
from utils.exceptions import InvalidSelectionError, LookupUnavailableError

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/address", tags=["Address"])


async def lookup_dependency() -> GeographicLookup:
    """Shared lookup; empty when loading failed."""
    return await get_address_lookup()


def _control(level: AddressLevel, selection: AddressSelection, lookup: GeographicLookup) -> LevelControl:
    return build_level_control(level, selection, lookup, loading=lookup.is_empty)


# ── read endpoints ───────────────────────────────────────────────────────
@router.get("/lookup", response_model=LookupStatusResponse)
async def lookup_status(lookup: GeographicLookup = Depends(lookup_dependency)):
    """Whether the lookup is loaded, with table sizes."""
    return LookupStatusResponse(loaded=not lookup.is_empty, counts=lookup.counts())


@router.get("/provinces", response_model=LevelControl)
async def list_provinces(lookup: GeographicLookup = Depends(lookup_dependency)):
    """Province options."""
    return _control(AddressLevel.PROVINCE, AddressSelection(), lookup)


@router.get("/districts", response_model=LevelControl)
async def list_districts(
    province: str = Query("", description="Province name, Nepali or English"),
    lookup: GeographicLookup = Depends(lookup_dependency),
):
    """District options of a province."""
    canonical, _ = find_province_by_name(province)
    selection = AddressSelection(province=canonical or province)
    return _control(AddressLevel.DISTRICT, selection, lookup)


@router.get("/municipalities", response_model=LevelControl)
async def list_municipalities(
    district: str = Query("", description="District name"),
    lookup: GeographicLookup = Depends(lookup_dependency),
):
    """Municipality options of a district."""
    return _control(AddressLevel.MUNICIPALITY, AddressSelection(district=district), lookup)


@router.get("/wards", response_model=LevelControl)
async def list_wards(
    municipality: str = Query("", description="Municipality name"),
    lookup: GeographicLookup = Depends(lookup_dependency),
):
    """Ward options of a municipality; labels use Latin digits."""
    return _control(AddressLevel.WARD, AddressSelection(municipality=municipality), lookup)


# ── write endpoints ──────────────────────────────────────────────────────
@router.post("/change", response_model=AddressChangeResponse)
async def change_address(
    body: AddressChangeRequest,
    lookup: GeographicLookup = Depends(lookup_dependency),
):
    """
    Apply one field change.

    Returns the new selection, the partial update the form should merge
    (the changed field plus every cleared child), and the refreshed controls.
    """
    if body.level in CASCADE_FIELDS:
        if lookup.is_empty:
            raise LookupUnavailableError()
        if not is_valid_option(AddressLevel(body.level), body.value, body.selection, lookup):
            raise InvalidSelectionError(body.level, body.value)

    updated = apply_address_change(body.selection, lookup, body.level, body.value)
    changes = {body.level: getattr(updated, body.level), **diff_selection(body.selection, updated)}

    if len(changes) > 1:
        logger.info(
            f"{body.level} change cleared {sorted(k for k in changes if k != body.level)}",
            extra={"level_name": body.level}
        )

    return AddressChangeResponse(
        selection=updated,
        changes=changes,
        controls=[_control(level, updated, lookup) for level in AddressLevel.ordered()],
    )


@router.post("/validate", response_model=AddressValidationResponse)
async def validate_address(
    body: AddressSelectionRequest,
    lookup: GeographicLookup = Depends(lookup_dependency),
):
    """Check the cascade invariant for a selection."""
    if lookup.is_empty:
        raise LookupUnavailableError()
    invalid = validate_selection(body.selection, lookup)
    return AddressValidationResponse(valid=not invalid, invalid_levels=invalid)


@router.post("/bilingual", response_model=BilingualAddress)
async def bilingual_address(
    body: AddressSelectionRequest,
    lookup: GeographicLookup = Depends(lookup_dependency),
):
    """English/Nepali pairs and formatted address; stored values are not changed."""
    return to_bilingual(body.selection, lookup)

"""
Pydantic models for API request/response schemas.
"""
from typing import Dict, List, Literal

from pydantic import BaseModel, Field

from models.address import AddressSelection, LevelControl


class HealthResponse(BaseModel):
    """Response model for the /health endpoint."""
    status: str = Field(..., description="Service status")
    lookup_loaded: bool = Field(..., description="Whether the address lookup is cached")


class LookupStatusResponse(BaseModel):
    """Loaded state of the geographic lookup."""
    loaded: bool = Field(..., description="False means every control is disabled")
    counts: Dict[str, int] = Field(
        default_factory=dict,
        description="Number of provinces, districts, municipalities and wards"
    )


class AddressChangeRequest(BaseModel):
    """Request model for the /address/change endpoint."""
    selection: AddressSelection = Field(
        default_factory=AddressSelection,
        description="Current form values"
    )
    level: Literal["province", "district", "municipality", "ward", "city", "tole"] = Field(
        ...,
        description="Field the user changed"
    )
    value: str = Field("", description="New value; empty string clears the field")

    class Config:
        json_schema_extra = {
            "example": {
                "selection": {
                    "province": "वागमती",
                    "district": "काठमाडौं",
                    "municipality": "काठमाडौं महानगरपालिका",
                    "ward": "५",
                    "city": "",
                    "tole": ""
                },
                "level": "province",
                "value": "गण्डकी"
            }
        }


class AddressChangeResponse(BaseModel):
    """Consolidated result of one change."""
    selection: AddressSelection = Field(..., description="Selection after the change")
    changes: Dict[str, str] = Field(
        default_factory=dict,
        description="Partial update for the host form (changed field plus cleared children)"
    )
    controls: List[LevelControl] = Field(
        default_factory=list,
        description="Province, district, municipality and ward controls in order"
    )


class AddressSelectionRequest(BaseModel):
    """Request wrapping a full selection."""
    selection: AddressSelection


class AddressValidationResponse(BaseModel):
    """Consistency check of a selection against the lookup."""
    valid: bool = Field(..., description="True if every chosen level is offered under its parent")
    invalid_levels: List[str] = Field(
        default_factory=list,
        description="Levels whose value is not an option under the parent value"
    )

"""
Address models for the homestay address selector.

- AddressLevel: the four cascade levels in fixed order
- GeographicLookup: immutable lookup tables loaded once from static documents
- AddressSelection: the host form's address record
- BilingualField / BilingualAddress: English + Nepali pairs for the profile editor
- AddressOption / LevelControl: render model of one selection control
"""
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class AddressLevel(str, Enum):
    """Cascade levels, parent first."""
    PROVINCE = "province"
    DISTRICT = "district"
    MUNICIPALITY = "municipality"
    WARD = "ward"

    @classmethod
    def ordered(cls) -> List["AddressLevel"]:
        return [cls.PROVINCE, cls.DISTRICT, cls.MUNICIPALITY, cls.WARD]

    @property
    def parent(self) -> Optional["AddressLevel"]:
        levels = AddressLevel.ordered()
        index = levels.index(self)
        return levels[index - 1] if index > 0 else None

    @property
    def children(self) -> List["AddressLevel"]:
        """All levels deeper than this one, nearest first."""
        levels = AddressLevel.ordered()
        return levels[levels.index(self) + 1:]


CASCADE_FIELDS = [level.value for level in AddressLevel.ordered()]
FREE_TEXT_FIELDS = ["city", "tole"]


class GeographicLookup(BaseModel):
    """
    Province → district → municipality → ward lookup tables.

    Field aliases match the keys used by the static documents and the
    registration frontend (``allProvinces``, ``provinceDistrictsMap``, ...).
    Instances are shared by reference and must never be mutated.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    all_provinces: List[str] = Field(default_factory=list, alias="allProvinces")
    province_districts_map: Dict[str, List[str]] = Field(
        default_factory=dict, alias="provinceDistrictsMap"
    )
    district_municipalities_map: Dict[str, List[str]] = Field(
        default_factory=dict, alias="districtMunicipalitiesMap"
    )
    municipalities_wards_map: Dict[str, List[str]] = Field(
        default_factory=dict, alias="municipalitiesWardsMap"
    )

    # Native name -> English name, display only
    district_translations: Dict[str, str] = Field(
        default_factory=dict, alias="districtTranslations"
    )
    municipality_translations: Dict[str, str] = Field(
        default_factory=dict, alias="municipalityTranslations"
    )

    @classmethod
    def empty(cls) -> "GeographicLookup":
        """Lookup used while nothing is loaded; disables every level."""
        return cls()

    @property
    def is_empty(self) -> bool:
        return not self.all_provinces

    def options_for(self, level: AddressLevel, parent_value: str = "") -> List[str]:
        """
        Child option list for ``level`` under ``parent_value``.

        Province options ignore the parent. An empty parent or a key missing
        from the map yields an empty list.
        """
        level = AddressLevel(level)
        if level is AddressLevel.PROVINCE:
            return list(self.all_provinces)
        if not parent_value:
            return []
        table = {
            AddressLevel.DISTRICT: self.province_districts_map,
            AddressLevel.MUNICIPALITY: self.district_municipalities_map,
            AddressLevel.WARD: self.municipalities_wards_map,
        }[level]
        return list(table.get(parent_value, []))

    def counts(self) -> Dict[str, int]:
        """Table sizes; a name listed under two parents counts once."""
        districts = {d for names in self.province_districts_map.values() for d in names}
        municipalities = {m for names in self.district_municipalities_map.values() for m in names}
        return {
            "provinces": len(self.all_provinces),
            "districts": len(districts),
            "municipalities": len(municipalities),
            "wards": sum(len(wards) for wards in self.municipalities_wards_map.values()),
        }


class AddressSelection(BaseModel):
    """Address fields of a homestay form. Empty string means "not chosen"."""
    province: str = Field("", description="Province name (native script)")
    district: str = Field("", description="District name")
    municipality: str = Field("", description="Municipality name")
    ward: str = Field("", description="Ward identifier, may use Devanagari digits")
    city: str = Field("", description="City (free text)")
    tole: str = Field("", description="Tole / street (free text)")

    def value_of(self, level: AddressLevel) -> str:
        return getattr(self, AddressLevel(level).value)

    class Config:
        json_schema_extra = {
            "example": {
                "province": "वागमती",
                "district": "काठमाडौं",
                "municipality": "काठमाडौं महानगरपालिका",
                "ward": "५",
                "city": "Kathmandu",
                "tole": "Thamel"
            }
        }


class BilingualField(BaseModel):
    """English / Nepali pair as stored by the profile editor."""
    en: str = ""
    ne: str = ""


class BilingualAddress(BaseModel):
    """Address with every cascade level in both languages."""
    province: BilingualField = Field(default_factory=BilingualField)
    district: BilingualField = Field(default_factory=BilingualField)
    municipality: BilingualField = Field(default_factory=BilingualField)
    ward: BilingualField = Field(default_factory=BilingualField)
    city: str = ""
    tole: str = ""
    formatted_address: BilingualField = Field(default_factory=BilingualField)


class AddressOption(BaseModel):
    """One selectable value and its display label."""
    value: str = Field(..., description="Stored value (native script)")
    label: str = Field(..., description="Display label, e.g. 'Bagmati / वागमती'")


class LevelControl(BaseModel):
    """Render state of one selection control."""
    level: AddressLevel
    value: str = ""
    options: List[AddressOption] = Field(default_factory=list)
    disabled: bool = True

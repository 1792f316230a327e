"""
Address display helpers.

Turns stored (Nepali) address values into labels and bilingual records.
Nothing here modifies a stored value; every function returns new strings.
"""
from typing import Dict, Optional

from data.nepal_locations import get_province_english_name
from models.address import (
    AddressLevel,
    AddressSelection,
    BilingualAddress,
    BilingualField,
    GeographicLookup,
)
from utils.text_normalization import normalize_whitespace, transliterate_devanagari_digits


def translate_ward(ward: str) -> str:
    """
    Display form of a ward identifier: Devanagari digits become Latin digits.

    "७" → "7", "१२" → "12"; anything else is returned unchanged.
    """
    return transliterate_devanagari_digits(ward)


def find_best_translation_match(name: str, translations: Dict[str, str]) -> str:
    """
    English name for ``name`` from a native -> English table.

    The tables carry keys with stray whitespace, so matching tries, in order:
    1. Direct lookup of the whitespace-normalised name
    2. The same name with a trailing space
    3. The first key containing the name, or contained in it
    Falls back to the cleaned name itself.
    """
    clean_name = normalize_whitespace(name)
    if not clean_name:
        return ""

    if clean_name in translations:
        return translations[clean_name]
    if clean_name + " " in translations:
        return translations[clean_name + " "]

    for key, english in translations.items():
        clean_key = normalize_whitespace(key)
        if clean_key and (clean_name in clean_key or clean_key in clean_name):
            return english

    return clean_name


def english_name(level: AddressLevel, value: str, lookup: GeographicLookup) -> str:
    """English form of one cascade value (the value itself when unknown)."""
    if not value:
        return ""
    level = AddressLevel(level)
    if level is AddressLevel.PROVINCE:
        return get_province_english_name(value) or value
    if level is AddressLevel.DISTRICT:
        return lookup.district_translations.get(value.strip()) or value
    if level is AddressLevel.MUNICIPALITY:
        return find_best_translation_match(value, lookup.municipality_translations)
    return translate_ward(value)


def option_label(level: AddressLevel, value: str, lookup: GeographicLookup) -> str:
    """Label shown in a control, "English / नेपाली"."""
    return f"{english_name(level, value, lookup)} / {value}"


def _format_address(parts: list, ward_prefix: str) -> str:
    tole, city, ward, municipality, district, province = parts
    ordered = [tole, city, f"{ward_prefix}-{ward}" if ward else "", municipality, district, province]
    return ", ".join(p for p in ordered if p)


def to_bilingual(
    selection: AddressSelection,
    lookup: Optional[GeographicLookup] = None
) -> BilingualAddress:
    """
    Build the English/Nepali address record used by the profile editor.

    The Nepali side keeps the stored values untouched.
    """
    lookup = lookup or GeographicLookup.empty()

    fields = {}
    for level in AddressLevel.ordered():
        value = selection.value_of(level)
        fields[level.value] = BilingualField(
            en=english_name(level, value, lookup),
            ne=value
        )

    en_parts = [
        selection.tole, selection.city,
        fields["ward"].en, fields["municipality"].en,
        fields["district"].en, fields["province"].en,
    ]
    ne_parts = [
        selection.tole, selection.city,
        selection.ward, selection.municipality,
        selection.district, selection.province,
    ]

    return BilingualAddress(
        **fields,
        city=selection.city,
        tole=selection.tole,
        formatted_address=BilingualField(
            en=_format_address(en_parts, "Ward"),
            ne=_format_address(ne_parts, "वडा नं."),
        ),
    )

"""
Nepal Province Reference Data

Provides reference data for the address selector:
- 7 provinces with Nepali names, English names and spelling variants
- Used for option labels and for resolving English province names
"""

# Nepal's 7 provinces keyed by the name used in the lookup documents
NEPAL_PROVINCES = {
    "कोशी": {
        "name_en": "Koshi",
        "number": 1,
        "variants": ["कोशी", "कोसी", "Koshi", "Province 1"]
    },
    "मधेश": {
        "name_en": "Madhesh",
        "number": 2,
        "variants": ["मधेश", "मधेस", "Madhesh", "Madhesh Province", "Province 2"]
    },
    "वागमती": {
        "name_en": "Bagmati",
        "number": 3,
        "variants": ["वागमती", "बागमती", "Bagmati", "Province 3"]
    },
    "गण्डकी": {
        "name_en": "Gandaki",
        "number": 4,
        "variants": ["गण्डकी", "गण्डकि", "Gandaki", "Province 4"]
    },
    "लुम्बिनी": {
        "name_en": "Lumbini",
        "number": 5,
        "variants": ["लुम्बिनी", "लुम्बिनि", "Lumbini", "Province 5"]
    },
    "कर्णाली": {
        "name_en": "Karnali",
        "number": 6,
        "variants": ["कर्णाली", "कर्णालि", "Karnali", "Province 6"]
    },
    "सुदुर पश्चिम": {
        "name_en": "Sudurpashchim",
        "number": 7,
        "variants": ["सुदुर पश्चिम", "सुदूरपश्चिम", "Sudurpashchim", "Sudurpaschim", "Province 7"]
    }
}


def get_province_english_name(name: str) -> str | None:
    """English name of a province, or None when it is not a known province."""
    province = NEPAL_PROVINCES.get(name.strip())
    return province["name_en"] if province else None


def find_province_by_name(name: str) -> tuple[str | None, dict | None]:
    """
    Find province by Nepali name, English name or variant (case-insensitive).

    Returns: (canonical_name, province_data) or (None, None)
    """
    name_normalized = " ".join(name.split()).casefold()
    if not name_normalized:
        return None, None
    for canonical_name, province_data in NEPAL_PROVINCES.items():
        candidates = [canonical_name, province_data["name_en"], *province_data["variants"]]
        if name_normalized in (c.casefold() for c in candidates):
            return canonical_name, province_data
    return None, None

"""
Text Normalization Utilities for Nepali (Devanagari) address names.

Provides functions for:
- Devanagari digit transliteration (ward numbers)
- Whitespace cleanup of lookup keys
"""
import re

# =============================================================================
# DEVANAGARI DIGITS
# =============================================================================

# Devanagari digit → Latin digit
DEVANAGARI_DIGITS = {
    '\u0966': '0',  # ०
    '\u0967': '1',  # १
    '\u0968': '2',  # २
    '\u0969': '3',  # ३
    '\u096A': '4',  # ४
    '\u096B': '5',  # ५
    '\u096C': '6',  # ६
    '\u096D': '7',  # ७
    '\u096E': '8',  # ८
    '\u096F': '9',  # ९
}

_DIGIT_TABLE = str.maketrans(DEVANAGARI_DIGITS)


def transliterate_devanagari_digits(text: str) -> str:
    """
    Replace every Devanagari digit with its Latin equivalent.

    Any other character is returned unchanged, so the function is total:
    "७" → "7", "वडा १२" → "वडा 12", "5" → "5", "" → "".
    """
    if not text:
        return ""
    return text.translate(_DIGIT_TABLE)


# =============================================================================
# WHITESPACE
# =============================================================================

def normalize_whitespace(text: str) -> str:
    """Trim and collapse internal runs of whitespace to a single space."""
    if not text:
        return ""
    return re.sub(r'\s+', ' ', text).strip()


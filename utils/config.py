"""Configuration settings for the homestay address service."""
import os
from pathlib import Path

# Base directories
BASE_DIR = Path(__file__).parent.parent
DATA_DIR = BASE_DIR / "data"

# Address lookup source
# Local directory holding the static address documents (bundled by default)
ADDRESS_DATA_DIR = Path(os.environ.get("ADDRESS_DATA_DIR", str(DATA_DIR / "address")))

# When set, documents are fetched over HTTP from this base URL instead,
# e.g. "https://example.org/address"
ADDRESS_DATA_BASE_URL = os.environ.get("ADDRESS_DATA_BASE_URL", "").rstrip("/")

# Seconds to wait for each lookup document
LOOKUP_FETCH_TIMEOUT = float(os.environ.get("LOOKUP_FETCH_TIMEOUT", "10"))

# Seconds a failed lookup load is remembered before the next attempt
LOOKUP_RETRY_INTERVAL = float(os.environ.get("LOOKUP_RETRY_INTERVAL", "30"))

# Preload the lookup cache at startup
PRELOAD_ADDRESS_LOOKUP = os.environ.get("PRELOAD_ADDRESS_LOOKUP", "true").lower() == "true"

# API Security (API Key Authentication)
# Comma-separated list of valid API keys. If empty, auth is disabled.
API_KEYS = [k.strip() for k in os.environ.get("API_KEYS", "").split(",") if k.strip()]

# Logging configuration
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
LOG_JSON_FORMAT = os.environ.get("LOG_JSON_FORMAT", "true").lower() == "true"


# Required lookup documents - all four must load or the lookup stays empty
# Format: field name on GeographicLookup -> document name
ADDRESS_RESOURCES = {
    "all_provinces": "all-provinces.json",
    "province_districts_map": "map-province-districts.json",
    "district_municipalities_map": "map-districts-municipalities.json",
    "municipalities_wards_map": "map-municipalities-wards.json",
}

# Optional native -> English name tables, used for option labels only
TRANSLATION_RESOURCES = {
    "district_translations": "all-districts.json",
    "municipality_translations": "all-municipalities.json",
}

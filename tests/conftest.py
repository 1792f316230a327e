"""
Pytest Configuration and Fixtures

Shared fixtures for all tests in the address service test suite.
Run with: pytest -v
"""
import json
import shutil
import pytest
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from models.address import AddressSelection, GeographicLookup
from services.address_lookup_service import reset_address_lookup_cache
from utils.config import ADDRESS_DATA_DIR


@pytest.fixture(autouse=True)
def clear_lookup_cache():
    """Every test starts and ends with an empty lookup cache."""
    reset_address_lookup_cache()
    yield
    reset_address_lookup_cache()


@pytest.fixture
def sample_lookup():
    """
    Small English-named lookup.

    "Lalitpur" exists under both Bagmati and Koshi; Godawari stores its
    wards with Devanagari digits.
    """
    return GeographicLookup(
        all_provinces=["Bagmati", "Gandaki", "Koshi"],
        province_districts_map={
            "Bagmati": ["Kathmandu", "Lalitpur"],
            "Gandaki": ["Kaski", "Tanahun"],
            "Koshi": ["Jhapa", "Lalitpur"],
        },
        district_municipalities_map={
            "Kathmandu": ["KMC", "Kirtipur"],
            "Lalitpur": ["LMC", "Godawari"],
            "Kaski": ["Pokhara"],
            "Tanahun": [],
            "Jhapa": ["Damak"],
        },
        municipalities_wards_map={
            "KMC": ["4", "5", "6"],
            "Kirtipur": ["1", "2", "5"],
            "LMC": ["5", "7"],
            "Godawari": ["१", "७"],
            "Pokhara": ["5", "17"],
            "Damak": ["1"],
        },
    )


@pytest.fixture
def full_selection():
    """Complete Bagmati / Kathmandu / KMC / 5 selection."""
    return AddressSelection(
        province="Bagmati",
        district="Kathmandu",
        municipality="KMC",
        ward="5",
        city="Kathmandu",
        tole="Thamel",
    )


@pytest.fixture
def address_data_dir(tmp_path):
    """Writable copy of the bundled address documents."""
    target = tmp_path / "address"
    shutil.copytree(ADDRESS_DATA_DIR, target)
    return target


@pytest.fixture
def write_document(address_data_dir):
    """Overwrite one document in the copied data directory."""
    def _write(name: str, content):
        path = address_data_dir / name
        if isinstance(content, str):
            path.write_text(content, encoding="utf-8")
        else:
            path.write_text(json.dumps(content, ensure_ascii=False), encoding="utf-8")
        return path
    return _write

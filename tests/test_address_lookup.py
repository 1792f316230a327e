"""
Geographic Lookup Loading Tests

Tests document loading from disk and HTTP, failure handling and the shared cache.
Run with: pytest tests/test_address_lookup.py -v
"""
import asyncio
import json
import pytest
import requests
import sys
from pathlib import Path
from pydantic import ValidationError as PydanticValidationError

sys.path.insert(0, str(Path(__file__).parent.parent))

from models.address import AddressLevel
from services import address_lookup_service
from services.address_lookup_service import (
    get_address_lookup,
    get_cached_lookup,
    load_geographic_lookup,
    reset_address_lookup_cache,
)
from utils.config import ADDRESS_DATA_DIR
from utils.exceptions import LookupLoadFailure


class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, payload=None, status_code=200, text=None):
        self.payload = payload
        self.status_code = status_code
        self.text = text

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Client Error")

    def json(self):
        if self.text is not None:
            return json.loads(self.text)
        return self.payload


def serve_directory(directory, overrides=None):
    """Fake requests.get that serves the documents of ``directory``."""
    overrides = overrides or {}
    calls = []

    def fake_get(url, timeout=None):
        calls.append((url, timeout))
        name = url.rsplit("/", 1)[-1]
        if name in overrides:
            return overrides[name]
        path = Path(directory) / name
        if not path.exists():
            return FakeResponse(status_code=404)
        return FakeResponse(json.loads(path.read_text(encoding="utf-8")))

    fake_get.calls = calls
    return fake_get


class TestBundledData:
    """Test the documents shipped with the service."""

    def test_bundled_documents_load(self):
        lookup = asyncio.run(load_geographic_lookup(data_dir=ADDRESS_DATA_DIR))
        assert not lookup.is_empty
        assert len(lookup.all_provinces) == 7
        assert lookup.counts()["provinces"] == 7
        assert lookup.counts()["districts"] == 16
        assert lookup.counts()["municipalities"] == 26

    def test_bundled_documents_consistent(self):
        """Every child list points at keys of the next table."""
        lookup = asyncio.run(load_geographic_lookup(data_dir=ADDRESS_DATA_DIR))
        for province in lookup.all_provinces:
            assert province in lookup.province_districts_map
            for district in lookup.province_districts_map[province]:
                assert district in lookup.district_municipalities_map
                for municipality in lookup.district_municipalities_map[district]:
                    assert municipality in lookup.municipalities_wards_map

    def test_ward_order_preserved(self):
        lookup = asyncio.run(load_geographic_lookup(data_dir=ADDRESS_DATA_DIR))
        wards = lookup.options_for(AddressLevel.WARD, "काठमाडौं महानगरपालिका")
        assert len(wards) == 32
        assert wards[6] == "७"

    def test_translations_loaded(self):
        lookup = asyncio.run(load_geographic_lookup(data_dir=ADDRESS_DATA_DIR))
        assert lookup.district_translations["काठमाडौं"] == "Kathmandu"
        assert "माछापुच्छ्रे गाउँपालिका " in lookup.municipality_translations

    def test_district_without_municipalities(self):
        lookup = asyncio.run(load_geographic_lookup(data_dir=ADDRESS_DATA_DIR))
        assert lookup.options_for(AddressLevel.MUNICIPALITY, "कञ्चनपुर") == []


class TestLocalFailures:
    """Test all-or-nothing loading from a directory."""

    def test_missing_required_document(self, address_data_dir):
        (address_data_dir / "map-municipalities-wards.json").unlink()
        with pytest.raises(LookupLoadFailure) as exc_info:
            asyncio.run(load_geographic_lookup(data_dir=address_data_dir))
        assert exc_info.value.details["resource"] == "map-municipalities-wards.json"
        assert exc_info.value.details["reason"].startswith("read failed")

    def test_invalid_json(self, address_data_dir, write_document):
        write_document("all-provinces.json", "[\"कोशी\",")
        with pytest.raises(LookupLoadFailure) as exc_info:
            asyncio.run(load_geographic_lookup(data_dir=address_data_dir))
        assert exc_info.value.details["reason"].startswith("invalid JSON")

    def test_wrong_shape(self, address_data_dir, write_document):
        """A map where a list is expected is rejected."""
        write_document("all-provinces.json", {"कोशी": ["झापा"]})
        with pytest.raises(LookupLoadFailure) as exc_info:
            asyncio.run(load_geographic_lookup(data_dir=address_data_dir))
        assert exc_info.value.details["reason"] == "unexpected document shape"

    def test_numeric_wards_rejected(self, address_data_dir, write_document):
        """Ward identifiers must be strings."""
        write_document("map-municipalities-wards.json", {"दमक नगरपालिका": [1, 2, 3]})
        with pytest.raises(LookupLoadFailure):
            asyncio.run(load_geographic_lookup(data_dir=address_data_dir))

    def test_missing_translation_tolerated(self, address_data_dir):
        """Translation tables only feed labels."""
        (address_data_dir / "all-municipalities.json").unlink()
        lookup = asyncio.run(load_geographic_lookup(data_dir=address_data_dir))
        assert not lookup.is_empty
        assert lookup.municipality_translations == {}
        assert lookup.district_translations


class TestRemoteLoading:
    """Test loading over HTTP with requests."""

    def test_loads_from_base_url(self, monkeypatch):
        fake_get = serve_directory(ADDRESS_DATA_DIR)
        monkeypatch.setattr(address_lookup_service.requests, "get", fake_get)

        lookup = asyncio.run(load_geographic_lookup(base_url="https://example.org/address/", timeout=3))

        assert len(lookup.all_provinces) == 7
        urls = sorted(url for url, _ in fake_get.calls)
        assert "https://example.org/address/all-provinces.json" in urls
        assert len(urls) == 6
        assert all(timeout == 3 for _, timeout in fake_get.calls)

    def test_http_error_fails_whole_load(self, monkeypatch):
        fake_get = serve_directory(
            ADDRESS_DATA_DIR,
            overrides={"map-province-districts.json": FakeResponse(status_code=404)}
        )
        monkeypatch.setattr(address_lookup_service.requests, "get", fake_get)

        with pytest.raises(LookupLoadFailure) as exc_info:
            asyncio.run(load_geographic_lookup(base_url="https://example.org/address"))
        assert exc_info.value.details["resource"] == "map-province-districts.json"
        assert exc_info.value.details["reason"].startswith("request failed")

    def test_connection_error(self, monkeypatch):
        def fake_get(url, timeout=None):
            raise requests.ConnectionError("connection refused")

        monkeypatch.setattr(address_lookup_service.requests, "get", fake_get)
        with pytest.raises(LookupLoadFailure):
            asyncio.run(load_geographic_lookup(base_url="https://example.org/address"))

    def test_invalid_json_response(self, monkeypatch):
        fake_get = serve_directory(
            ADDRESS_DATA_DIR,
            overrides={"all-provinces.json": FakeResponse(text="<html>")}
        )
        monkeypatch.setattr(address_lookup_service.requests, "get", fake_get)

        with pytest.raises(LookupLoadFailure) as exc_info:
            asyncio.run(load_geographic_lookup(base_url="https://example.org/address"))
        assert exc_info.value.details["reason"].startswith("invalid JSON")


class TestSharedCache:
    """Test the process-wide lookup cache."""

    def test_loaded_once_and_shared(self):
        first = asyncio.run(get_address_lookup())
        second = asyncio.run(get_address_lookup())
        assert first is second
        assert get_cached_lookup() is first

    def test_failure_returns_empty_and_is_not_cached(self, monkeypatch, tmp_path, address_data_dir):
        monkeypatch.setattr(address_lookup_service, "LOOKUP_RETRY_INTERVAL", 0)
        monkeypatch.setattr(address_lookup_service, "ADDRESS_DATA_DIR", tmp_path / "missing")

        lookup = asyncio.run(get_address_lookup())
        assert lookup.is_empty
        assert get_cached_lookup() is None

        # A later call retries
        monkeypatch.setattr(address_lookup_service, "ADDRESS_DATA_DIR", address_data_dir)
        lookup = asyncio.run(get_address_lookup())
        assert not lookup.is_empty
        assert get_cached_lookup() is lookup

    def test_recent_failure_not_refetched(self, monkeypatch, tmp_path, address_data_dir):
        """Within the retry interval a failed load is answered without fetching."""
        monkeypatch.setattr(address_lookup_service, "LOOKUP_RETRY_INTERVAL", 60)
        monkeypatch.setattr(address_lookup_service, "ADDRESS_DATA_DIR", tmp_path / "missing")
        assert asyncio.run(get_address_lookup()).is_empty

        calls = []
        real_load = address_lookup_service.load_geographic_lookup

        async def counting_load():
            calls.append(1)
            return await real_load()

        monkeypatch.setattr(address_lookup_service, "load_geographic_lookup", counting_load)
        monkeypatch.setattr(address_lookup_service, "ADDRESS_DATA_DIR", address_data_dir)

        assert asyncio.run(get_address_lookup()).is_empty
        with pytest.raises(LookupLoadFailure):
            asyncio.run(get_address_lookup(raise_on_failure=True))
        assert calls == []

        # Dropping the cache also forgets the failure
        reset_address_lookup_cache()
        assert not asyncio.run(get_address_lookup()).is_empty
        assert calls == [1]

    def test_concurrent_callers_on_successive_loops(self):
        """Each event loop gets its own lock, so contention on a new loop works."""
        async def load_twice():
            return await asyncio.gather(get_address_lookup(), get_address_lookup())

        first, second = asyncio.run(load_twice())
        assert first is second

        reset_address_lookup_cache()
        third, fourth = asyncio.run(load_twice())
        assert third is fourth
        assert not third.is_empty

    def test_raise_on_failure(self, monkeypatch, tmp_path):
        monkeypatch.setattr(address_lookup_service, "ADDRESS_DATA_DIR", tmp_path / "missing")
        with pytest.raises(LookupLoadFailure):
            asyncio.run(get_address_lookup(raise_on_failure=True))

    def test_lookup_is_immutable(self):
        lookup = asyncio.run(get_address_lookup())
        with pytest.raises(PydanticValidationError):
            lookup.all_provinces = []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

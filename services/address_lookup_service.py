"""
Geographic Lookup Service.

Loads the static address documents and keeps them in a module-level cache.

Sources
-------
- Local directory ``ADDRESS_DATA_DIR`` (the bundled ``data/address`` by default)
- HTTP, when ``ADDRESS_DATA_BASE_URL`` is set (fetched with ``requests``)

The four cascade documents are fetched concurrently and joined
all-or-nothing: if any one fails, ``load_geographic_lookup`` raises
``LookupLoadFailure`` and no lookup is cached. The failure itself is
remembered for ``LOOKUP_RETRY_INTERVAL`` seconds so an outage does not
trigger a fetch per request. The two translation tables are optional; a
failure there only drops English labels.

Usage
-----
    from services.address_lookup_service import get_address_lookup

    lookup = await get_address_lookup()
    lookup.options_for(AddressLevel.DISTRICT, "वागमती")
"""
import asyncio
import json
import logging
import time
import weakref
from pathlib import Path
from typing import Any, Dict, Optional

import requests
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from models.address import GeographicLookup
from utils.config import (
    ADDRESS_DATA_BASE_URL,
    ADDRESS_DATA_DIR,
    ADDRESS_RESOURCES,
    LOOKUP_FETCH_TIMEOUT,
    LOOKUP_RETRY_INTERVAL,
    TRANSLATION_RESOURCES,
)
from utils.exceptions import LookupLoadFailure
from utils.logging_config import log_execution_time

logger = logging.getLogger(__name__)

# Cached lookup, None until the first successful load
_address_lookup: Optional[GeographicLookup] = None

# asyncio locks are bound to one event loop, so keep one per loop
_address_lookup_locks = weakref.WeakKeyDictionary()

# Last load failure and when it happened (time.monotonic)
_last_failure: Optional[LookupLoadFailure] = None
_last_failure_at = 0.0


# ---------------------------------------------------------------------------
# Document loading
# ---------------------------------------------------------------------------
def _read_local_document(name: str, data_dir: Path) -> Any:
    path = Path(data_dir) / name
    return json.loads(path.read_text(encoding="utf-8"))


def _fetch_remote_document(name: str, base_url: str, timeout: float) -> Any:
    response = requests.get(f"{base_url}/{name}", timeout=timeout)
    response.raise_for_status()
    return response.json()


def _load_document(
    field: str,
    name: str,
    base_url: str,
    data_dir: Path,
    timeout: float
) -> Any:
    """
    Load one document and check it has the shape of its lookup field.

    Raises:
        LookupLoadFailure: fetch/read error, bad status, invalid JSON or shape
    """
    try:
        if base_url:
            document = _fetch_remote_document(name, base_url, timeout)
        else:
            document = _read_local_document(name, data_dir)
    except requests.RequestException as e:
        raise LookupLoadFailure(name, f"request failed: {e}") from e
    except OSError as e:
        raise LookupLoadFailure(name, f"read failed: {e}") from e
    except ValueError as e:
        # json.JSONDecodeError and requests' JSONDecodeError are both ValueErrors
        raise LookupLoadFailure(name, f"invalid JSON: {e}") from e

    annotation = GeographicLookup.model_fields[field].annotation
    try:
        return TypeAdapter(annotation).validate_python(document, strict=True)
    except PydanticValidationError as e:
        raise LookupLoadFailure(
            name,
            "unexpected document shape",
            details={"errors": e.error_count()}
        ) from e


@log_execution_time
async def load_geographic_lookup(
    base_url: Optional[str] = None,
    data_dir: Optional[Path] = None,
    timeout: Optional[float] = None
) -> GeographicLookup:
    """
    Load all lookup documents concurrently.

    Args:
        base_url: HTTP base URL; defaults to ADDRESS_DATA_BASE_URL
        data_dir: Local directory used when no base URL is configured
        timeout: Per-request timeout in seconds

    Returns:
        A fully loaded GeographicLookup

    Raises:
        LookupLoadFailure: any of the four cascade documents failed
    """
    base_url = ADDRESS_DATA_BASE_URL if base_url is None else base_url.rstrip("/")
    data_dir = ADDRESS_DATA_DIR if data_dir is None else data_dir
    timeout = LOOKUP_FETCH_TIMEOUT if timeout is None else timeout

    resources: Dict[str, str] = {**ADDRESS_RESOURCES, **TRANSLATION_RESOURCES}
    results = await asyncio.gather(
        *(
            asyncio.to_thread(_load_document, field, name, base_url, data_dir, timeout)
            for field, name in resources.items()
        ),
        return_exceptions=True
    )

    fields: Dict[str, Any] = {}
    for (field, name), result in zip(resources.items(), results):
        if isinstance(result, LookupLoadFailure):
            if field in ADDRESS_RESOURCES:
                raise result
            logger.warning(
                f"Optional address document {name} unavailable: {result.details.get('reason')}",
                extra={"resource": name}
            )
            continue
        if isinstance(result, BaseException):
            raise result
        fields[field] = result

    lookup = GeographicLookup(**fields)
    logger.info(f"Address lookup loaded: {lookup.counts()}")
    return lookup


# ---------------------------------------------------------------------------
# Shared cache
# ---------------------------------------------------------------------------
def _lookup_lock() -> asyncio.Lock:
    """Lock guarding the first load, one per running event loop."""
    loop = asyncio.get_running_loop()
    lock = _address_lookup_locks.get(loop)
    if lock is None:
        lock = _address_lookup_locks[loop] = asyncio.Lock()
    return lock


def _recent_failure() -> Optional[LookupLoadFailure]:
    """The last load failure while its retry interval has not elapsed."""
    if _last_failure is None:
        return None
    if time.monotonic() - _last_failure_at >= LOOKUP_RETRY_INTERVAL:
        return None
    return _last_failure


async def get_address_lookup(raise_on_failure: bool = False) -> GeographicLookup:
    """
    Return the shared lookup, loading it on first use.

    The loaded lookup is cached for the life of the process and shared by
    reference. A failed load is remembered for LOOKUP_RETRY_INTERVAL
    seconds; calls within that window fail without fetching again, later
    calls retry.

    Args:
        raise_on_failure: Re-raise LookupLoadFailure instead of returning
            the empty lookup

    Returns:
        The cached lookup, or GeographicLookup.empty() if loading failed
    """
    global _address_lookup, _last_failure, _last_failure_at

    if _address_lookup is not None:
        return _address_lookup

    async with _lookup_lock():
        if _address_lookup is None:
            failure = _recent_failure()
            if failure is None:
                try:
                    _address_lookup = await load_geographic_lookup()
                except LookupLoadFailure as e:
                    logger.error(
                        f"[{e.code}] {e.message} | Details: {e.details}",
                        extra={"resource": e.details.get("resource")}
                    )
                    _last_failure, _last_failure_at = e, time.monotonic()
                    failure = e
                else:
                    _last_failure = None
            else:
                logger.debug(
                    "Address lookup failed recently; not retrying yet",
                    extra={"resource": failure.details.get("resource")}
                )

            if failure is not None:
                if raise_on_failure:
                    raise failure
                return GeographicLookup.empty()

    return _address_lookup


def get_cached_lookup() -> Optional[GeographicLookup]:
    """The cached lookup without triggering a load (None if not loaded)."""
    return _address_lookup


def reset_address_lookup_cache() -> None:
    """Drop the cached lookup and any remembered failure; the next call reloads."""
    global _address_lookup, _last_failure, _last_failure_at
    _address_lookup = None
    _last_failure = None
    _last_failure_at = 0.0

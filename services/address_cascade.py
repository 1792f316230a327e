"""
Address Cascade Service

Pure functions behind the province → district → municipality → ward selector.

Key Principles:
- One change produces one consolidated selection; all dependent clears are
  computed in the same step, so no caller ever observes an invalid
  (parent, child) pair.
- Validity is set membership in the option list computed from the *current*
  parent value, so a child that exists under both the old and the new parent
  is kept.
- Every function is total: unknown names and missing map keys mean
  "no options", never an error.
"""
import logging
from typing import Dict, List, Optional

from models.address import (
    AddressLevel,
    AddressSelection,
    GeographicLookup,
    CASCADE_FIELDS,
    FREE_TEXT_FIELDS,
)
from utils.exceptions import ValidationError

logger = logging.getLogger(__name__)


def options_for(
    level: AddressLevel,
    selection: AddressSelection,
    lookup: GeographicLookup
) -> List[str]:
    """
    Option list of ``level`` given the parent value currently in ``selection``.

    Province options are the full province list; every other level depends on
    its parent and is empty while the parent is empty.
    """
    level = AddressLevel(level)
    parent = level.parent
    parent_value = selection.value_of(parent) if parent else ""
    return lookup.options_for(level, parent_value)


def is_valid_option(
    level: AddressLevel,
    value: str,
    selection: AddressSelection,
    lookup: GeographicLookup
) -> bool:
    """True if ``value`` is empty or one of the options of ``level``."""
    if not value:
        return True
    return value in options_for(level, selection, lookup)


def _clear_invalid_from(
    fields: Dict[str, str],
    lookup: GeographicLookup,
    levels: List[AddressLevel]
) -> None:
    """
    Walk ``levels`` top-down and clear values not offered under their parent.

    A cleared level leaves its children with an empty parent, so the clear
    propagates to every deeper level within the same walk.
    """
    for level in levels:
        value = fields[level.value]
        if not value:
            continue
        parent_value = fields[level.parent.value] if level.parent else ""
        if value not in lookup.options_for(level, parent_value):
            fields[level.value] = ""


def apply_address_change(
    selection: AddressSelection,
    lookup: GeographicLookup,
    changed_level: str,
    new_value: str
) -> AddressSelection:
    """
    Apply one field change and return the consolidated new selection.

    Args:
        selection: Current selection (not modified)
        lookup: Loaded geographic lookup
        changed_level: "province", "district", "municipality", "ward",
            "city" or "tole"
        new_value: Value chosen for ``changed_level`` ("" clears it)

    Returns:
        New AddressSelection. For a cascade level, every deeper level whose
        value is no longer offered under its parent is cleared. A cascade
        value that is not offered itself is stored as "" so the result is
        always consistent.

    Raises:
        ValidationError: ``changed_level`` is not an address field
    """
    new_value = new_value or ""

    if changed_level in FREE_TEXT_FIELDS:
        return selection.model_copy(update={changed_level: new_value})

    if changed_level not in CASCADE_FIELDS:
        raise ValidationError(f"Unknown address field: '{changed_level}'", field=changed_level)

    level = AddressLevel(changed_level)

    # Re-selecting the current value never touches deeper levels
    if selection.value_of(level) == new_value:
        return selection

    fields = selection.model_dump()
    fields[level.value] = new_value
    _clear_invalid_from(fields, lookup, [level, *level.children])

    if fields[level.value] != new_value:
        logger.warning(
            f"Rejected {level.value} '{new_value}': not offered under its parent",
            extra={"level_name": level.value}
        )

    return AddressSelection(**fields)


def reconcile_selection(
    previous: Optional[AddressSelection],
    current: AddressSelection,
    lookup: GeographicLookup
) -> AddressSelection:
    """
    Restore consistency after the host replaced the selection wholesale.

    Only children whose parent value changed between ``previous`` and
    ``current`` are re-checked. With ``previous=None`` every level is checked,
    which is what happens on the first sync after the lookup loads.
    """
    fields = current.model_dump()
    to_check = []
    for level in AddressLevel.ordered():
        parent = level.parent
        if previous is None:
            to_check.append(level)
        elif parent is not None and previous.value_of(parent) != current.value_of(parent):
            to_check.append(level)

    if not to_check:
        return current

    # Checking a level implies checking everything below it
    start = AddressLevel.ordered().index(to_check[0])
    _clear_invalid_from(fields, lookup, AddressLevel.ordered()[start:])
    reconciled = AddressSelection(**fields)
    return current if reconciled == current else reconciled


def diff_selection(old: AddressSelection, new: AddressSelection) -> Dict[str, str]:
    """Fields whose value differs between ``old`` and ``new``."""
    old_fields = old.model_dump()
    return {
        key: value
        for key, value in new.model_dump().items()
        if old_fields.get(key) != value
    }


def validate_selection(selection: AddressSelection, lookup: GeographicLookup) -> List[str]:
    """
    Names of cascade levels that violate the consistency invariant.

    A level is invalid when it is non-empty and not among the options
    computed from its parent's value.
    """
    invalid = []
    for level in AddressLevel.ordered():
        value = selection.value_of(level)
        if value and value not in options_for(level, selection, lookup):
            invalid.append(level.value)
    return invalid


def is_consistent(selection: AddressSelection, lookup: GeographicLookup) -> bool:
    """True when every non-empty level is offered under its parent."""
    return not validate_selection(selection, lookup)

"""
Hierarchical Address Selector.

One selector instance backs one address form. It owns no address data: the
host passes the current AddressSelection in and receives partial updates
through ``on_change``.

Lifecycle
---------
    selector = HierarchicalAddressSelector(selection, on_change=form.update)
    await selector.mount()          # loads the lookup, enables controls
    selector.select("province", "वागमती")
    selector.controls()             # four LevelControls, parent first
    selector.unmount()              # later results become no-ops

Each user selection yields exactly one ``on_change`` call whose payload
contains the selected field plus every deeper field that had to be cleared.
"""
import logging
from typing import Awaitable, Callable, Dict, List, Optional

from models.address import (
    AddressLevel,
    AddressOption,
    AddressSelection,
    GeographicLookup,
    LevelControl,
    CASCADE_FIELDS,
    FREE_TEXT_FIELDS,
)
from services.address_cascade import (
    apply_address_change,
    diff_selection,
    options_for,
    reconcile_selection,
)
from services.address_lookup_service import get_address_lookup
from services.address_translation import option_label
from utils.exceptions import InvalidSelectionError, LookupLoadFailure, ValidationError

logger = logging.getLogger(__name__)

LookupLoader = Callable[[], Awaitable[GeographicLookup]]
ChangeCallback = Callable[[Dict[str, str]], None]


async def _shared_lookup() -> GeographicLookup:
    return await get_address_lookup(raise_on_failure=True)


class HierarchicalAddressSelector:
    """Cascading province → district → municipality → ward selector."""

    def __init__(
        self,
        selection: Optional[AddressSelection] = None,
        on_change: Optional[ChangeCallback] = None,
        loader: Optional[LookupLoader] = None
    ):
        self.selection = selection or AddressSelection()
        self.on_change = on_change
        self.loader = loader or _shared_lookup
        self.lookup = GeographicLookup.empty()
        self.is_loading = True
        self.load_failed = False
        self._mounted = False
        self._torn_down = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    async def mount(self) -> None:
        """
        Load the lookup and enable the controls.

        A failed load is logged and leaves every control disabled; it is not
        retried for this mount. A result arriving after ``unmount()`` is
        discarded.
        """
        if self._mounted:
            return
        self._mounted = True

        try:
            lookup = await self.loader()
        except LookupLoadFailure as e:
            if self._torn_down:
                return
            logger.error(f"Address selector disabled: {e.message}", extra={"resource": e.details.get("resource")})
            self.is_loading = False
            self.load_failed = True
            return

        if self._torn_down:
            logger.debug("Selector unmounted before lookup arrived; result discarded")
            return

        self.lookup = lookup
        self.is_loading = False
        if lookup.is_empty:
            self.load_failed = True
            logger.warning("Address lookup is empty; selector disabled")
            return

        self._apply(reconcile_selection(None, self.selection, self.lookup))

    def unmount(self) -> None:
        """Tear down; later updates and lookup results are ignored."""
        self._torn_down = True

    @property
    def is_ready(self) -> bool:
        return not self.is_loading and not self._torn_down and not self.lookup.is_empty

    # ------------------------------------------------------------------
    # Updates
    # ------------------------------------------------------------------
    def select(self, level: str, value: str) -> Dict[str, str]:
        """
        Handle the user choosing ``value`` for ``level``.

        Returns the partial update that was emitted ({} when ignored).
        Selections on a disabled control are ignored; a value that is not
        among the control's options raises InvalidSelectionError and leaves
        the selection untouched.
        """
        if self._torn_down:
            return {}
        if isinstance(level, AddressLevel):
            level = level.value
        if level not in FREE_TEXT_FIELDS:
            if level not in CASCADE_FIELDS:
                raise ValidationError(f"Unknown address field: '{level}'", field=level)
            options = options_for(level, self.selection, self.lookup) if self.is_ready else []
            if not options:
                logger.warning(f"Ignored selection on disabled {level} control", extra={"level_name": level})
                return {}
            if value and value not in options:
                raise InvalidSelectionError(level, value)

        updated = apply_address_change(self.selection, self.lookup, level, value)
        changes = diff_selection(self.selection, updated)
        # The chosen field is always reported, even when unchanged
        changes = {level: getattr(updated, level), **changes}
        self._commit(updated, changes)
        return changes

    def sync(self, selection: AddressSelection) -> Dict[str, str]:
        """
        Accept a selection merged by the host (controlled input).

        If a parent value changed and made a child invalid, one consolidated
        clear is emitted. Returns that partial ({} when nothing was cleared).
        """
        if self._torn_down:
            return {}
        previous = self.selection
        self.selection = selection
        if not self.is_ready:
            return {}
        return self._apply(reconcile_selection(previous, selection, self.lookup))

    def _apply(self, updated: AddressSelection) -> Dict[str, str]:
        changes = diff_selection(self.selection, updated)
        if changes:
            self._commit(updated, changes)
        return changes

    def _commit(self, updated: AddressSelection, changes: Dict[str, str]) -> None:
        self.selection = updated
        logger.debug("Address change", extra={"changes": changes})
        if self.on_change is not None:
            self.on_change(changes)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------
    def controls(self) -> List[LevelControl]:
        """The four controls in fixed order with their current option sets."""
        return [self.control(level) for level in AddressLevel.ordered()]

    def control(self, level: AddressLevel) -> LevelControl:
        level = AddressLevel(level)
        return build_level_control(level, self.selection, self.lookup, loading=not self.is_ready)


def build_level_control(
    level: AddressLevel,
    selection: AddressSelection,
    lookup: GeographicLookup,
    loading: bool = False
) -> LevelControl:
    """
    Render state of one control.

    Disabled, with no options, while the lookup is not loaded or the parent
    level is empty.
    """
    level = AddressLevel(level)
    options = [] if loading else options_for(level, selection, lookup)
    return LevelControl(
        level=level,
        value=selection.value_of(level),
        options=[AddressOption(value=v, label=option_label(level, v, lookup)) for v in options],
        disabled=not options,
    )

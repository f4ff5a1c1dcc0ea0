"""Placement of period instances into the three slot boards."""

import logging

from ..constants import PERIODS
from ..models import ClassCatalog, ClassCatalogEntry
from .constants import CONSECUTIVE_PAIRS
from .context import TrialContext
from .models import SlotBoard

logger = logging.getLogger(__name__)


def conflicts_with(board: SlotBoard, entry: ClassCatalogEntry) -> bool:
    """Check whether a board already runs a class that may not share a period."""
    for instance in board.instances:
        if instance.title in entry.restricted_concurrent:
            return True
        if entry.title in instance.entry.restricted_concurrent:
            return True
    return False


class SlotPacker:
    """Places each surviving class's period instances on the slot boards.

    Classes are placed required first, then by ascending period count, with
    catalog order breaking ties. A board at its budget refuses further
    instances.
    """

    def __init__(self, catalog: ClassCatalog):
        self.catalog = catalog

    def pack(self, context: TrialContext) -> None:
        """Create the boards, place every class and reconcile period counts."""
        context.init_boards()
        budgets = {p: b.budget for p, b in context.boards.items()}
        logger.debug(f"Board budgets: {budgets}")

        for entry in self.placement_order(context):
            self.place_class(context, entry)

        self.reconcile(context)

    def placement_order(self, context: TrialContext) -> list[ClassCatalogEntry]:
        entries = [
            e
            for e in self.catalog
            if e.title not in context.eliminated and context.period_counts.get(e.title, 0) > 0
        ]
        # sorted() is stable, so ties keep catalog order
        return sorted(
            entries,
            key=lambda e: (not e.is_required, context.period_counts[e.title]),
        )

    def permissible_periods(
        self, context: TrialContext, entry: ClassCatalogEntry
    ) -> list[int]:
        """Periods not masked by allowed periods or concurrent restrictions."""
        return [
            p
            for p in PERIODS
            if entry.can_occur_during(p) and not conflicts_with(context.boards[p], entry)
        ]

    def place_class(self, context: TrialContext, entry: ClassCatalogEntry) -> None:
        needed = context.period_counts[entry.title]
        permissible = self.permissible_periods(context, entry)
        restricted = len(permissible) < len(PERIODS)

        if entry.is_double_period:
            self._place_double(context, entry, permissible, restricted)
        elif needed >= len(PERIODS):
            for period in permissible:
                context.place(entry, period)
        elif needed == 2:
            self._place_two(context, entry, permissible)
        else:
            self._place_one(context, entry, permissible)

    def _preferred_pairs(
        self, context: TrialContext, permissible: list[int]
    ) -> list[tuple[int, int]]:
        """Consecutive pairs within the permissible periods, least filled first."""
        first, last = PERIODS[0], PERIODS[-1]
        pairs = list(CONSECUTIVE_PAIRS)
        if context.boards[first].count >= context.boards[last].count:
            pairs.reverse()
        return [pair for pair in pairs if all(p in permissible for p in pair)]

    def _place_pair(
        self, context: TrialContext, entry: ClassCatalogEntry, pair: tuple[int, ...]
    ) -> bool:
        if any(context.boards[p].is_full for p in pair):
            return False
        for period in pair:
            context.place(entry, period)
        return True

    def _place_double(
        self,
        context: TrialContext,
        entry: ClassCatalogEntry,
        permissible: list[int],
        restricted: bool,
    ) -> None:
        if restricted:
            if len(permissible) < 2:
                logger.debug(
                    f"'{entry.title}' needs two periods but only {permissible} are open"
                )
                return
            pairs: list[tuple[int, ...]] = [tuple(permissible)]
        else:
            pairs = list(self._preferred_pairs(context, permissible))

        for pair in pairs:
            if self._place_pair(context, entry, pair):
                return
        logger.debug(f"No room on the boards for double-period class '{entry.title}'")

    def _place_two(
        self, context: TrialContext, entry: ClassCatalogEntry, permissible: list[int]
    ) -> None:
        if entry.must_be_consecutive:
            for pair in self._preferred_pairs(context, permissible):
                if self._place_pair(context, entry, pair):
                    return
            # No consecutive pair fits; offer a single instance instead
            self._place_one(context, entry, permissible)
            return

        by_fill = sorted(permissible, key=lambda p: (context.boards[p].count, p))
        placed = sum(1 for p in by_fill[:2] if context.place(entry, p))
        for period in by_fill:
            if placed >= 2:
                break
            if context.place(entry, period):
                placed += 1

    def _place_one(
        self, context: TrialContext, entry: ClassCatalogEntry, permissible: list[int]
    ) -> None:
        if not permissible:
            return
        candidates = [
            min(permissible, key=lambda p: (context.single_period_count(p), p)),
            min(permissible, key=lambda p: (context.boards[p].count, p)),
            *permissible,
        ]
        for period in candidates:
            if context.place(entry, period):
                return

    def reconcile(self, context: TrialContext) -> None:
        """Eliminate unplaced classes and recount periods from the boards."""
        for entry in self.catalog:
            placed = len(context.instances.get(entry.title, []))
            if placed == 0 and entry.title not in context.eliminated:
                logger.debug(f"'{entry.title}' could not be placed; eliminated")
                context.eliminated.add(entry.title)
            context.period_counts[entry.title] = placed

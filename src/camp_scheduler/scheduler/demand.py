"""Demand tally, class elimination and period counts."""

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Any

from ..models import ClassCatalog, ClassCatalogEntry
from .constants import (
    DOUBLE_PERIOD_COUNT,
    MIN_SUPPORTERS,
    THREE_PERIOD_FACTOR,
    TWO_PERIOD_FACTOR,
)
from .context import TrialContext

logger = logging.getLogger(__name__)


@dataclass
class DemandReport:
    """Outcome of demand planning for one trial."""

    counts: dict[str, int] = field(default_factory=dict)
    period_counts: dict[str, int] = field(default_factory=dict)
    eliminated: set[str] = field(default_factory=set)

    @property
    def total_periods(self) -> int:
        return sum(self.period_counts.values())

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "counts": self.counts,
            "period_counts": self.period_counts,
            "eliminated": sorted(self.eliminated),
            "total_periods": self.total_periods,
        }


def periods_for_demand(entry: ClassCatalogEntry, count: int) -> int:
    """Number of period instances a class needs for its demand."""
    if entry.is_double_period:
        return DOUBLE_PERIOD_COUNT
    if count > THREE_PERIOD_FACTOR * entry.single_period_cutoff:
        return 3
    if count > TWO_PERIOD_FACTOR * entry.single_period_cutoff:
        return 2
    return 1


class DemandPlanner:
    """Turns aggregate final choices into eliminations and period counts."""

    def __init__(self, catalog: ClassCatalog, elimination_threshold: int = MIN_SUPPORTERS):
        self.catalog = catalog
        self.elimination_threshold = elimination_threshold

    def tally(self, context: TrialContext) -> dict[str, int]:
        """Count the campers holding each class among their final choices."""
        counter: Counter[str] = Counter()
        for state in context.campers:
            for choice in state.final_choices:
                if choice is not None:
                    counter[choice.title] += 1
        return {title: counter.get(title, 0) for title in self.catalog.titles}

    def plan(self, context: TrialContext) -> DemandReport:
        """Eliminate low-demand classes and assign period counts.

        Updates the context's demand, eliminated set and period counts.
        """
        counts = self.tally(context)
        report = DemandReport(counts=counts)

        for entry in self.catalog:
            count = counts[entry.title]
            if not entry.is_required and count < self.elimination_threshold:
                report.eliminated.add(entry.title)
                report.period_counts[entry.title] = 0
                logger.debug(
                    f"Eliminated '{entry.title}' ({count} supporters, "
                    f"need {self.elimination_threshold})"
                )
                continue
            report.period_counts[entry.title] = periods_for_demand(entry, count)

        context.demand = dict(counts)
        context.eliminated = set(report.eliminated)
        context.period_counts = dict(report.period_counts)
        return report

"""Two-pass enrollment of campers into the packed period instances."""

import logging
from collections.abc import Callable

from ..constants import NUMBER_PERIODS
from ..exceptions import ChoiceExhaustedError, MissingInstanceError
from ..models import ClassCatalog, ClassCatalogEntry
from .constants import STAGE_GENERAL
from .context import CamperState, TrialContext
from .models import PeriodInstance

logger = logging.getLogger(__name__)


def by_fill(instances: list[PeriodInstance]) -> list[PeriodInstance]:
    """Instances ordered least full first, earlier period on ties."""
    return sorted(instances, key=lambda i: (i.enrollment, i.period))


class EnrollmentEngine:
    """Fills the packed boards with campers.

    The essential pass places required and double-period final choices.
    The general pass then runs one round per period over every camper,
    bringing campers with fewer than two classes up by best fit and
    filling the single missing period of campers with two.
    """

    def __init__(self, catalog: ClassCatalog):
        self.catalog = catalog

    def enroll(self, context: TrialContext) -> None:
        """Run both passes.

        Raises:
            ChoiceExhaustedError: If a camper runs out of classes to try
            MissingInstanceError: If a class has no usable instance
        """
        self.essential_pass(context)
        self.general_pass(context)

    # Essential pass

    def essential_pass(self, context: TrialContext) -> None:
        for state in context.campers:
            for choice in state.final_choices:
                if choice is None:
                    continue
                if choice.is_required:
                    self._enroll_required(context, state, choice)
                elif choice.is_double_period and not context.is_eliminated(choice):
                    self._enroll_double(context, state, choice)

    def _enroll_required(
        self, context: TrialContext, state: CamperState, entry: ClassCatalogEntry
    ) -> None:
        instances = context.instances_of(entry)
        if not instances:
            raise MissingInstanceError(entry.title, camper_name=state.name)
        for instance in by_fill(instances):
            if instance.add_camper(state, override=True):
                return
        raise MissingInstanceError(
            entry.title,
            camper_name=state.name,
            details="camper has no free period where it runs",
        )

    def _enroll_double(
        self, context: TrialContext, state: CamperState, entry: ClassCatalogEntry
    ) -> bool:
        """Enroll in both halves of a double-period class, or in neither."""
        instances = context.instances_of(entry)
        if len(instances) != 2:
            return False
        if not all(state.can_enroll(i) and i.has_room for i in instances):
            return False
        for instance in instances:
            instance.add_camper(state)
        return True

    # General pass

    def general_pass(self, context: TrialContext) -> None:
        for round_number in range(1, NUMBER_PERIODS + 1):
            for state in context.campers:
                if state.num_enrolled < 2:
                    self._enroll_best_fit(context, state)
                elif state.num_enrolled == 2:
                    self._fill_missing_period(context, state)
            logger.debug(
                f"Trial {context.trial_index}: enrollment round {round_number} done"
            )

    def _unusable(
        self, context: TrialContext, state: CamperState
    ) -> Callable[[ClassCatalogEntry], bool]:
        def check(entry: ClassCatalogEntry) -> bool:
            return (
                entry.is_required
                or context.is_eliminated(entry)
                or state.is_enrolled_in(entry)
            )

        return check

    def _best_final_choice(
        self, context: TrialContext, state: CamperState
    ) -> ClassCatalogEntry | None:
        """Usable final choice with the fewest periods, first in choice order on ties."""
        unusable = self._unusable(context, state)
        candidates = [
            c
            for c in state.final_choices
            if c is not None and state.camper.can_take(c) and not unusable(c)
        ]
        if not candidates:
            return None
        return min(candidates, key=lambda c: context.period_counts.get(c.title, 0))

    def _enroll_best_fit(self, context: TrialContext, state: CamperState) -> None:
        camper = state.camper
        unusable = self._unusable(context, state)

        entry = self._best_final_choice(context, state)
        if entry is None:
            entry = camper.next_eligible_after(None, skip=unusable)
            if entry is None:
                raise ChoiceExhaustedError(camper.name, STAGE_GENERAL)

        while True:
            if self._try_enroll(context, state, entry):
                return
            tried = entry
            entry = camper.next_eligible_after(tried, skip=unusable)
            if entry is None:
                raise ChoiceExhaustedError(camper.name, STAGE_GENERAL, after=tried.title)
            logger.debug(f"{camper.name}: '{tried.title}' is full, trying '{entry.title}'")

    def _try_enroll(
        self, context: TrialContext, state: CamperState, entry: ClassCatalogEntry
    ) -> bool:
        if entry.is_double_period:
            return self._enroll_double(context, state, entry)
        # Least full, then second least, then (3-period classes only) most full
        for instance in by_fill(context.instances_of(entry)):
            if instance.add_camper(state):
                return True
        return False

    def _fill_missing_period(self, context: TrialContext, state: CamperState) -> None:
        period = state.missing_period()
        if period is None:
            return
        camper = state.camper
        # Halves of double-period classes are never offered on their own
        options = [
            instance
            for instance in context.boards[period].instances
            if not instance.entry.is_required
            and not instance.entry.is_double_period
            and not state.is_enrolled_in(instance.entry)
            and camper.can_take(instance.entry)
            and state.can_enroll(instance)
        ]
        if not options:
            raise MissingInstanceError(
                None,
                period=period,
                camper_name=camper.name,
                details="no class the camper can take runs in this period",
            )

        options.sort(key=lambda i: camper.rank_of(i.entry))
        for instance in options:
            if instance.add_camper(state):
                return

        instance = options[0]
        instance.add_camper(state, override=True)
        logger.debug(
            f"{camper.name}: override into '{instance.title}' period {period} "
            f"({instance.enrollment}/{instance.max_capacity})"
        )

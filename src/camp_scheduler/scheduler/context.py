"""Per-trial working state.

A fresh TrialContext is built for every trial, so trials never share mutable
state and can run on separate threads.
"""

import random
from dataclasses import dataclass, field

from ..constants import NUMBER_FINAL_CHOICES, PERIODS
from ..exceptions import TrialError
from ..models import Camper, ClassCatalog, ClassCatalogEntry
from .models import PeriodInstance, SlotBoard, split_budget


@dataclass
class CamperState:
    """A camper's choices and enrollments within one trial.

    Attributes:
        camper: The immutable camper record
        buffer: Buffered choices (title -> original rank) while resolving
        final_choices: Operative choices; slot 2 may be None
        enrollments: Period -> instance the camper is enrolled in
        override_periods: Periods enrolled past capacity
    """

    camper: Camper
    buffer: dict[str, int] = field(default_factory=dict)
    final_choices: list[ClassCatalogEntry | None] = field(
        default_factory=lambda: [None] * NUMBER_FINAL_CHOICES
    )
    enrollments: dict[int, PeriodInstance] = field(default_factory=dict)
    override_periods: set[int] = field(default_factory=set)

    @property
    def name(self) -> str:
        return self.camper.name

    @property
    def num_enrolled(self) -> int:
        """Number of periods the camper is enrolled in."""
        return len(self.enrollments)

    @property
    def enrolled_titles(self) -> set[str]:
        return {i.title for i in self.enrollments.values()}

    @property
    def free_periods(self) -> list[int]:
        return [p for p in PERIODS if p not in self.enrollments]

    def reset_choices(self) -> None:
        """Clear the buffer and final choices before a resolver pass."""
        self.buffer.clear()
        self.final_choices = [None] * NUMBER_FINAL_CHOICES

    def is_free(self, period: int) -> bool:
        return period not in self.enrollments

    def periods_of(self, title: str) -> list[int]:
        return [p for p, i in self.enrollments.items() if i.title == title]

    def is_enrolled_in(self, entry: ClassCatalogEntry) -> bool:
        return bool(self.periods_of(entry.title))

    def can_enroll(self, instance: PeriodInstance) -> bool:
        """Check the period is free and the class is not already held.

        A double-period class may be held for exactly two periods.
        """
        if not self.is_free(instance.period):
            return False
        held = len(self.periods_of(instance.title))
        if held == 0:
            return True
        return instance.entry.is_double_period and held < 2

    def record_enrollment(self, instance: PeriodInstance, override: bool) -> None:
        """Record an enrollment made by PeriodInstance.add_camper."""
        if not self.can_enroll(instance):
            raise TrialError(
                f"Camper '{self.name}' cannot hold '{instance.title}' "
                f"in period {instance.period}"
            )
        self.enrollments[instance.period] = instance
        if override:
            self.override_periods.add(instance.period)

    def missing_period(self) -> int | None:
        """The first period without a class, or None if the day is full."""
        free = self.free_periods
        return free[0] if free else None


class TrialContext:
    """Everything one trial mutates.

    Attributes:
        catalog: Shared read-only catalog
        campers: Camper states in this trial's processing order
        rng: Random source for this trial
        trial_index: Position of the trial in the search
        seed: Seed the random source was created with
        eliminated: Titles removed from consideration
        demand: Title -> number of campers choosing it (first resolver pass)
        period_counts: Title -> number of period instances
        boards: Period -> slot board (after packing)
        instances: Title -> placed instances in placement order
    """

    def __init__(
        self,
        catalog: ClassCatalog,
        campers: list[Camper],
        rng: random.Random | None = None,
        trial_index: int = 0,
        seed: int | None = None,
        shuffle: bool = True,
    ):
        self.catalog = catalog
        self.rng = rng or random.Random(seed)
        self.trial_index = trial_index
        self.seed = seed

        order = list(campers)
        if shuffle:
            self.rng.shuffle(order)
        self.campers = [CamperState(camper=c) for c in order]

        self.eliminated: set[str] = set()
        self.demand: dict[str, int] = {}
        self.period_counts: dict[str, int] = {}
        self.boards: dict[int, SlotBoard] = {}
        self.instances: dict[str, list[PeriodInstance]] = {}

    def state_of(self, name: str) -> CamperState:
        for state in self.campers:
            if state.name == name:
                return state
        raise KeyError(name)

    def is_eliminated(self, entry: ClassCatalogEntry) -> bool:
        return entry.title in self.eliminated

    @property
    def total_periods_needed(self) -> int:
        return sum(
            count
            for title, count in self.period_counts.items()
            if title not in self.eliminated
        )

    def init_boards(self) -> dict[int, SlotBoard]:
        """Create empty boards with budgets from the current period counts."""
        budgets = split_budget(self.total_periods_needed)
        self.boards = {p: SlotBoard(period=p, budget=budgets[p]) for p in PERIODS}
        self.instances = {}
        return self.boards

    def place(self, entry: ClassCatalogEntry, period: int) -> bool:
        """Place an instance of a class in a period, if the board accepts it."""
        board = self.boards[period]
        if board.has_class(entry.title):
            return False
        instance = PeriodInstance(entry=entry, period=period)
        if not board.add(instance):
            return False
        self.instances.setdefault(entry.title, []).append(instance)
        return True

    def single_period_count(self, period: int) -> int:
        """Number of classes on a board that run for one period in this trial."""
        return sum(
            1
            for instance in self.boards[period].instances
            if self.period_counts.get(instance.title) == 1
        )

    def instances_of(self, entry: ClassCatalogEntry) -> list[PeriodInstance]:
        return list(self.instances.get(entry.title, []))

    def instance_in(self, entry: ClassCatalogEntry, period: int) -> PeriodInstance | None:
        for instance in self.instances.get(entry.title, []):
            if instance.period == period:
                return instance
        return None

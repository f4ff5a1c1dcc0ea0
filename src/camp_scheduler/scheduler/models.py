"""Data models for period instances, slot boards and frozen schedules."""

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

from ..constants import PERIODS
from ..models import Camper, ClassCatalogEntry

if TYPE_CHECKING:
    from .context import CamperState, TrialContext


@dataclass(eq=False)
class PeriodInstance:
    """One concrete (class, period) offering with its own roster."""

    entry: ClassCatalogEntry
    period: int
    roster: list[Camper] = field(default_factory=list)
    override_campers: set[str] = field(default_factory=set)

    def __repr__(self) -> str:
        return (
            f"PeriodInstance({self.entry.title!r}, period={self.period}, "
            f"enrollment={self.enrollment}/{self.max_capacity})"
        )

    @property
    def title(self) -> str:
        return self.entry.title

    @property
    def max_capacity(self) -> int:
        return self.entry.single_period_cutoff

    @property
    def enrollment(self) -> int:
        return len(self.roster)

    @property
    def has_room(self) -> bool:
        return self.enrollment < self.max_capacity

    @property
    def is_overridden(self) -> bool:
        return bool(self.override_campers)

    def add_camper(self, state: "CamperState", override: bool = False) -> bool:
        """Enroll a camper, updating the roster and the camper's state together.

        Args:
            state: Per-trial state of the camper
            override: Ignore capacity; the camper is flagged only if the
                instance actually goes past capacity

        Returns:
            True if the camper was enrolled, False if the instance is full
            or the camper cannot hold this period
        """
        if not state.can_enroll(self):
            return False
        if not override and not self.has_room:
            return False

        self.roster.append(state.camper)
        overflowed = self.enrollment > self.max_capacity
        if overflowed:
            self.override_campers.add(state.camper.name)
        state.record_enrollment(self, overflowed)
        return True


@dataclass
class SlotBoard:
    """The period instances running in one period, limited by a budget."""

    period: int
    budget: int
    instances: list[PeriodInstance] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.instances)

    @property
    def is_full(self) -> bool:
        return self.count >= self.budget

    @property
    def titles(self) -> set[str]:
        return {i.title for i in self.instances}

    def has_class(self, title: str) -> bool:
        return any(i.title == title for i in self.instances)

    def add(self, instance: PeriodInstance) -> bool:
        """Add an instance; refused when the board is at its budget."""
        if self.is_full or instance.period != self.period:
            return False
        self.instances.append(instance)
        return True


def split_budget(total_periods: int) -> dict[int, int]:
    """Spread the periods needed over the day, remainder to earlier periods."""
    q, r = divmod(total_periods, len(PERIODS))
    return {
        period: q + (1 if index < r else 0)
        for index, period in enumerate(PERIODS)
    }


# Frozen snapshots


@dataclass(frozen=True)
class EnrollmentRecord:
    """One period of a camper's schedule."""

    period: int
    title: str
    rank: int
    is_required: bool
    is_override: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "period": self.period,
            "title": self.title,
            "rank": self.rank,
            "is_required": self.is_required,
            "is_override": self.is_override,
        }


@dataclass(frozen=True)
class CamperSchedule:
    """A camper's resolved choices and enrollments at the end of a trial."""

    name: str
    age: int
    swim_level: int
    final_choices: tuple[str | None, ...]
    enrollments: tuple[EnrollmentRecord, ...]

    @property
    def num_enrolled(self) -> int:
        return len(self.enrollments)

    def class_in(self, period: int) -> str | None:
        """Title of the class taken in a period, or None."""
        for record in self.enrollments:
            if record.period == period:
                return record.title
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "age": self.age,
            "swim_level": self.swim_level,
            "final_choices": list(self.final_choices),
            "enrollments": [e.to_dict() for e in self.enrollments],
        }


@dataclass(frozen=True)
class InstanceSnapshot:
    """Frozen copy of a period instance."""

    title: str
    period: int
    max_capacity: int
    roster: tuple[str, ...]
    override_campers: frozenset[str]
    is_required: bool
    is_double_period: bool

    @property
    def enrollment(self) -> int:
        return len(self.roster)

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "period": self.period,
            "max_capacity": self.max_capacity,
            "enrollment": self.enrollment,
            "roster": list(self.roster),
            "override_campers": sorted(self.override_campers),
            "is_required": self.is_required,
            "is_double_period": self.is_double_period,
        }


@dataclass(frozen=True)
class BoardSnapshot:
    """Frozen copy of a slot board."""

    period: int
    budget: int
    instances: tuple[InstanceSnapshot, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "period": self.period,
            "budget": self.budget,
            "instances": [i.to_dict() for i in self.instances],
        }


@dataclass(frozen=True)
class Schedule:
    """Frozen result of one trial.

    Holds copies of everything a presentation layer needs, so it stays valid
    after the trial's working state is discarded.
    """

    campers: tuple[CamperSchedule, ...]
    boards: tuple[BoardSnapshot, ...]
    eliminated: frozenset[str]
    period_counts: tuple[tuple[str, int], ...] = ()
    trial_index: int = 0
    seed: int | None = None
    score: int | None = None

    @classmethod
    def capture(cls, context: "TrialContext") -> "Schedule":
        """Snapshot the working state of a finished trial."""
        campers = []
        for state in context.campers:
            records = []
            for period in sorted(state.enrollments):
                instance = state.enrollments[period]
                records.append(
                    EnrollmentRecord(
                        period=period,
                        title=instance.title,
                        rank=state.camper.rank_of(instance.entry),
                        is_required=instance.entry.is_required,
                        is_override=period in state.override_periods,
                    )
                )
            campers.append(
                CamperSchedule(
                    name=state.camper.name,
                    age=state.camper.age,
                    swim_level=state.camper.swim_level,
                    final_choices=tuple(
                        c.title if c is not None else None for c in state.final_choices
                    ),
                    enrollments=tuple(records),
                )
            )

        boards = []
        for period in PERIODS:
            board = context.boards.get(period)
            if board is None:
                boards.append(BoardSnapshot(period=period, budget=0, instances=()))
                continue
            boards.append(
                BoardSnapshot(
                    period=period,
                    budget=board.budget,
                    instances=tuple(
                        InstanceSnapshot(
                            title=i.title,
                            period=i.period,
                            max_capacity=i.max_capacity,
                            roster=tuple(c.name for c in i.roster),
                            override_campers=frozenset(i.override_campers),
                            is_required=i.entry.is_required,
                            is_double_period=i.entry.is_double_period,
                        )
                        for i in board.instances
                    ),
                )
            )

        return cls(
            campers=tuple(campers),
            boards=tuple(boards),
            eliminated=frozenset(context.eliminated),
            period_counts=tuple(
                (title, context.period_counts.get(title, 0))
                for title in context.catalog.titles
            ),
            trial_index=context.trial_index,
            seed=context.seed,
        )

    def with_score(self, score: int) -> "Schedule":
        """Return a copy carrying its evaluated score."""
        return replace(self, score=score)

    def camper(self, name: str) -> CamperSchedule | None:
        for camper in self.campers:
            if camper.name == name:
                return camper
        return None

    def camper_rows(self) -> list[dict[str, Any]]:
        """One row per camper (age, then name) with the class taken each period."""
        rows = []
        for camper in sorted(self.campers, key=lambda c: (c.age, c.name)):
            row: dict[str, Any] = {
                "name": camper.name,
                "age": camper.age,
                "swim_level": camper.swim_level,
            }
            for period in PERIODS:
                row[f"period_{period}"] = camper.class_in(period)
            rows.append(row)
        return rows

    def period_view(self, period: int) -> BoardSnapshot:
        """The instances and rosters of one period."""
        for board in self.boards:
            if board.period == period:
                return board
        raise KeyError(f"No board for period {period}")

    def instances_of(self, title: str) -> list[InstanceSnapshot]:
        """Every placed instance of a class, in period order."""
        return [
            instance
            for board in self.boards
            for instance in board.instances
            if instance.title == title
        ]

    @property
    def placed_titles(self) -> list[str]:
        """Titles with at least one placed instance, in first-placed order."""
        seen: dict[str, None] = {}
        for board in self.boards:
            for instance in board.instances:
                seen.setdefault(instance.title, None)
        return list(seen)

    def worst_choice(self) -> tuple[str, str, int] | None:
        """Camper with the worst-ranked non-required enrollment.

        Returns:
            (camper name, class title, rank), or None if nobody holds a
            non-required class
        """
        worst: tuple[str, str, int] | None = None
        for camper in self.campers:
            for record in camper.enrollments:
                if record.is_required:
                    continue
                if worst is None or record.rank > worst[2]:
                    worst = (camper.name, record.title, record.rank)
        return worst

    def override_enrollments(self) -> list[tuple[str, str, int]]:
        """(camper name, class title, period) for every override placement."""
        return [
            (camper.name, record.title, record.period)
            for camper in self.campers
            for record in camper.enrollments
            if record.is_override
        ]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        worst = self.worst_choice()
        return {
            "score": self.score,
            "trial_index": self.trial_index,
            "seed": self.seed,
            "eliminated_classes": sorted(self.eliminated),
            "period_counts": dict(self.period_counts),
            "campers": [c.to_dict() for c in self.campers],
            "periods": [b.to_dict() for b in self.boards],
            "worst_choice": (
                {"camper": worst[0], "class": worst[1], "rank": worst[2]}
                if worst
                else None
            ),
            "override_enrollments": [
                {"camper": name, "class": title, "period": period}
                for name, title, period in self.override_enrollments()
            ],
        }

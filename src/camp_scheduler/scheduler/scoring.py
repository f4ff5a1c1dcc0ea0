"""Schedule scoring."""

from dataclasses import dataclass
from typing import Any

from .config import SearchConfig
from .models import Schedule


@dataclass(frozen=True)
class ScoreBreakdown:
    """Parts of a schedule score. Lower is better."""

    preference: int
    imbalance: int
    imbalance_weight: int

    @property
    def total(self) -> int:
        return self.preference + self.imbalance_weight * self.imbalance

    def to_dict(self) -> dict[str, Any]:
        return {
            "preference": self.preference,
            "imbalance": self.imbalance,
            "imbalance_weight": self.imbalance_weight,
            "total": self.total,
        }


class ScheduleEvaluator:
    """Scores frozen schedules.

    Each enrolled period costs the camper's rank for the class (a fixed
    amount for required classes), and every surviving class costs the spread
    between its fullest and emptiest instance, weighted.
    """

    def __init__(self, config: SearchConfig | None = None):
        self.config = config or SearchConfig()

    def preference_cost(self, schedule: Schedule) -> int:
        total = 0
        for camper in schedule.campers:
            for record in camper.enrollments:
                if record.is_required:
                    total += self.config.required_class_score
                else:
                    total += record.rank
        return total

    def imbalance(self, schedule: Schedule) -> int:
        """Sum over surviving classes of max minus min instance enrollment."""
        enrollments: dict[str, list[int]] = {}
        for board in schedule.boards:
            for instance in board.instances:
                if instance.title in schedule.eliminated:
                    continue
                if instance.is_required and not self.config.balance_required_classes:
                    continue
                enrollments.setdefault(instance.title, []).append(instance.enrollment)
        return sum(max(counts) - min(counts) for counts in enrollments.values())

    def breakdown(self, schedule: Schedule) -> ScoreBreakdown:
        return ScoreBreakdown(
            preference=self.preference_cost(schedule),
            imbalance=self.imbalance(schedule),
            imbalance_weight=self.config.imbalance_weight,
        )

    def score(self, schedule: Schedule) -> int:
        """Score a schedule; the result depends only on the schedule's contents."""
        return self.breakdown(schedule).total

"""Repeated-trial search for the best-scoring schedule."""

import logging
import random
import threading
import time
from collections import Counter
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any

from ..exceptions import SchedulerError, SearchFailedError, TrialError
from ..models import Camper, ClassCatalog
from ..validators import validate_inputs
from .choices import ChoiceResolver
from .config import SearchConfig
from .constants import DriverState
from .context import TrialContext
from .demand import DemandPlanner, DemandReport
from .enrollment import EnrollmentEngine
from .models import Schedule
from .packing import SlotPacker
from .scoring import ScheduleEvaluator

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]


def trial_seed(base_seed: int, trial_index: int) -> int:
    """Seed for one trial, independent of which worker runs it."""
    return (base_seed << 32) + trial_index


@dataclass
class SearchStatistics:
    """Statistics about a finished search."""

    attempted: int = 0
    completed: int = 0
    failed: int = 0
    distinct_scores: int = 0
    elapsed_seconds: float = 0.0
    cancelled: bool = False
    timed_out: bool = False
    base_seed: int | None = None
    failures_by_type: dict[str, int] = field(default_factory=dict)

    @property
    def failure_ratio(self) -> float:
        return self.failed / self.attempted if self.attempted > 0 else 0.0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "attempted": self.attempted,
            "completed": self.completed,
            "failed": self.failed,
            "failure_ratio": self.failure_ratio,
            "distinct_scores": self.distinct_scores,
            "elapsed_seconds": self.elapsed_seconds,
            "cancelled": self.cancelled,
            "timed_out": self.timed_out,
            "base_seed": self.base_seed,
            "failures_by_type": self.failures_by_type,
        }


@dataclass
class SearchResult:
    """Best schedule found and how the search went."""

    best: Schedule
    statistics: SearchStatistics

    @property
    def score(self) -> int:
        return self.best.score if self.best.score is not None else 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "schedule": self.best.to_dict(),
            "statistics": self.statistics.to_dict(),
        }


class TrialDriver:
    """Runs independent trials and keeps the lowest-scoring schedule.

    Each trial shuffles the camper order with its own seeded random source,
    then resolves choices, plans demand, resolves again against the
    eliminated classes, packs the boards, enrolls campers and scores the
    frozen result. Failed trials are discarded. Ties on score go to the
    earliest trial, so results do not depend on the number of workers.
    """

    def __init__(
        self,
        catalog: ClassCatalog,
        campers: list[Camper],
        config: SearchConfig | None = None,
        progress: ProgressCallback | None = None,
    ):
        self.catalog = catalog
        self.campers = list(campers)
        self.config = config or SearchConfig()
        self.progress = progress

        self.resolver = ChoiceResolver(catalog)
        self.planner = DemandPlanner(catalog, self.config.elimination_threshold)
        self.packer = SlotPacker(catalog)
        self.engine = EnrollmentEngine(catalog)
        self.evaluator = ScheduleEvaluator(self.config)

        self._lock = threading.RLock()
        self._cancel_event = threading.Event()
        self._state = DriverState.IDLE
        self._reset()

    def _reset(self) -> None:
        self._next_index = 0
        self._start = 0.0
        self._best: Schedule | None = None
        self._seen_scores: set[int] = set()
        self._failures: Counter[str] = Counter()
        self._stats = SearchStatistics()

    @property
    def state(self) -> DriverState:
        return self._state

    def cancel(self) -> None:
        """Ask the search to stop; honoured between trials."""
        self._cancel_event.set()

    def run_trial(self, trial_index: int, base_seed: int) -> Schedule:
        """Run one complete trial.

        Raises:
            TrialError: If the trial hits an invariant violation
        """
        seed = trial_seed(base_seed, trial_index)
        context = TrialContext(
            self.catalog,
            self.campers,
            rng=random.Random(seed),
            trial_index=trial_index,
            seed=seed,
        )
        self.resolver.resolve(context)
        self.planner.plan(context)
        self.resolver.resolve(context)
        self.packer.pack(context)
        self.engine.enroll(context)

        schedule = Schedule.capture(context)
        return schedule.with_score(self.evaluator.score(schedule))

    def preview_demand(self) -> DemandReport:
        """Resolve choices once and report demand, without packing or enrolling."""
        validate_inputs(self.catalog, self.campers)
        context = TrialContext(self.catalog, self.campers, shuffle=False)
        self.resolver.resolve(context)
        return self.planner.plan(context)

    def run(self) -> SearchResult:
        """Run the search.

        Raises:
            InputValidationError: If the catalog or roster is invalid
            SearchFailedError: If no trial completed or too many failed
        """
        if self._state == DriverState.RUNNING:
            raise SchedulerError("Search is already running")

        validate_inputs(self.catalog, self.campers)

        base_seed = self.config.seed
        if base_seed is None:
            base_seed = random.SystemRandom().randrange(2**32)

        self._reset()
        self._cancel_event.clear()
        self._stats.base_seed = base_seed
        self._state = DriverState.RUNNING
        self._start = time.monotonic()
        logger.info(
            f"Searching {self.config.max_attempts} trials for {len(self.campers)} campers "
            f"and {len(self.catalog)} classes (seed {base_seed}, "
            f"{self.config.workers} worker(s))"
        )

        try:
            if self.config.workers == 1:
                self._work(base_seed)
            else:
                with ThreadPoolExecutor(max_workers=self.config.workers) as pool:
                    futures = [
                        pool.submit(self._work, base_seed)
                        for _ in range(self.config.workers)
                    ]
                    for future in futures:
                        future.result()
        finally:
            self._state = DriverState.DONE
            self._stats.elapsed_seconds = time.monotonic() - self._start

        stats = self._stats
        stats.distinct_scores = len(self._seen_scores)
        stats.failures_by_type = dict(self._failures)
        self._report_progress(100.0)

        logger.info(
            f"Search finished: {stats.completed} completed, {stats.failed} failed, "
            f"{stats.distinct_scores} distinct scores in {stats.elapsed_seconds:.2f}s"
        )

        if self._best is None:
            reason = "search was cancelled" if stats.cancelled else "no trial completed"
            raise SearchFailedError(stats.attempted, stats.failed, reason)

        if stats.failure_ratio > self.config.max_failure_ratio:
            raise SearchFailedError(
                stats.attempted,
                stats.failed,
                f"failure ratio {stats.failure_ratio:.2f} exceeds "
                f"{self.config.max_failure_ratio:.2f}",
            )

        logger.info(
            f"Best score {self._best.score} from trial {self._best.trial_index}"
        )
        return SearchResult(best=self._best, statistics=stats)

    def _claim_trial(self) -> int | None:
        """Claim the next trial index, or None when the search should stop."""
        with self._lock:
            if self._cancel_event.is_set():
                self._stats.cancelled = True
                return None
            time_limit = self.config.time_limit
            if time_limit is not None and time.monotonic() - self._start >= time_limit:
                self._stats.timed_out = True
                return None
            if self._next_index >= self.config.max_attempts:
                return None
            index = self._next_index
            self._next_index += 1
            self._stats.attempted += 1
            return index

    def _work(self, base_seed: int) -> None:
        while True:
            index = self._claim_trial()
            if index is None:
                return
            try:
                schedule = self.run_trial(index, base_seed)
            except TrialError as e:
                self._record_failure(index, e)
            else:
                self._record_success(schedule)

    def _record_success(self, schedule: Schedule) -> None:
        with self._lock:
            self._stats.completed += 1
            score = schedule.score
            if score not in self._seen_scores:
                self._seen_scores.add(score)
                logger.debug(f"Trial {schedule.trial_index}: new score {score}")
            best = self._best
            if best is None or (score, schedule.trial_index) < (best.score, best.trial_index):
                self._best = schedule
            self._report_progress(self._finished_percent())

    def _record_failure(self, index: int, error: TrialError) -> None:
        with self._lock:
            self._stats.failed += 1
            self._failures[type(error).__name__] += 1
            logger.debug(f"Trial {index} discarded: {error}")
            self._report_progress(self._finished_percent())

    def _finished_percent(self) -> float:
        finished = self._stats.completed + self._stats.failed
        return finished / self.config.max_attempts * 100

    def _report_progress(self, percent: float) -> None:
        if self.progress is not None:
            self.progress(min(percent, 100.0))

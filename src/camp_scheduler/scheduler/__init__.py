"""Camp class scheduling by repeated randomized trials.

Each trial resolves every camper's three operative choices, eliminates
classes with too little demand, packs period instances into three slot
boards, enrolls campers in two passes and scores the result. The driver
keeps the lowest-scoring schedule.

Main classes:
- TrialDriver: Runs the search and returns a SearchResult
- SearchConfig: Search knobs (attempts, seed, workers, scoring weights)
- Schedule: Frozen, scored result of one trial

Usage:
    from camp_scheduler.scheduler import SearchConfig, TrialDriver

    driver = TrialDriver(catalog, campers, SearchConfig(max_attempts=1000, seed=7))
    result = driver.run()
    print(result.best.score)
"""

from .choices import ChoiceResolver
from .config import SearchConfig, load_search_config
from .constants import (
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_MAX_FAILURE_RATIO,
    IMBALANCE_WEIGHT,
    MIN_SUPPORTERS,
    REQUIRED_CLASS_SCORE,
    DriverState,
)
from .context import CamperState, TrialContext
from .demand import DemandPlanner, DemandReport, periods_for_demand
from .driver import SearchResult, SearchStatistics, TrialDriver, trial_seed
from .enrollment import EnrollmentEngine
from .models import (
    BoardSnapshot,
    CamperSchedule,
    EnrollmentRecord,
    InstanceSnapshot,
    PeriodInstance,
    Schedule,
    SlotBoard,
    split_budget,
)
from .packing import SlotPacker
from .scoring import ScheduleEvaluator, ScoreBreakdown

__all__ = [
    # Driver
    "TrialDriver",
    "SearchResult",
    "SearchStatistics",
    "DriverState",
    "trial_seed",
    # Configuration
    "SearchConfig",
    "load_search_config",
    # Pipeline stages
    "ChoiceResolver",
    "DemandPlanner",
    "DemandReport",
    "SlotPacker",
    "EnrollmentEngine",
    "ScheduleEvaluator",
    "ScoreBreakdown",
    "periods_for_demand",
    # Models
    "BoardSnapshot",
    "CamperSchedule",
    "CamperState",
    "EnrollmentRecord",
    "InstanceSnapshot",
    "PeriodInstance",
    "Schedule",
    "SlotBoard",
    "TrialContext",
    "split_budget",
    # Constants
    "DEFAULT_MAX_ATTEMPTS",
    "DEFAULT_MAX_FAILURE_RATIO",
    "IMBALANCE_WEIGHT",
    "MIN_SUPPORTERS",
    "REQUIRED_CLASS_SCORE",
]

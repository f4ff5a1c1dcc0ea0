"""Constants for the schedule search."""

from enum import Enum


class DriverState(str, Enum):
    """Lifecycle of a trial driver."""

    IDLE = "idle"
    RUNNING = "running"
    DONE = "done"


# Default number of trials per search
DEFAULT_MAX_ATTEMPTS = 100_000

# Non-required classes with fewer supporters than this are eliminated
MIN_SUPPORTERS = 5

# Score contribution of an enrollment in a required class
REQUIRED_CLASS_SCORE = 3

# Multiplier for the per-class enrollment imbalance (max - min)
IMBALANCE_WEIGHT = 10

# Search fails when more than this fraction of trials fail
DEFAULT_MAX_FAILURE_RATIO = 0.5

# Demand multiples of the cutoff that trigger extra periods
# count > cutoff -> 2 periods, count > 2 * cutoff -> 3 periods
TWO_PERIOD_FACTOR = 1
THREE_PERIOD_FACTOR = 2

# Periods a double-period class always occupies
DOUBLE_PERIOD_COUNT = 2

# Consecutive period pairs
CONSECUTIVE_PAIRS = ((1, 2), (2, 3))

# Stage names used in error diagnostics
STAGE_RESOLVE = "choice resolution"
STAGE_GENERAL = "general enrollment"

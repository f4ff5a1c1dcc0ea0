"""Constants for camp class scheduling."""

# Periods in a camp day
NUMBER_PERIODS = 3
PERIODS = (1, 2, 3)

# Number of operative choices per camper (one per period)
NUMBER_FINAL_CHOICES = 3

# Top-ranked classes that seed the final choices (ranks 1..3)
TOP_CHOICES_COUNT = 3

# Eligibility
# Campers at or above this age may take 10+ classes
TEN_PLUS_MIN_AGE = 10
# Campers below this swim level need swim lessons;
# classes that require a swim level need at least this level
PROFICIENT_SWIM_LEVEL = 4

# Record keys for catalog files
CLASS_RECORD_KEYS = (
    "title",
    "allowed_periods",
    "double_period",
    "required",
    "is_10_plus",
    "must_be_consecutive",
    "requires_swim_level",
    "single_period_cutoff",
    "restricted_concurrent_classes",
)

# Fixed columns for roster CSV files; every other column is a class title
ROSTER_FIXED_COLUMNS = ["name", "age", "swim_level"]

"""Camp Scheduler - assigns campers to class periods from ranked preferences.

Campers rank every class in the catalog. The scheduler resolves three
operative choices per camper, drops classes with too little demand, spreads
the surviving classes over three periods and enrolls campers, respecting
age and swim-level gating, class capacity and placement restrictions. Many
randomized trials are run and the lowest-scoring schedule is kept.

Example usage:
    from camp_scheduler import SearchConfig, TrialDriver, load_inputs

    catalog, campers = load_inputs("classes.json", "roster.csv")
    result = TrialDriver(catalog, campers, SearchConfig(seed=42)).run()

    print(f"Best score: {result.best.score}")
    for row in result.best.camper_rows():
        print(row["name"], row["period_1"], row["period_2"], row["period_3"])

    # Export to Excel
    from camp_scheduler.exporters import ExcelExporter
    ExcelExporter().export(result, "schedule.xlsx")
"""

from .exceptions import (
    ChoiceExhaustedError,
    ConfigurationError,
    DuplicateClassTitleError,
    InputValidationError,
    InvalidDataError,
    InvalidRankingError,
    MissingInstanceError,
    SchedulerError,
    SearchFailedError,
    TrialError,
)
from .exporters import CSVExporter, ExcelExporter, JSONExporter, get_exporter
from .loaders import load_catalog, load_inputs, load_roster, save_catalog, save_roster
from .models import Camper, ClassCatalog, ClassCatalogEntry
from .scheduler import Schedule, SearchConfig, SearchResult, SearchStatistics, TrialDriver
from .validators import CatalogValidator, RosterValidator, validate_inputs

__version__ = "0.1.0"

__all__ = [
    # Search
    "TrialDriver",
    "SearchConfig",
    "SearchResult",
    "SearchStatistics",
    "Schedule",
    # Models
    "Camper",
    "ClassCatalog",
    "ClassCatalogEntry",
    # Loading and validation
    "load_catalog",
    "load_roster",
    "load_inputs",
    "save_catalog",
    "save_roster",
    "CatalogValidator",
    "RosterValidator",
    "validate_inputs",
    # Exporters
    "JSONExporter",
    "CSVExporter",
    "ExcelExporter",
    "get_exporter",
    # Exceptions
    "SchedulerError",
    "ConfigurationError",
    "InputValidationError",
    "DuplicateClassTitleError",
    "InvalidRankingError",
    "InvalidDataError",
    "TrialError",
    "ChoiceExhaustedError",
    "MissingInstanceError",
    "SearchFailedError",
]

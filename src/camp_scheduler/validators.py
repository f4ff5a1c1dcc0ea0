"""Validation of class catalogs and camper rosters."""

import logging
from collections import Counter
from typing import Any

import pandas as pd

from .constants import NUMBER_FINAL_CHOICES, PERIODS
from .exceptions import InputValidationError
from .models import Camper, ClassCatalog

logger = logging.getLogger(__name__)


def validate_class_title(title: Any) -> tuple[bool, str | None]:
    """Validate a class title.

    Args:
        title: Title to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if title is None or pd.isna(title):
        return False, "Class title is empty"

    name = str(title).strip()

    if not name:
        return False, "Class title is empty"

    return True, None


def validate_cutoff(cutoff: Any) -> tuple[bool, str | None]:
    """Validate a single-period cutoff (demand threshold and capacity).

    Returns:
        Tuple of (is_valid, error_message)
    """
    if cutoff is None or pd.isna(cutoff):
        return False, "Single period cutoff is missing"

    try:
        c = int(float(cutoff))
    except (ValueError, TypeError):
        return False, f"Invalid single period cutoff: '{cutoff}'"

    if c < 1:
        return False, f"Single period cutoff must be at least 1, got {c}"

    return True, None


def validate_allowed_periods(periods: Any) -> tuple[bool, str | None]:
    """Validate a set of allowed periods (empty means unrestricted).

    Returns:
        Tuple of (is_valid, error_message)
    """
    invalid = sorted(str(p) for p in periods if p not in PERIODS)
    if invalid:
        return False, (
            f"Invalid allowed periods: {', '.join(invalid)}. "
            f"Expected values from {list(PERIODS)}"
        )
    return True, None


def validate_age(age: Any) -> tuple[bool, str | None]:
    """Validate camper age.

    Returns:
        Tuple of (is_valid, warning_message)
    """
    if age is None or pd.isna(age):
        return False, "Age is missing"

    try:
        a = int(float(age))
    except (ValueError, TypeError):
        return False, f"Invalid age: '{age}'"

    if a < 0:
        return False, f"Negative age: {a}"

    if a < 4 or a > 18:
        return True, f"Unusual camper age: {a}"

    return True, None


def validate_swim_level(level: Any) -> tuple[bool, str | None]:
    """Validate swim level (0 and up).

    Returns:
        Tuple of (is_valid, error_message)
    """
    if level is None or pd.isna(level):
        return False, "Swim level is missing"

    try:
        s = int(float(level))
    except (ValueError, TypeError):
        return False, f"Invalid swim level: '{level}'"

    if s < 0:
        return False, f"Negative swim level: {s}"

    return True, None


def validate_rank(rank: Any, catalog_size: int) -> tuple[bool, str | None]:
    """Validate a single rank value against the catalog size.

    Returns:
        Tuple of (is_valid, error_message)
    """
    if rank is None or pd.isna(rank):
        return False, "Rank is missing"

    try:
        r = int(float(rank))
    except (ValueError, TypeError):
        return False, f"Invalid rank: '{rank}'"

    if not 1 <= r <= catalog_size:
        return False, f"Rank {r} is outside 1..{catalog_size}"

    return True, None


class CatalogValidator:
    """Validates a class catalog as a whole."""

    def __init__(self, catalog: ClassCatalog):
        self.catalog = catalog
        self.errors: list[str] = []
        self.warnings: list[str] = []

    def validate_all(self) -> tuple[bool, list[str], list[str]]:
        """Run all catalog checks.

        Returns:
            Tuple of (is_valid, errors, warnings)
        """
        self.errors = []
        self.warnings = []

        if len(self.catalog) < NUMBER_FINAL_CHOICES:
            self.errors.append(
                f"Catalog has {len(self.catalog)} classes; "
                f"at least {NUMBER_FINAL_CHOICES} are needed"
            )

        titles = set(self.catalog.titles)
        for entry in self.catalog:
            prefix = f"Class '{entry.title}'"

            valid, msg = validate_class_title(entry.title)
            if not valid:
                self.errors.append(msg)

            valid, msg = validate_cutoff(entry.single_period_cutoff)
            if not valid:
                self.errors.append(f"{prefix}: {msg}")

            valid, msg = validate_allowed_periods(entry.allowed_periods)
            if not valid:
                self.errors.append(f"{prefix}: {msg}")

            if entry.title in entry.restricted_concurrent:
                self.warnings.append(f"{prefix}: restricted from running with itself")

            unknown = sorted(entry.restricted_concurrent - titles - {entry.title})
            if unknown:
                self.warnings.append(
                    f"{prefix}: restricted against unknown classes: {', '.join(unknown)}"
                )

            if entry.is_double_period and entry.has_restricted_periods:
                if len(entry.allowed_periods) < 2:
                    self.warnings.append(
                        f"{prefix}: double-period class allowed in fewer than two periods "
                        "and will always be eliminated"
                    )

            if entry.must_be_consecutive and entry.allowed_periods == frozenset({1, 3}):
                self.warnings.append(
                    f"{prefix}: must be consecutive but only periods 1 and 3 are allowed"
                )

        required = [e.title for e in self.catalog if e.is_required]
        if not required:
            self.warnings.append("Catalog has no required class; swim lessons are not assigned")
        elif len(required) > 1:
            self.warnings.append(
                f"Catalog has {len(required)} required classes; "
                f"'{required[0]}' is used for swim lessons"
            )

        return len(self.errors) == 0, self.errors, self.warnings


class RosterValidator:
    """Validates a camper roster against a catalog."""

    def __init__(self, catalog: ClassCatalog, campers: list[Camper]):
        self.catalog = catalog
        self.campers = campers
        self.errors: list[str] = []
        self.warnings: list[str] = []

    def validate_all(self) -> tuple[bool, list[str], list[str]]:
        """Run all roster checks.

        Returns:
            Tuple of (is_valid, errors, warnings)
        """
        self.errors = []
        self.warnings = []

        if not self.campers:
            self.errors.append("Roster is empty")

        names = Counter(c.name for c in self.campers)
        for name, count in names.items():
            if count > 1:
                self.errors.append(f"Camper name '{name}' appears {count} times")

        for camper in self.campers:
            self._validate_camper(camper)

        return len(self.errors) == 0, self.errors, self.warnings

    def _validate_camper(self, camper: Camper) -> None:
        prefix = f"Camper '{camper.name}'"

        if not camper.name or not str(camper.name).strip():
            self.errors.append("Camper name is empty")

        valid, msg = validate_age(camper.age)
        if not valid:
            self.errors.append(f"{prefix}: {msg}")
        elif msg:
            self.warnings.append(f"{prefix}: {msg}")

        valid, msg = validate_swim_level(camper.swim_level)
        if not valid:
            self.errors.append(f"{prefix}: {msg}")

        ranked = [e.title for e in camper.ranking]
        duplicates = sorted(t for t, n in Counter(ranked).items() if n > 1)
        if duplicates:
            self.errors.append(f"{prefix}: classes ranked more than once: {', '.join(duplicates)}")

        unknown = sorted(set(ranked) - set(self.catalog.titles))
        if unknown:
            self.errors.append(f"{prefix}: unknown classes ranked: {', '.join(unknown)}")

        missing = [t for t in self.catalog.titles if t not in ranked]
        if missing:
            self.errors.append(f"{prefix}: classes not ranked: {', '.join(missing)}")

        eligible = sum(1 for e in self.catalog if camper.can_take(e))
        if eligible < NUMBER_FINAL_CHOICES:
            self.errors.append(
                f"{prefix}: eligible for only {eligible} classes; "
                f"at least {NUMBER_FINAL_CHOICES} are needed"
            )


def validate_inputs(catalog: ClassCatalog, campers: list[Camper]) -> list[str]:
    """Validate catalog and roster together.

    Returns:
        Warnings found

    Raises:
        InputValidationError: With every error found
    """
    _, catalog_errors, catalog_warnings = CatalogValidator(catalog).validate_all()
    _, roster_errors, roster_warnings = RosterValidator(catalog, campers).validate_all()

    errors = catalog_errors + roster_errors
    warnings = catalog_warnings + roster_warnings
    for warning in warnings:
        logger.warning(warning)

    if errors:
        raise InputValidationError(errors)
    return warnings

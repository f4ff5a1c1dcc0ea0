"""Search configuration."""

import json
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Self

from ..exceptions import ConfigurationError
from .constants import (
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_MAX_FAILURE_RATIO,
    IMBALANCE_WEIGHT,
    MIN_SUPPORTERS,
    REQUIRED_CLASS_SCORE,
)


@dataclass
class SearchConfig:
    """Knobs for the repeated-trial search.

    Attributes:
        max_attempts: Number of trials to run
        time_limit: Wall-clock cap in seconds, checked between trials (None = no cap)
        workers: Number of worker threads running trials
        seed: Base seed for per-trial random sources (None = drawn at start)
        max_failure_ratio: Fraction of failed trials above which the search fails
        elimination_threshold: Minimum supporters for a non-required class
        required_class_score: Score of an enrollment in a required class
        imbalance_weight: Multiplier for per-class enrollment imbalance
        balance_required_classes: Include required classes in the imbalance term
    """

    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    time_limit: float | None = None
    workers: int = 1
    seed: int | None = None
    max_failure_ratio: float = DEFAULT_MAX_FAILURE_RATIO
    elimination_threshold: int = MIN_SUPPORTERS
    required_class_score: int = REQUIRED_CLASS_SCORE
    imbalance_weight: int = IMBALANCE_WEIGHT
    balance_required_classes: bool = True

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Check value ranges.

        Raises:
            ConfigurationError: If a value is out of range
        """
        if self.max_attempts < 1:
            raise ConfigurationError("must be at least 1", key="max_attempts")
        if self.time_limit is not None and self.time_limit <= 0:
            raise ConfigurationError("must be positive", key="time_limit")
        if self.workers < 1:
            raise ConfigurationError("must be at least 1", key="workers")
        if not 0.0 <= self.max_failure_ratio <= 1.0:
            raise ConfigurationError("must be between 0 and 1", key="max_failure_ratio")
        if self.elimination_threshold < 0:
            raise ConfigurationError("must not be negative", key="elimination_threshold")
        if self.required_class_score < 0:
            raise ConfigurationError("must not be negative", key="required_class_score")
        if self.imbalance_weight < 0:
            raise ConfigurationError("must not be negative", key="imbalance_weight")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Create a config from a dictionary, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in known}
        try:
            return cls(**values)
        except TypeError as e:
            raise ConfigurationError(str(e)) from e

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary."""
        return asdict(self)

    def replace(self, **overrides: Any) -> Self:
        """Return a copy with non-None overrides applied."""
        data = self.to_dict()
        data.update({k: v for k, v in overrides.items() if v is not None})
        return type(self).from_dict(data)


def load_search_config(path: Path) -> SearchConfig:
    """Load a search config from a JSON file.

    Raises:
        ConfigurationError: If the file is missing or malformed
    """
    if not path.exists():
        raise ConfigurationError(f"file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"{path} is not valid JSON ({e})") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} must contain a JSON object")

    return SearchConfig.from_dict(data)

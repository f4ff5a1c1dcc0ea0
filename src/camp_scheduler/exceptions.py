"""Custom exceptions for the camp class scheduler."""


class SchedulerError(Exception):
    """Base exception for scheduler errors."""

    pass


class InputValidationError(SchedulerError):
    """Catalog or roster violates an input invariant.

    Raised before any trial runs; no partial schedule is produced.
    """

    def __init__(self, errors: list[str] | str):
        if isinstance(errors, str):
            errors = [errors]
        self.errors = list(errors)
        if len(self.errors) == 1:
            message = f"Invalid input: {self.errors[0]}"
        else:
            message = f"Invalid input ({len(self.errors)} problems): " + "; ".join(
                self.errors
            )
        super().__init__(message)


class DuplicateClassTitleError(InputValidationError):
    """Two catalog entries share a title."""

    def __init__(self, title: str):
        self.title = title
        super().__init__(f"Class title '{title}' appears more than once in the catalog")


class InvalidRankingError(InputValidationError):
    """A camper's ranking is incomplete, duplicated or refers to unknown classes."""

    def __init__(self, camper_name: str, message: str):
        self.camper_name = camper_name
        super().__init__(f"Camper '{camper_name}': {message}")


class InvalidDataError(InputValidationError):
    """A record in an input file could not be read."""

    def __init__(self, message: str, source: str | None = None, row: int | None = None):
        self.source = source
        self.row = row
        location = ""
        if source:
            location += f" in '{source}'"
        if row is not None:
            location += f" at record {row}"
        super().__init__(f"Invalid data{location}: {message}")


class TrialError(SchedulerError):
    """A single trial hit an invariant violation and must be discarded."""

    pass


class ChoiceExhaustedError(TrialError):
    """A camper's ranking ran out before an acceptable class was found."""

    def __init__(self, camper_name: str, stage: str, after: str | None = None):
        self.camper_name = camper_name
        self.stage = stage
        self.after = after
        message = f"Ranking of camper '{camper_name}' exhausted during {stage}"
        if after:
            message += f" (no acceptable class ranked below '{after}')"
        super().__init__(message)


class MissingInstanceError(TrialError):
    """No period instance exists where the demand/packing stage promised one."""

    def __init__(
        self,
        title: str | None,
        period: int | None = None,
        camper_name: str | None = None,
        details: str | None = None,
    ):
        self.title = title
        self.period = period
        self.camper_name = camper_name
        message = "No usable period instance"
        if title:
            message += f" for class '{title}'"
        if period is not None:
            message += f" in period {period}"
        if camper_name:
            message += f" for camper '{camper_name}'"
        if details:
            message += f": {details}"
        super().__init__(message)


class SearchFailedError(SchedulerError):
    """Too many trials failed for the search result to be trusted."""

    def __init__(self, attempted: int, failed: int, reason: str):
        self.attempted = attempted
        self.failed = failed
        self.reason = reason
        super().__init__(
            f"Schedule search failed after {attempted} trials ({failed} failed): {reason}"
        )


class ConfigurationError(SchedulerError):
    """Search configuration is missing, unreadable or out of range."""

    def __init__(self, message: str, key: str | None = None):
        self.key = key
        if key:
            message = f"{key}: {message}"
        super().__init__(f"Invalid search configuration: {message}")

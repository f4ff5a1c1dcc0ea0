"""Data models for the camp class catalog and camper roster."""

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any, Self

from .constants import PROFICIENT_SWIM_LEVEL, TEN_PLUS_MIN_AGE, TOP_CHOICES_COUNT
from .exceptions import DuplicateClassTitleError, InvalidRankingError


@dataclass(frozen=True)
class ClassCatalogEntry:
    """A class offered at camp.

    Identity is the title alone; titles are unique within a catalog.

    Attributes:
        title: Class name (identity key)
        allowed_periods: Periods the class may run in (empty = any period)
        is_double_period: Class occupies two periods for each camper
        is_required: Class some campers must take (swim lessons)
        is_10_plus: Only campers aged 10 and over may take it
        must_be_consecutive: Two-period offerings must use adjacent periods
        requires_swim_level: Only proficient swimmers may take it
        single_period_cutoff: Demand threshold and per-period capacity
        restricted_concurrent: Titles that may not run in the same period
    """

    title: str
    allowed_periods: frozenset[int] = frozenset()
    is_double_period: bool = False
    is_required: bool = False
    is_10_plus: bool = False
    must_be_consecutive: bool = False
    requires_swim_level: bool = False
    single_period_cutoff: int = 10
    restricted_concurrent: frozenset[str] = frozenset()

    def __hash__(self) -> int:
        return hash(self.title)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ClassCatalogEntry):
            return False
        return self.title == other.title

    def __str__(self) -> str:
        return self.title

    @property
    def has_restricted_periods(self) -> bool:
        """True if the class is limited to a subset of periods."""
        return bool(self.allowed_periods)

    @property
    def has_concurrent_restriction(self) -> bool:
        """True if some classes may not share a period with this one."""
        return bool(self.restricted_concurrent)

    def can_occur_during(self, period: int) -> bool:
        """Check whether the class may be offered in a period."""
        if not self.allowed_periods:
            return True
        return period in self.allowed_periods

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Create an entry from a catalog record."""
        return cls(
            title=str(data["title"]).strip(),
            allowed_periods=frozenset(int(p) for p in data.get("allowed_periods", [])),
            is_double_period=bool(data.get("double_period", False)),
            is_required=bool(data.get("required", False)),
            is_10_plus=bool(data.get("is_10_plus", False)),
            must_be_consecutive=bool(data.get("must_be_consecutive", False)),
            requires_swim_level=bool(data.get("requires_swim_level", False)),
            single_period_cutoff=int(data.get("single_period_cutoff", 10)),
            restricted_concurrent=frozenset(
                str(t).strip() for t in data.get("restricted_concurrent_classes", [])
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert entry to a catalog record."""
        return {
            "title": self.title,
            "allowed_periods": sorted(self.allowed_periods),
            "double_period": self.is_double_period,
            "required": self.is_required,
            "is_10_plus": self.is_10_plus,
            "must_be_consecutive": self.must_be_consecutive,
            "requires_swim_level": self.requires_swim_level,
            "single_period_cutoff": self.single_period_cutoff,
            "restricted_concurrent_classes": sorted(self.restricted_concurrent),
        }


class ClassCatalog:
    """Read-only, ordered collection of catalog entries keyed by title.

    Built once before any trial runs and shared by every trial.
    """

    def __init__(self, entries: Iterable[ClassCatalogEntry]):
        self._entries: dict[str, ClassCatalogEntry] = {}
        for entry in entries:
            if entry.title in self._entries:
                raise DuplicateClassTitleError(entry.title)
            self._entries[entry.title] = entry
        self._required = next(
            (e for e in self._entries.values() if e.is_required), None
        )

    def __iter__(self) -> Iterator[ClassCatalogEntry]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, item: object) -> bool:
        if isinstance(item, ClassCatalogEntry):
            return item.title in self._entries
        return item in self._entries

    def __getitem__(self, title: str) -> ClassCatalogEntry:
        return self._entries[title]

    def __repr__(self) -> str:
        return f"ClassCatalog({list(self._entries)!r})"

    def get(self, title: str) -> ClassCatalogEntry | None:
        """Get an entry by title, or None."""
        return self._entries.get(title)

    @property
    def titles(self) -> list[str]:
        """Titles in catalog order."""
        return list(self._entries)

    @property
    def required_class(self) -> ClassCatalogEntry | None:
        """First required class in catalog order (the swim lesson class)."""
        return self._required

    def index_of(self, title: str) -> int:
        """Position of a title in catalog order."""
        return self.titles.index(title)

    @classmethod
    def from_records(cls, records: Iterable[dict[str, Any]]) -> Self:
        """Build a catalog from a list of class records."""
        return cls(ClassCatalogEntry.from_dict(r) for r in records)

    def to_records(self) -> list[dict[str, Any]]:
        """Convert the catalog to a list of class records."""
        return [entry.to_dict() for entry in self]


@dataclass
class Camper:
    """A camper with a complete preference ranking of the catalog.

    Attributes:
        name: Camper name (unique within a roster)
        age: Age in years
        swim_level: Swim level (0-4+)
        ranking: Every catalog entry, best first (index 0 is rank 1)
    """

    name: str
    age: int
    swim_level: int
    ranking: tuple[ClassCatalogEntry, ...] = ()
    _ranks: dict[str, int] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self.ranking = tuple(self.ranking)
        self._ranks = {entry.title: i + 1 for i, entry in enumerate(self.ranking)}

    def __hash__(self) -> int:
        return hash(self.name)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Camper):
            return False
        return self.name == other.name

    @classmethod
    def from_ranks(
        cls,
        name: str,
        age: int,
        swim_level: int,
        ranks: dict[str, int],
        catalog: ClassCatalog,
    ) -> Self:
        """Create a camper from a title -> rank mapping.

        Every catalog class must be ranked exactly once with ranks 1..K,
        where K is the catalog size.

        Raises:
            InvalidRankingError: If the ranking is incomplete or inconsistent
        """
        unknown = sorted(t for t in ranks if t not in catalog)
        if unknown:
            raise InvalidRankingError(name, f"unknown classes ranked: {', '.join(unknown)}")

        missing = [t for t in catalog.titles if t not in ranks]
        if missing:
            raise InvalidRankingError(name, f"classes not ranked: {', '.join(missing)}")

        size = len(catalog)
        by_rank: dict[int, str] = {}
        for title, rank in ranks.items():
            if not 1 <= rank <= size:
                raise InvalidRankingError(
                    name, f"rank {rank} for '{title}' is outside 1..{size}"
                )
            if rank in by_rank:
                raise InvalidRankingError(
                    name, f"rank {rank} given to both '{by_rank[rank]}' and '{title}'"
                )
            by_rank[rank] = title

        ranking = tuple(catalog[by_rank[r]] for r in range(1, size + 1))
        return cls(name=name, age=age, swim_level=swim_level, ranking=ranking)

    @property
    def top_choices(self) -> tuple[ClassCatalogEntry, ...]:
        """Classes ranked 1 through 3."""
        return self.ranking[:TOP_CHOICES_COUNT]

    @property
    def is_10_plus(self) -> bool:
        return self.age >= TEN_PLUS_MIN_AGE

    @property
    def requires_swim_lessons(self) -> bool:
        return self.swim_level < PROFICIENT_SWIM_LEVEL

    def can_take(self, entry: ClassCatalogEntry) -> bool:
        """Check age and swim gating for a class."""
        if entry.is_10_plus and not self.is_10_plus:
            return False
        if entry.requires_swim_level and self.swim_level < PROFICIENT_SWIM_LEVEL:
            return False
        return True

    def rank_of(self, entry: ClassCatalogEntry | str) -> int:
        """Get the 1-based rank the camper gave a class.

        Raises:
            KeyError: If the class is not in the camper's ranking
        """
        title = entry if isinstance(entry, str) else entry.title
        return self._ranks[title]

    def choice_of_rank(self, rank: int) -> ClassCatalogEntry:
        """Get the class at a 1-based rank.

        Raises:
            IndexError: If rank is outside 1..K
        """
        if not 1 <= rank <= len(self.ranking):
            raise IndexError(f"Rank {rank} out of range 1..{len(self.ranking)}")
        return self.ranking[rank - 1]

    def next_eligible_after(
        self,
        entry: ClassCatalogEntry | None,
        skip: Callable[[ClassCatalogEntry], bool] | None = None,
    ) -> ClassCatalogEntry | None:
        """Walk the ranking below a class for the next one the camper can take.

        Args:
            entry: Class to start below; None starts from rank 1
            skip: Extra predicate; classes for which it returns True are passed over

        Returns:
            The next acceptable class, or None when the ranking is exhausted
        """
        start = 0 if entry is None else self.rank_of(entry)
        for candidate in self.ranking[start:]:
            if not self.can_take(candidate):
                continue
            if skip is not None and skip(candidate):
                continue
            return candidate
        return None

    def ranks_by_title(self) -> dict[str, int]:
        """Title -> rank mapping (the roster file representation)."""
        return dict(self._ranks)

    def to_dict(self) -> dict[str, Any]:
        """Convert camper to a roster record."""
        return {
            "name": self.name,
            "age": self.age,
            "swim_level": self.swim_level,
            "rankings": self.ranks_by_title(),
        }

"""Test fixtures for camp scheduler tests."""

import pytest

from camp_scheduler.models import Camper, ClassCatalog, ClassCatalogEntry
from camp_scheduler.scheduler.config import SearchConfig

OPTIONAL_TITLES = ["Archery", "Canoeing", "Crafts", "Drama", "Nature", "Pottery"]


def build_camper(
    name: str,
    ranked_titles: list[str],
    catalog: ClassCatalog,
    age: int = 11,
    swim_level: int = 4,
) -> Camper:
    """Camper ranking the given titles first, then the rest in catalog order."""
    order = list(ranked_titles) + [t for t in catalog.titles if t not in ranked_titles]
    ranks = {title: rank for rank, title in enumerate(order, start=1)}
    return Camper.from_ranks(name, age, swim_level, ranks, catalog)


@pytest.fixture
def make_camper():
    """Factory for campers with a partial preference order."""
    return build_camper


@pytest.fixture
def camp_catalog():
    """Swimming (required) plus six optional classes with capacity 4."""
    entries = [ClassCatalogEntry("Swimming", is_required=True, single_period_cutoff=30)]
    entries += [ClassCatalogEntry(title, single_period_cutoff=4) for title in OPTIONAL_TITLES]
    return ClassCatalog(entries)


@pytest.fixture
def camp_roster(camp_catalog):
    """Twelve campers with rotating top choices; the first four need swim lessons.

    Every optional class ends up with 5 or 6 supporters, so none is
    eliminated and each runs for two periods.
    """
    campers = []
    for i in range(12):
        top = [OPTIONAL_TITLES[(i + k) % len(OPTIONAL_TITLES)] for k in range(3)]
        campers.append(
            build_camper(
                f"Camper {i:02d}",
                top,
                camp_catalog,
                age=8 + i % 6,
                swim_level=2 if i < 4 else 4,
            )
        )
    return campers


@pytest.fixture
def small_config():
    """Fast, reproducible search settings."""
    return SearchConfig(max_attempts=20, seed=1234)


@pytest.fixture
def catalog_records():
    """Catalog file records."""
    return [
        {"title": "Swimming", "required": True, "single_period_cutoff": 30},
        {"title": "Archery", "single_period_cutoff": 8, "is_10_plus": True},
        {"title": "Canoeing", "single_period_cutoff": 8, "requires_swim_level": True},
        {"title": "Crafts", "single_period_cutoff": 8, "allowed_periods": [2, 3]},
        {
            "title": "Drama",
            "double_period": True,
            "single_period_cutoff": 12,
            "restricted_concurrent_classes": ["Crafts"],
        },
    ]

"""Tests for catalog and camper models."""

import pytest

from camp_scheduler.exceptions import DuplicateClassTitleError, InvalidRankingError
from camp_scheduler.models import Camper, ClassCatalog, ClassCatalogEntry


class TestClassCatalogEntry:
    """Tests for ClassCatalogEntry model."""

    def test_equality_is_by_title(self):
        """Entries with the same title are equal even if cutoffs differ."""
        a = ClassCatalogEntry("Archery", single_period_cutoff=8)
        b = ClassCatalogEntry("Archery", single_period_cutoff=12)
        assert a == b
        assert hash(a) == hash(b)
        assert len({a, b}) == 1

    def test_different_titles_not_equal(self):
        assert ClassCatalogEntry("Archery") != ClassCatalogEntry("Crafts")

    def test_unrestricted_can_occur_any_period(self):
        entry = ClassCatalogEntry("Archery")
        assert not entry.has_restricted_periods
        assert all(entry.can_occur_during(p) for p in (1, 2, 3))

    def test_restricted_periods(self):
        entry = ClassCatalogEntry("Crafts", allowed_periods=frozenset({2, 3}))
        assert entry.has_restricted_periods
        assert not entry.can_occur_during(1)
        assert entry.can_occur_during(2)
        assert entry.can_occur_during(3)

    def test_from_dict_defaults(self):
        entry = ClassCatalogEntry.from_dict({"title": " Nature "})
        assert entry.title == "Nature"
        assert entry.allowed_periods == frozenset()
        assert not entry.is_double_period
        assert not entry.is_required
        assert entry.single_period_cutoff == 10
        assert entry.restricted_concurrent == frozenset()

    def test_from_dict_all_fields(self, catalog_records):
        drama = ClassCatalogEntry.from_dict(catalog_records[4])
        assert drama.is_double_period
        assert drama.single_period_cutoff == 12
        assert drama.has_concurrent_restriction
        assert drama.restricted_concurrent == frozenset({"Crafts"})

        crafts = ClassCatalogEntry.from_dict(catalog_records[3])
        assert crafts.allowed_periods == frozenset({2, 3})

    def test_to_dict_keys(self, catalog_records):
        entry = ClassCatalogEntry.from_dict(catalog_records[1])
        data = entry.to_dict()
        assert data["title"] == "Archery"
        assert data["is_10_plus"] is True
        assert data["allowed_periods"] == []
        assert ClassCatalogEntry.from_dict(data) == entry


class TestClassCatalog:
    """Tests for ClassCatalog."""

    def test_keeps_catalog_order(self, catalog_records):
        catalog = ClassCatalog.from_records(catalog_records)
        assert catalog.titles == ["Swimming", "Archery", "Canoeing", "Crafts", "Drama"]
        assert [e.title for e in catalog] == catalog.titles
        assert len(catalog) == 5

    def test_duplicate_title_rejected(self):
        with pytest.raises(DuplicateClassTitleError) as exc_info:
            ClassCatalog([ClassCatalogEntry("Archery"), ClassCatalogEntry("Archery")])
        assert exc_info.value.title == "Archery"

    def test_lookup(self, camp_catalog):
        assert camp_catalog["Drama"].title == "Drama"
        assert camp_catalog.get("Unknown") is None
        assert "Drama" in camp_catalog
        assert ClassCatalogEntry("Drama") in camp_catalog
        assert "Unknown" not in camp_catalog

    def test_required_class_is_first_required(self):
        catalog = ClassCatalog(
            [
                ClassCatalogEntry("Archery"),
                ClassCatalogEntry("Swimming", is_required=True),
                ClassCatalogEntry("Lifeguarding", is_required=True),
            ]
        )
        assert catalog.required_class.title == "Swimming"

    def test_no_required_class(self):
        catalog = ClassCatalog([ClassCatalogEntry("Archery")])
        assert catalog.required_class is None

    def test_index_of(self, camp_catalog):
        assert camp_catalog.index_of("Swimming") == 0
        assert camp_catalog.index_of("Pottery") == 6


class TestCamper:
    """Tests for Camper model."""

    def test_from_ranks_orders_ranking(self, camp_catalog):
        ranks = {title: i for i, title in enumerate(reversed(camp_catalog.titles), start=1)}
        camper = Camper.from_ranks("Ann", 11, 4, ranks, camp_catalog)
        assert camper.ranking[0].title == "Pottery"
        assert camper.ranking[-1].title == "Swimming"
        assert camper.rank_of("Pottery") == 1
        assert camper.rank_of(camp_catalog["Swimming"]) == 7
        assert camper.choice_of_rank(2).title == "Nature"

    def test_top_choices(self, camp_catalog, make_camper):
        camper = make_camper("Ann", ["Drama", "Crafts", "Nature"], camp_catalog)
        assert [c.title for c in camper.top_choices] == ["Drama", "Crafts", "Nature"]

    def test_choice_of_rank_ceiling_is_catalog_size(self, camp_catalog, make_camper):
        camper = make_camper("Ann", ["Drama"], camp_catalog)
        assert camper.choice_of_rank(len(camp_catalog)) is not None
        with pytest.raises(IndexError):
            camper.choice_of_rank(len(camp_catalog) + 1)
        with pytest.raises(IndexError):
            camper.choice_of_rank(0)

    def test_missing_rank_rejected(self, camp_catalog):
        ranks = {"Swimming": 1, "Archery": 2}
        with pytest.raises(InvalidRankingError, match="not ranked"):
            Camper.from_ranks("Ann", 11, 4, ranks, camp_catalog)

    def test_duplicate_rank_rejected(self, camp_catalog):
        ranks = {title: i for i, title in enumerate(camp_catalog.titles, start=1)}
        ranks["Pottery"] = 1
        with pytest.raises(InvalidRankingError, match="rank 1"):
            Camper.from_ranks("Ann", 11, 4, ranks, camp_catalog)

    def test_out_of_range_rank_rejected(self, camp_catalog):
        ranks = {title: i for i, title in enumerate(camp_catalog.titles, start=1)}
        ranks["Pottery"] = 12
        with pytest.raises(InvalidRankingError, match="outside"):
            Camper.from_ranks("Ann", 11, 4, ranks, camp_catalog)

    def test_unknown_class_rejected(self, camp_catalog):
        ranks = {title: i for i, title in enumerate(camp_catalog.titles, start=1)}
        ranks["Fencing"] = 8
        with pytest.raises(InvalidRankingError, match="unknown"):
            Camper.from_ranks("Ann", 11, 4, ranks, camp_catalog)

    def test_ten_plus_boundary(self, camp_catalog, make_camper):
        assert not make_camper("Kid", [], camp_catalog, age=9).is_10_plus
        assert make_camper("Teen", [], camp_catalog, age=10).is_10_plus

    def test_swim_lessons_boundary(self, camp_catalog, make_camper):
        assert make_camper("Kid", [], camp_catalog, swim_level=3).requires_swim_lessons
        assert not make_camper("Teen", [], camp_catalog, swim_level=4).requires_swim_lessons

    def test_can_take_gating(self, catalog_records, make_camper):
        catalog = ClassCatalog.from_records(catalog_records)
        young = make_camper("Young", [], catalog, age=8, swim_level=2)
        older = make_camper("Older", [], catalog, age=12, swim_level=4)

        assert not young.can_take(catalog["Archery"])
        assert not young.can_take(catalog["Canoeing"])
        assert young.can_take(catalog["Crafts"])
        assert older.can_take(catalog["Archery"])
        assert older.can_take(catalog["Canoeing"])

    def test_next_eligible_after_skips(self, catalog_records, make_camper):
        catalog = ClassCatalog.from_records(catalog_records)
        camper = make_camper(
            "Young", ["Archery", "Canoeing", "Crafts", "Drama"], catalog, age=8, swim_level=2
        )
        # Archery and Canoeing are gated
        assert camper.next_eligible_after(None).title == "Crafts"
        assert camper.next_eligible_after(catalog["Archery"]).title == "Crafts"
        skip_crafts = lambda e: e.title == "Crafts"  # noqa: E731
        assert camper.next_eligible_after(None, skip=skip_crafts).title == "Drama"

    def test_next_eligible_after_exhausted(self, camp_catalog, make_camper):
        camper = make_camper("Ann", [], camp_catalog)
        last = camper.ranking[-1]
        assert camper.next_eligible_after(last) is None

    def test_equality_by_name(self, camp_catalog, make_camper):
        a = make_camper("Ann", ["Drama"], camp_catalog)
        b = make_camper("Ann", ["Crafts"], camp_catalog, age=12)
        assert a == b
        assert hash(a) == hash(b)

    def test_to_dict(self, camp_catalog, make_camper):
        camper = make_camper("Ann", ["Drama"], camp_catalog, age=9, swim_level=3)
        data = camper.to_dict()
        assert data["name"] == "Ann"
        assert data["age"] == 9
        assert data["swim_level"] == 3
        assert data["rankings"]["Drama"] == 1
        assert sorted(data["rankings"].values()) == list(range(1, len(camp_catalog) + 1))

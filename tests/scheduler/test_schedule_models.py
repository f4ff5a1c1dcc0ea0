"""Tests for period instances, slot boards, camper state and frozen schedules."""

import pytest

from camp_scheduler.exceptions import TrialError
from camp_scheduler.models import ClassCatalog, ClassCatalogEntry
from camp_scheduler.scheduler.config import SearchConfig
from camp_scheduler.scheduler.context import CamperState, TrialContext
from camp_scheduler.scheduler.driver import TrialDriver
from camp_scheduler.scheduler.models import PeriodInstance, Schedule, SlotBoard


@pytest.fixture
def trio_catalog():
    """Required swim class and two optional classes."""
    return ClassCatalog(
        [
            ClassCatalogEntry("Swimming", is_required=True),
            ClassCatalogEntry("Art"),
            ClassCatalogEntry("Music"),
        ]
    )


@pytest.fixture
def trio_schedule(trio_catalog, make_camper):
    """Scored schedule for one camper taking every class."""
    ann = make_camper("Ann", ["Art", "Music", "Swimming"], trio_catalog)
    driver = TrialDriver(
        trio_catalog, [ann], SearchConfig(max_attempts=1, seed=5, elimination_threshold=1)
    )
    return driver.run_trial(0, base_seed=5)


class TestPeriodInstance:
    """Tests for PeriodInstance."""

    def test_add_respects_capacity(self, camp_catalog, make_camper):
        entry = ClassCatalogEntry("Art", single_period_cutoff=1)
        instance = PeriodInstance(entry, 1)
        ann = CamperState(make_camper("Ann", [], camp_catalog))
        bob = CamperState(make_camper("Bob", [], camp_catalog))

        assert instance.add_camper(ann)
        assert not instance.has_room
        assert not instance.add_camper(bob)
        assert bob.num_enrolled == 0
        assert instance.enrollment == 1

    def test_override_flags_only_past_capacity(self, camp_catalog, make_camper):
        entry = ClassCatalogEntry("Art", single_period_cutoff=1)
        instance = PeriodInstance(entry, 2)
        ann = CamperState(make_camper("Ann", [], camp_catalog))
        bob = CamperState(make_camper("Bob", [], camp_catalog))

        assert instance.add_camper(ann, override=True)
        assert not instance.is_overridden
        assert ann.override_periods == set()

        assert instance.add_camper(bob, override=True)
        assert instance.override_campers == {"Bob"}
        assert bob.override_periods == {2}
        assert instance.enrollment == 2

    def test_add_refused_when_period_taken(self, camp_catalog, make_camper):
        ann = CamperState(make_camper("Ann", [], camp_catalog))
        art = PeriodInstance(ClassCatalogEntry("Art"), 1)
        music = PeriodInstance(ClassCatalogEntry("Music"), 1)

        assert art.add_camper(ann)
        assert not music.add_camper(ann, override=True)
        assert music.enrollment == 0
        assert ann.enrollments[1] is art

    def test_same_class_refused_in_second_period(self, camp_catalog, make_camper):
        ann = CamperState(make_camper("Ann", [], camp_catalog))
        entry = ClassCatalogEntry("Art")
        assert PeriodInstance(entry, 1).add_camper(ann)
        assert not PeriodInstance(entry, 2).add_camper(ann)

    def test_double_period_held_twice(self, camp_catalog, make_camper):
        ann = CamperState(make_camper("Ann", [], camp_catalog))
        entry = ClassCatalogEntry("Drama", is_double_period=True)
        assert PeriodInstance(entry, 1).add_camper(ann)
        assert PeriodInstance(entry, 2).add_camper(ann)
        assert not PeriodInstance(entry, 3).add_camper(ann)
        assert ann.periods_of("Drama") == [1, 2]


class TestSlotBoard:
    """Tests for SlotBoard."""

    def test_refuses_past_budget(self):
        board = SlotBoard(period=1, budget=1)
        assert board.add(PeriodInstance(ClassCatalogEntry("Art"), 1))
        assert board.is_full
        assert not board.add(PeriodInstance(ClassCatalogEntry("Music"), 1))
        assert board.count == 1

    def test_refuses_other_period(self):
        board = SlotBoard(period=1, budget=2)
        assert not board.add(PeriodInstance(ClassCatalogEntry("Art"), 2))

    def test_titles(self):
        board = SlotBoard(period=1, budget=3)
        board.add(PeriodInstance(ClassCatalogEntry("Art"), 1))
        board.add(PeriodInstance(ClassCatalogEntry("Drama", is_double_period=True), 1))
        assert board.count == 2
        assert board.titles == {"Art", "Drama"}
        assert board.has_class("Drama")


class TestCamperState:
    """Tests for CamperState."""

    def test_record_invalid_enrollment_raises(self, camp_catalog, make_camper):
        ann = CamperState(make_camper("Ann", [], camp_catalog))
        art = PeriodInstance(ClassCatalogEntry("Art"), 1)
        ann.record_enrollment(art, override=False)
        with pytest.raises(TrialError):
            ann.record_enrollment(PeriodInstance(ClassCatalogEntry("Music"), 1), override=False)

    def test_missing_period(self, camp_catalog, make_camper):
        ann = CamperState(make_camper("Ann", [], camp_catalog))
        assert ann.missing_period() == 1
        PeriodInstance(ClassCatalogEntry("Art"), 1).add_camper(ann)
        PeriodInstance(ClassCatalogEntry("Music"), 3).add_camper(ann)
        assert ann.missing_period() == 2
        assert ann.free_periods == [2]
        PeriodInstance(ClassCatalogEntry("Nature"), 2).add_camper(ann)
        assert ann.missing_period() is None

    def test_reset_choices(self, camp_catalog, make_camper):
        ann = CamperState(make_camper("Ann", [], camp_catalog))
        ann.buffer["Art"] = 1
        ann.final_choices = [camp_catalog["Archery"], None, None]
        ann.reset_choices()
        assert ann.buffer == {}
        assert ann.final_choices == [None, None, None]


class TestTrialContext:
    """Tests for TrialContext."""

    def test_same_seed_same_order(self, camp_catalog, camp_roster):
        first = TrialContext(camp_catalog, camp_roster, seed=99)
        second = TrialContext(camp_catalog, camp_roster, seed=99)
        assert [s.name for s in first.campers] == [s.name for s in second.campers]

    def test_unshuffled_keeps_roster_order(self, camp_catalog, camp_roster):
        context = TrialContext(camp_catalog, camp_roster, shuffle=False)
        assert [s.camper for s in context.campers] == camp_roster

    def test_place_refuses_duplicate(self, camp_catalog):
        context = TrialContext(camp_catalog, [], shuffle=False)
        context.period_counts = {"Archery": 3}
        context.init_boards()
        assert context.place(camp_catalog["Archery"], 1)
        assert not context.place(camp_catalog["Archery"], 1)
        assert len(context.instances_of(camp_catalog["Archery"])) == 1
        assert context.instance_in(camp_catalog["Archery"], 1) is not None
        assert context.instance_in(camp_catalog["Archery"], 2) is None

    def test_total_periods_skips_eliminated(self, camp_catalog):
        context = TrialContext(camp_catalog, [], shuffle=False)
        context.period_counts = {"Archery": 2, "Crafts": 3}
        context.eliminated = {"Crafts"}
        assert context.total_periods_needed == 2

    def test_single_period_count_uses_period_counts(self, camp_catalog):
        context = TrialContext(camp_catalog, [], shuffle=False)
        context.period_counts = {"Swimming": 2, "Archery": 1, "Drama": 2, "Crafts": 1}
        context.init_boards()
        for period in (1, 2):
            context.place(camp_catalog["Swimming"], period)
        context.place(camp_catalog["Archery"], 1)
        for period in (2, 3):
            context.place(camp_catalog["Drama"], period)

        assert {p: context.single_period_count(p) for p in (1, 2, 3)} == {1: 1, 2: 0, 3: 0}


class TestSchedule:
    """Tests for the frozen Schedule."""

    def test_capture_enrollments(self, trio_schedule):
        ann = trio_schedule.camper("Ann")
        assert ann.num_enrolled == 3
        assert ann.class_in(1) == "Swimming"
        assert ann.class_in(2) == "Art"
        assert ann.class_in(3) == "Music"
        assert ann.final_choices == ("Art", "Music", "Swimming")
        assert trio_schedule.camper("Nobody") is None

    def test_score_attached(self, trio_schedule):
        # Swimming (3) + Art rank 1 + Music rank 2
        assert trio_schedule.score == 6
        assert trio_schedule.trial_index == 0

    def test_views(self, trio_schedule):
        board = trio_schedule.period_view(2)
        assert [i.title for i in board.instances] == ["Art"]
        assert board.instances[0].roster == ("Ann",)
        assert [i.period for i in trio_schedule.instances_of("Music")] == [3]
        assert trio_schedule.placed_titles == ["Swimming", "Art", "Music"]
        with pytest.raises(KeyError):
            trio_schedule.period_view(4)

    def test_worst_choice_ignores_required(self, trio_schedule):
        assert trio_schedule.worst_choice() == ("Ann", "Music", 2)

    def test_no_overrides(self, trio_schedule):
        assert trio_schedule.override_enrollments() == []

    def test_camper_rows_sorted_by_age_then_name(self, camp_catalog, camp_roster):
        driver = TrialDriver(camp_catalog, camp_roster, SearchConfig(max_attempts=1))
        schedule = driver.run_trial(0, base_seed=1)
        rows = schedule.camper_rows()
        assert [r["name"] for r in rows[:2]] == ["Camper 00", "Camper 06"]
        assert [r["age"] for r in rows] == sorted(r["age"] for r in rows)
        assert set(rows[0]) == {"name", "age", "swim_level", "period_1", "period_2", "period_3"}

    def test_frozen(self, trio_schedule):
        with pytest.raises(AttributeError):
            trio_schedule.score = 0

    def test_to_dict(self, trio_schedule):
        data = trio_schedule.to_dict()
        assert data["score"] == 6
        assert data["eliminated_classes"] == []
        assert data["period_counts"] == {"Swimming": 1, "Art": 1, "Music": 1}
        assert data["worst_choice"] == {"camper": "Ann", "class": "Music", "rank": 2}
        assert len(data["periods"]) == 3
        assert data["campers"][0]["enrollments"][0]["title"] == "Swimming"

    def test_with_score_copies(self, trio_schedule):
        rescored = trio_schedule.with_score(100)
        assert rescored.score == 100
        assert trio_schedule.score == 6
        assert isinstance(rescored, Schedule)

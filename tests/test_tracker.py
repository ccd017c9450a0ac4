# tests/test_tracker.py

import logging

import pytest

from skill_system.errors import UnknownSkillError
from skill_system.models import ProgressRecord, Requirement, SkillCatalog
from skill_system.store import ProgressStore
from skill_system.tracker import ProgressTracker, clamp, percent_complete


@pytest.fixture
def tracker(chain_catalog, clock):
    return ProgressTracker(chain_catalog, ProgressStore(), clock=clock)


def test_update_meeting_requirement_completes_skill(tracker):
    record = tracker.apply_update("a", sets=3, reps=10)

    assert record.completed is True
    assert record.current_sets == 3
    assert record.current_reps == 10
    assert record.last_updated == tracker.clock()
    assert tracker.store.get("a") is record


def test_first_update_creates_record_with_missing_value_zero(tracker):
    record = tracker.apply_update("a", sets=2)
    assert (record.current_sets, record.current_reps) == (2, 0)
    assert record.completed is False


def test_missing_value_keeps_current_count(tracker):
    tracker.apply_update("a", sets=2, reps=7)
    record = tracker.apply_update("a", reps=10)
    assert (record.current_sets, record.current_reps) == (2, 10)


def test_out_of_range_values_are_clamped(make_skill, clock):
    catalog = SkillCatalog([make_skill("big", sets=10, reps=10)])
    tracker = ProgressTracker(catalog, ProgressStore(), clock=clock)

    record = tracker.apply_update("big", sets=999, reps=-4)

    assert record.current_sets == 10
    assert record.current_reps == 0
    assert record.completed is False


def test_lowering_counts_uncompletes_record(tracker):
    tracker.apply_update("a", sets=3, reps=10)
    record = tracker.apply_update("a", sets=2)
    assert record.completed is False


def test_unknown_skill_is_rejected_before_writing(tracker):
    with pytest.raises(UnknownSkillError):
        tracker.apply_update("ghost", sets=1)
    assert len(tracker.store) == 0


@pytest.mark.parametrize("value", [1.5, "3", True])
def test_non_integer_counts_are_rejected(tracker, value):
    with pytest.raises(TypeError):
        tracker.apply_update("a", sets=value)
    assert "a" not in tracker.store


def test_increment_and_decrement_clamp_at_bounds(tracker):
    tracker.decrement_sets("a")
    assert tracker.store.get("a").current_sets == 0

    for _ in range(5):
        tracker.increment_sets("a")
    assert tracker.store.get("a").current_sets == 3

    tracker.increment_reps("a")
    tracker.increment_reps("a")
    tracker.decrement_reps("a")
    assert tracker.store.get("a").current_reps == 1


def test_completion_is_logged_once(tracker, caplog):
    with caplog.at_level(logging.INFO, logger="skill_system.tracker"):
        tracker.apply_update("a", sets=3, reps=10)
        tracker.apply_update("a", sets=3, reps=10)
    assert [r.getMessage() for r in caplog.records].count("Skill 'a' completed") == 1


def test_reconcile_follows_changed_requirements(make_skill, clock):
    store = ProgressStore(
        [
            ProgressRecord("a", current_sets=3, current_reps=10, completed=True),
            ProgressRecord("gone", current_sets=1, current_reps=1, completed=True),
        ]
    )
    harder = SkillCatalog([make_skill("a", sets=4, reps=10)])

    flipped = ProgressTracker(harder, store, clock=clock).reconcile()

    assert flipped == ["a"]
    assert store.get("a").completed is False
    assert store.get("gone").completed is True


def test_clamp():
    assert clamp(-1, 5) == 0
    assert clamp(3, 5) == 3
    assert clamp(7, 5) == 5


@pytest.mark.parametrize(
    "sets,reps,expected",
    [
        (0, 0, 0),
        (3, 10, 100),
        (1, 5, 42),  # (1/3 + 1/2) * 50 = 41.67
        (2, 0, 33),
        (3, 5, 75),
    ],
)
def test_percent_complete(sets, reps, expected):
    record = ProgressRecord("a", current_sets=sets, current_reps=reps)
    assert percent_complete(Requirement(sets=3, reps=10), record) == expected


def test_percent_complete_without_record_is_zero():
    assert percent_complete(Requirement(sets=3, reps=10), None) == 0

# tests/test_skill_graph.py

import pytest

from skill_graph import DEFAULT_SKILLS, build_default_catalog, parse_requirement_text
from skill_system.models import Category, Status
from skill_system.resolver import resolve_statuses
from skill_system.store import ProgressStore


def test_default_catalog_is_a_valid_dag():
    catalog = build_default_catalog().validate()
    assert len(catalog) == len(DEFAULT_SKILLS)
    assert {skill.category for skill in catalog} == set(Category)


def test_default_prerequisites_all_exist():
    catalog = build_default_catalog()
    for skill in catalog:
        for prereq in skill.prerequisites:
            assert prereq in catalog


def test_default_learning_path():
    path = build_default_catalog().get_learning_path("push-decline-pushup")
    assert path == [
        "push-wall-pushup",
        "push-incline-pushup",
        "push-knee-pushup",
        "push-full-pushup",
        "push-decline-pushup",
    ]


def test_fresh_user_sees_every_level_one_skill_unlocked():
    catalog = build_default_catalog()
    statuses = resolve_statuses(catalog, ProgressStore())
    for skill in catalog:
        expected = Status.UNLOCKED if not skill.prerequisites else Status.LOCKED
        assert statuses[skill.id] is expected


@pytest.mark.parametrize(
    "text,sets,reps",
    [
        ("3 sets of 10 reps", 3, 10),
        ("Complete 4 sets of 8 reps", 4, 8),
        ("1 set of 1 rep", 1, 1),
        ("5 SETS OF 20 REPS", 5, 20),
        ("hold for 30 seconds", 3, 10),
        ("", 3, 10),
        (None, 3, 10),
    ],
)
def test_parse_requirement_text(text, sets, reps):
    requirement = parse_requirement_text(text)
    assert (requirement.sets, requirement.reps) == (sets, reps)

import pytest
from pydantic import ValidationError

from api.schemas import (
    CatalogReplace,
    ExperienceResponse,
    ProgressUpdate,
    SkillCreate,
    SkillWithStatus,
    SkillsResponse,
)
from skill_system.models import Category, ProgressRecord, Requirement, Status
from skill_system.resolver import ResolvedSkill


def test_skill_create_parses_free_text_requirement():
    """
    Tests that an admin-submitted requirement such as "4 sets of 12 reps" is
    turned into structured set and rep counts.
    """
    # 1. Arrange
    payload = {
        "id": "push-archer",
        "title": "Archer Push-Up",
        "category": "push",
        "level": 7,
        "requirements": "4 sets of 12 reps",
        "prerequisites": ["push-full-pushup"],
    }

    # 2. Act
    skill = SkillCreate.model_validate(payload).to_skill()

    # 3. Assert
    assert skill.category is Category.PUSH
    assert skill.requirement == Requirement(sets=4, reps=12, description="4 sets of 12 reps")
    assert skill.prerequisites == ("push-full-pushup",)


def test_skill_create_falls_back_to_default_requirement():
    skill = SkillCreate.model_validate(
        {"id": "x", "category": "Core", "level": 1, "requirement": "hold it"}
    ).to_skill()
    assert (skill.requirement.sets, skill.requirement.reps) == (3, 10)
    assert skill.title == "x"


def test_skill_create_accepts_structured_requirement():
    skill = SkillCreate.model_validate(
        {"id": "x", "category": "Legs", "level": 2, "requirement": {"sets": 5, "reps": 5}}
    ).to_skill()
    assert skill.requirement == Requirement(sets=5, reps=5)


@pytest.mark.parametrize(
    "changes",
    [
        {"category": "Arms"},
        {"level": 0},
        {"requirement": {"sets": 0, "reps": 5}},
        {"id": ""},
    ],
)
def test_skill_create_rejects_invalid_fields(changes):
    payload = {"id": "x", "category": "Push", "level": 1, "requirement": {"sets": 3, "reps": 10}}
    payload.update(changes)
    with pytest.raises(ValidationError):
        SkillCreate.model_validate(payload)


def test_catalog_replace_holds_skill_list():
    body = CatalogReplace.model_validate(
        {"skills": [{"id": "a", "category": "Push", "level": 1, "requirement": "3 sets of 8 reps"}]}
    )
    assert [s.to_skill().id for s in body.skills] == ["a"]


def test_progress_update_needs_sets_or_reps():
    assert ProgressUpdate(reps=4).sets is None
    with pytest.raises(ValidationError, match="Sets or reps are required"):
        ProgressUpdate()


def test_skill_with_status_serializes_camel_case(make_skill):
    resolved = ResolvedSkill(
        skill=make_skill("a", prerequisites=["root"]),
        status=Status.IN_PROGRESS,
        progress=ProgressRecord("a", current_sets=2, current_reps=5),
        percent_complete=58,
    )
    dumped = SkillWithStatus.from_resolved(resolved).model_dump(by_alias=True, mode="json")

    assert dumped["status"] == "in-progress"
    assert dumped["currentSets"] == 2
    assert dumped["currentReps"] == 5
    assert dumped["percentComplete"] == 58
    assert dumped["prerequisites"] == ["root"]
    assert dumped["requirement"] == {"sets": 3, "reps": 10, "description": ""}


def test_skill_without_progress_reports_zero_counters(make_skill):
    item = SkillWithStatus.from_resolved(ResolvedSkill(skill=make_skill("a"), status=Status.UNLOCKED))
    assert (item.current_sets, item.current_reps, item.completed) == (0, 0, False)


def test_status_counts_and_experience_aliases():
    counts = SkillsResponse(skills=[], status_counts={s: 0 for s in Status})
    assert counts.model_dump(by_alias=True, mode="json")["statusCounts"] == {
        "locked": 0, "unlocked": 0, "in-progress": 0, "completed": 0
    }

    xp = ExperienceResponse(
        total_xp=600, level=2, xp_to_next_level=400, level_progress_percent=20.0, completed_count=3
    )
    assert xp.model_dump(by_alias=True) == {
        "totalXP": 600,
        "level": 2,
        "xpToNextLevel": 400,
        "levelProgressPercent": 20.0,
        "completedCount": 3,
    }

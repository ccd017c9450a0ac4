"""
Experience and user level, derived from completed skills.

Everything here is a full recompute over the resolved skill list; nothing is
accumulated between calls.
"""

from dataclasses import dataclass
from typing import Iterable

from .models import Skill, Status
from .resolver import ResolvedSkill

XP_PER_LEVEL_TIER = 100
XP_PER_USER_LEVEL = 500


@dataclass(frozen=True)
class ExperienceSummary:
    total_xp: int
    level: int
    xp_to_next_level: int
    level_progress_percent: float
    completed_count: int

    def to_dict(self) -> dict:
        return {
            "totalXP": self.total_xp,
            "level": self.level,
            "xpToNextLevel": self.xp_to_next_level,
            "levelProgressPercent": self.level_progress_percent,
            "completedCount": self.completed_count,
        }


def skill_xp(skill: Skill) -> int:
    """XP granted for completing a skill; scales with the skill's difficulty tier."""
    return skill.level * XP_PER_LEVEL_TIER


def total_xp(resolved: Iterable[ResolvedSkill]) -> int:
    return sum(skill_xp(item.skill) for item in resolved if item.status is Status.COMPLETED)


def user_level(xp: int) -> int:
    return 1 + xp // XP_PER_USER_LEVEL


def xp_to_next_level(xp: int) -> int:
    return user_level(xp) * XP_PER_USER_LEVEL - xp


def level_progress_percent(xp: int) -> float:
    """Share of the current level band already earned, 0-100."""
    earned = xp - (user_level(xp) - 1) * XP_PER_USER_LEVEL
    return earned / XP_PER_USER_LEVEL * 100


def experience_summary(resolved: Iterable[ResolvedSkill]) -> ExperienceSummary:
    resolved = list(resolved)
    xp = total_xp(resolved)
    return ExperienceSummary(
        total_xp=xp,
        level=user_level(xp),
        xp_to_next_level=xp_to_next_level(xp),
        level_progress_percent=level_progress_percent(xp),
        completed_count=sum(1 for item in resolved if item.status is Status.COMPLETED),
    )

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from .errors import CycleDetected, UnknownSkillError


class Category(str, Enum):
    """The fixed set of movement families a skill belongs to."""

    PUSH = "Push"
    PULL = "Pull"
    LEGS = "Legs"
    CORE = "Core"

    @classmethod
    def parse(cls, value) -> "Category":
        if isinstance(value, cls):
            return value
        for category in cls:
            if category.value.lower() == str(value).strip().lower():
                return category
        raise ValueError(f"Unknown skill category '{value}'")


# Display colour per category, used by the tree layout.
CATEGORY_COLORS = {
    Category.PUSH: "#f44336",
    Category.PULL: "#2196f3",
    Category.LEGS: "#4caf50",
    Category.CORE: "#ff9800",
}


class Status(str, Enum):
    """Derived lifecycle stage of a skill. Declaration order is progression order."""

    LOCKED = "locked"
    UNLOCKED = "unlocked"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"

    @property
    def rank(self) -> int:
        return _STATUS_ORDER.index(self)

    def __lt__(self, other):
        if not isinstance(other, Status):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, Status):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, Status):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, Status):
            return NotImplemented
        return self.rank >= other.rank


_STATUS_ORDER = list(Status)


@dataclass(frozen=True)
class Requirement:
    """How many sets of how many reps complete a skill."""

    sets: int
    reps: int
    description: str = ""

    def __post_init__(self):
        for name in ("sets", "reps"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise ValueError(f"Requirement {name} must be a positive integer, got {value!r}")

    def is_met(self, sets: int, reps: int) -> bool:
        return sets >= self.sets and reps >= self.reps


@dataclass(frozen=True)
class Skill:
    """Represents a single exercise node in the skill tree."""

    id: str
    title: str
    category: Category
    level: int
    requirement: Requirement
    # What skills are needed BEFORE this one? Kept in declaration order.
    prerequisites: Tuple[str, ...] = ()
    description: str = ""

    def __post_init__(self):
        if not self.id:
            raise ValueError("Skill id must be a non-empty string")
        if isinstance(self.level, bool) or not isinstance(self.level, int) or self.level < 1:
            raise ValueError(f"Skill '{self.id}' level must be a positive integer")
        object.__setattr__(self, "category", Category.parse(self.category))
        # Drop duplicates and self-references while keeping the given order.
        prerequisites = tuple(
            dict.fromkeys(p for p in self.prerequisites if p != self.id)
        )
        object.__setattr__(self, "prerequisites", prerequisites)

    def __repr__(self):
        return f"Skill(id='{self.id}', category='{self.category.value}', level={self.level})"


@dataclass
class ProgressRecord:
    """Per-skill set/rep counters. `completed` is always derived from the counters."""

    skill_id: str
    current_sets: int = 0
    current_reps: int = 0
    completed: bool = False
    last_updated: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def has_activity(self) -> bool:
        return self.current_sets > 0 or self.current_reps > 0

    def copy(self) -> "ProgressRecord":
        return ProgressRecord(
            skill_id=self.skill_id,
            current_sets=self.current_sets,
            current_reps=self.current_reps,
            completed=self.completed,
            last_updated=self.last_updated,
        )


class SkillCatalog:
    """
    Immutable, ordered collection of skills and their prerequisite edges.

    The prerequisite relation restricted to known ids must be a DAG. Prerequisite
    ids that are not in the catalog are kept on the skill but treated as
    permanently unsatisfied.
    """

    def __init__(self, skills: Iterable[Skill] = ()):
        self._skills: Dict[str, Skill] = {}
        for skill in skills:
            if skill.id in self._skills:
                raise ValueError(f"Duplicate skill id '{skill.id}' in catalog")
            self._skills[skill.id] = skill

        # What skills does each one UNLOCK? (inverse of prerequisites)
        self._unlocks: Dict[str, List[str]] = {skill_id: [] for skill_id in self._skills}
        for skill in self._skills.values():
            for prereq in skill.prerequisites:
                if prereq in self._unlocks:
                    self._unlocks[prereq].append(skill.id)

        self._topological_order: Optional[List[str]] = None

    @classmethod
    def from_dicts(cls, items: Iterable[dict]) -> "SkillCatalog":
        """Builds a catalog from the external `Skill` shape (plain dictionaries)."""
        skills = []
        for item in items:
            requirement = item.get("requirement") or item.get("requirements") or {}
            skills.append(
                Skill(
                    id=item["id"],
                    title=item.get("title") or item["id"],
                    category=item["category"],
                    level=item["level"],
                    requirement=Requirement(
                        sets=requirement["sets"],
                        reps=requirement["reps"],
                        description=requirement.get("description") or "",
                    ),
                    prerequisites=tuple(item.get("prerequisites") or ()),
                    description=item.get("description") or "",
                )
            )
        return cls(skills)

    def to_dicts(self) -> List[dict]:
        return [
            {
                "id": skill.id,
                "title": skill.title,
                "description": skill.description,
                "category": skill.category.value,
                "level": skill.level,
                "requirement": {
                    "sets": skill.requirement.sets,
                    "reps": skill.requirement.reps,
                    "description": skill.requirement.description,
                },
                "prerequisites": list(skill.prerequisites),
            }
            for skill in self._skills.values()
        ]

    def __iter__(self) -> Iterator[Skill]:
        return iter(self._skills.values())

    def __len__(self):
        return len(self._skills)

    def __contains__(self, skill_id):
        return skill_id in self._skills

    def __repr__(self):
        return f"SkillCatalog({len(self._skills)} skills)"

    @property
    def ids(self) -> List[str]:
        return list(self._skills)

    def get(self, skill_id: str) -> Optional[Skill]:
        return self._skills.get(skill_id)

    def require(self, skill_id: str) -> Skill:
        skill = self._skills.get(skill_id)
        if skill is None:
            raise UnknownSkillError(skill_id)
        return skill

    def unlocks(self, skill_id: str) -> List[str]:
        """Direct dependents of a skill, in catalog order."""
        self.require(skill_id)
        return list(self._unlocks[skill_id])

    def get_prerequisites(self, skill_id: str) -> List[str]:
        """All direct and indirect prerequisites of a skill, nearest first."""
        self.require(skill_id)
        return self._bfs(skill_id, lambda node: self._skills[node].prerequisites if node in self._skills else ())

    def get_skills_unlocked_by(self, skill_id: str) -> List[str]:
        """All skills that a given skill is a direct or indirect prerequisite for."""
        self.require(skill_id)
        return self._bfs(skill_id, lambda node: self._unlocks.get(node, ()))

    def get_learning_path(self, skill_id: str) -> List[str]:
        """
        The known prerequisites of a skill followed by the skill itself, ordered so
        that every skill comes after everything it depends on.
        """
        wanted = set(self.get_prerequisites(skill_id))
        wanted.add(skill_id)
        return [node for node in self.topological_order() if node in wanted]

    @staticmethod
    def _bfs(start, neighbours) -> List[str]:
        visited = {start}
        q = deque([start])
        res = []
        while q:
            curr = q.popleft()
            for nxt in neighbours(curr):
                if nxt not in visited:
                    visited.add(nxt)
                    res.append(nxt)
                    q.append(nxt)
        return res

    def topological_order(self) -> List[str]:
        """
        Known skill ids with every prerequisite before its dependents. Computed
        once per catalog. Raises CycleDetected if the prerequisites loop.
        """
        if self._topological_order is not None:
            return list(self._topological_order)

        pending = {
            skill.id: sum(1 for p in skill.prerequisites if p in self._skills)
            for skill in self._skills.values()
        }
        q = deque(skill_id for skill_id, count in pending.items() if count == 0)
        order = []
        while q:
            curr = q.popleft()
            order.append(curr)
            for dependent in self._unlocks[curr]:
                pending[dependent] -= 1
                if pending[dependent] == 0:
                    q.append(dependent)

        if len(order) < len(self._skills):
            raise CycleDetected(self._cycle_members(set(self._skills) - set(order)))

        self._topological_order = order
        return list(order)

    def _cycle_members(self, unordered: set) -> set:
        # Peel off skills that merely sit downstream of a cycle.
        remaining = set(unordered)
        changed = True
        while changed:
            changed = False
            for skill_id in list(remaining):
                if not any(dep in remaining for dep in self._unlocks[skill_id]):
                    remaining.discard(skill_id)
                    changed = True
        return remaining or unordered

    def validate(self) -> "SkillCatalog":
        self.topological_order()
        return self

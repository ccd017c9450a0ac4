# api/schemas.py

from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator

from skill_graph import parse_requirement_text
from skill_system.models import Category, Requirement, Skill, Status
from skill_system.persistence import ProgressRecordPayload
from skill_system.resolver import ResolvedSkill


# --- Users ---

class UserBase(BaseModel):
    email: str


class UserCreate(UserBase):
    password: str = Field(min_length=8)


class User(UserBase):
    id: int
    is_active: bool = True
    is_admin: bool = False


class Token(BaseModel):
    access_token: str
    token_type: str


# --- Catalog ---

class RequirementSchema(BaseModel):
    sets: int = Field(ge=1)
    reps: int = Field(ge=1)
    description: str = ""


class SkillCreate(BaseModel):
    """A skill as submitted by an admin catalog edit."""

    id: str = Field(min_length=1)
    title: Optional[str] = None
    description: str = ""
    category: Category
    level: int = Field(ge=1)
    # Admin screens may send free text such as "3 sets of 10 reps".
    requirement: Union[RequirementSchema, str]
    prerequisites: List[str] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def accept_requirements_key(cls, values):
        # Stored catalogs spell the field "requirements".
        if isinstance(values, dict) and "requirement" not in values and "requirements" in values:
            values = dict(values)
            values["requirement"] = values.pop("requirements")
        return values

    @field_validator("category", mode="before")
    @classmethod
    def parse_category(cls, value):
        return Category.parse(value)

    @field_validator("requirement")
    @classmethod
    def parse_requirement(cls, value):
        if isinstance(value, str):
            requirement = parse_requirement_text(value)
            return RequirementSchema(
                sets=requirement.sets, reps=requirement.reps, description=requirement.description
            )
        return value

    def to_skill(self) -> Skill:
        return Skill(
            id=self.id,
            title=self.title or self.id,
            description=self.description,
            category=self.category,
            level=self.level,
            requirement=Requirement(
                sets=self.requirement.sets,
                reps=self.requirement.reps,
                description=self.requirement.description,
            ),
            prerequisites=tuple(self.prerequisites),
        )


class CatalogReplace(BaseModel):
    skills: List[SkillCreate]


class SkillWithStatus(BaseModel):
    """A catalog skill merged with the current user's derived status and progress."""

    id: str
    title: str
    description: str
    category: Category
    level: int
    requirement: RequirementSchema
    prerequisites: List[str]
    status: Status
    current_sets: int = Field(0, serialization_alias="currentSets")
    current_reps: int = Field(0, serialization_alias="currentReps")
    completed: bool = False
    percent_complete: int = Field(0, serialization_alias="percentComplete")

    @classmethod
    def from_resolved(cls, item: ResolvedSkill) -> "SkillWithStatus":
        skill = item.skill
        progress = item.progress
        return cls(
            id=skill.id,
            title=skill.title,
            description=skill.description,
            category=skill.category,
            level=skill.level,
            requirement=RequirementSchema(
                sets=skill.requirement.sets,
                reps=skill.requirement.reps,
                description=skill.requirement.description,
            ),
            prerequisites=list(skill.prerequisites),
            status=item.status,
            current_sets=progress.current_sets if progress else 0,
            current_reps=progress.current_reps if progress else 0,
            completed=progress.completed if progress else False,
            percent_complete=item.percent_complete,
        )


class SkillsResponse(BaseModel):
    skills: List[SkillWithStatus]
    status_counts: Dict[Status, int] = Field(serialization_alias="statusCounts")


# --- Progress ---

class ProgressUpdate(BaseModel):
    sets: Optional[int] = None
    reps: Optional[int] = None

    @model_validator(mode="after")
    def require_sets_or_reps(self):
        if self.sets is None and self.reps is None:
            raise ValueError("Sets or reps are required")
        return self


class ProgressResponse(BaseModel):
    progress: ProgressRecordPayload
    status: Status


class ImportResult(BaseModel):
    imported: int


# --- Experience ---

class ExperienceResponse(BaseModel):
    total_xp: int = Field(serialization_alias="totalXP")
    level: int
    xp_to_next_level: int = Field(serialization_alias="xpToNextLevel")
    level_progress_percent: float = Field(serialization_alias="levelProgressPercent")
    completed_count: int = Field(serialization_alias="completedCount")

"""
Serialized form of a ProgressStore and the adapters that load and save it.

The wire shape is a mapping of skill id to
`{skillId, currentSets, currentReps, lastUpdated, completed}` with an ISO-8601
`lastUpdated`. Imports are validated in full before the store is touched.
"""

import json
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional, Union

from pydantic import BaseModel, Field, ValidationError, field_validator

from .errors import MalformedProgressImport
from .models import ProgressRecord, SkillCatalog
from .store import ProgressStore
from .tracker import clamp

logger = logging.getLogger(__name__)


class ProgressRecordPayload(BaseModel):
    """One entry of an exported progress mapping."""

    skill_id: str = Field(alias="skillId", min_length=1)
    current_sets: int = Field(alias="currentSets", ge=0)
    current_reps: int = Field(alias="currentReps", ge=0)
    last_updated: datetime = Field(alias="lastUpdated")
    completed: bool

    @field_validator("skill_id", mode="before")
    @classmethod
    def require_string_id(cls, value):
        if not isinstance(value, str):
            raise ValueError("skillId must be a string")
        return value

    @field_validator("current_sets", "current_reps", mode="before")
    @classmethod
    def require_whole_count(cls, value):
        # bool is an int subclass; a flag is not a count.
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError("counters must be integers")
        return value

    @field_validator("completed", mode="before")
    @classmethod
    def require_flag(cls, value):
        if not isinstance(value, bool):
            raise ValueError("completed must be true or false")
        return value

    @field_validator("last_updated", mode="before")
    @classmethod
    def require_iso_timestamp(cls, value):
        if not isinstance(value, (str, datetime)):
            raise ValueError("lastUpdated must be an ISO-8601 string")
        return value

    @field_validator("last_updated")
    @classmethod
    def assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    def to_record(self) -> ProgressRecord:
        return ProgressRecord(
            skill_id=self.skill_id,
            current_sets=self.current_sets,
            current_reps=self.current_reps,
            completed=self.completed,
            last_updated=self.last_updated,
        )

    @classmethod
    def from_record(cls, record: ProgressRecord) -> "ProgressRecordPayload":
        return cls(
            skillId=record.skill_id,
            currentSets=record.current_sets,
            currentReps=record.current_reps,
            lastUpdated=record.last_updated,
            completed=record.completed,
        )


def record_to_dict(record: ProgressRecord) -> dict:
    return {
        "skillId": record.skill_id,
        "currentSets": record.current_sets,
        "currentReps": record.current_reps,
        "lastUpdated": record.last_updated.isoformat(),
        "completed": record.completed,
    }


def parse_progress_payload(data: Union[str, bytes, dict]) -> Dict[str, ProgressRecord]:
    """
    Validates an exported progress mapping (decoded or as JSON text) and returns
    the records it holds. Raises MalformedProgressImport listing every problem.
    """
    if isinstance(data, (str, bytes)):
        try:
            data = json.loads(data)
        except json.JSONDecodeError as e:
            raise MalformedProgressImport(f"Progress data is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise MalformedProgressImport(
            f"Progress data must be a mapping of skill id to record, got {type(data).__name__}"
        )

    records = {}
    errors = []
    for key, entry in data.items():
        try:
            payload = ProgressRecordPayload.model_validate(entry)
        except ValidationError as e:
            for error in e.errors():
                location = ".".join(str(part) for part in error["loc"])
                errors.append(f"{key}: {location or 'record'}: {error['msg']}")
            continue
        if payload.skill_id != key:
            errors.append(f"{key}: skillId '{payload.skill_id}' does not match its key")
            continue
        records[key] = payload.to_record()

    if errors:
        raise MalformedProgressImport(
            f"Invalid progress data structure ({len(errors)} problem(s))", errors
        )
    return records


def import_progress(store: ProgressStore, data, catalog: Optional[SkillCatalog] = None) -> int:
    """
    Replaces the contents of `store` with imported progress, all or nothing.

    With a catalog, counters of known skills are clamped to their requirement and
    `completed` is recomputed from them. Records for skills the catalog does not
    know are kept as they are. Returns the number of imported records.
    """
    try:
        records = parse_progress_payload(data)
    except MalformedProgressImport as e:
        logger.warning("Rejected progress import: %s %s", e, e.errors)
        raise

    if catalog is not None:
        for record in records.values():
            skill = catalog.get(record.skill_id)
            if skill is None:
                continue
            record.current_sets = clamp(record.current_sets, skill.requirement.sets)
            record.current_reps = clamp(record.current_reps, skill.requirement.reps)
            record.completed = skill.requirement.is_met(record.current_sets, record.current_reps)

    store.replace_all(records.values())
    logger.info("Imported progress for %d skills", len(records))
    return len(records)


def export_progress(store: ProgressStore) -> Dict[str, dict]:
    return {skill_id: record_to_dict(record) for skill_id, record in store.items()}


def dump_progress(store: ProgressStore) -> str:
    return json.dumps(export_progress(store), indent=2)


class LocalProgressCache:
    """
    Keeps a JSON copy of one user's progress on disk.

    This is a cache or one-time import source; it is never consulted by the
    derivation code directly.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self, store: ProgressStore, catalog: Optional[SkillCatalog] = None) -> int:
        if not self.exists():
            logger.debug("No cached progress at %s", self.path)
            return 0
        text = self.path.read_text(encoding="utf-8")
        return import_progress(store, text, catalog)

    def save(self, store: ProgressStore):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".progress-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(dump_progress(store))
            os.replace(tmp_name, self.path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
        logger.debug("Saved %d progress records to %s", len(store), self.path)

    def clear(self):
        if self.exists():
            self.path.unlink()

import logging
import math
from datetime import datetime, timezone
from typing import Callable, List, Optional

from .models import ProgressRecord, Requirement, SkillCatalog
from .store import ProgressStore

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def clamp(value: int, upper: int) -> int:
    return max(0, min(value, upper))


def percent_complete(requirement: Requirement, record: Optional[ProgressRecord]) -> int:
    """
    Unweighted average of set and rep completion as a 0-100 integer.

    This can miss 100 at the completion boundary for uneven requirements; use
    `record.completed` to decide completion.
    """
    if record is None:
        return 0
    ratio = record.current_sets / requirement.sets + record.current_reps / requirement.reps
    # Round half up, the way a progress bar would.
    return int(math.floor(ratio * 50 + 0.5))


def _check_count(name: str, value):
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an integer, got {type(value).__name__}")


class ProgressTracker:
    """
    Applies progress updates to a ProgressStore.

    The tracker only mutates; it never resolves statuses. Callers re-run the
    resolver after each update.
    """

    def __init__(
        self,
        catalog: SkillCatalog,
        store: ProgressStore,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.catalog = catalog
        self.store = store
        self.clock = clock or _utc_now

    def apply_update(self, skill_id: str, sets: Optional[int] = None, reps: Optional[int] = None) -> ProgressRecord:
        """
        Sets the absolute set and/or rep count for a skill and returns the record.

        Values outside [0, requirement] are clamped, not rejected. A missing value
        keeps the current count. Raises UnknownSkillError for ids absent from the
        catalog, before anything is written.
        """
        skill = self.catalog.require(skill_id)
        _check_count("sets", sets)
        _check_count("reps", reps)

        existing = self.store.get(skill_id)
        current_sets = existing.current_sets if existing else 0
        current_reps = existing.current_reps if existing else 0

        new_sets = clamp(current_sets if sets is None else sets, skill.requirement.sets)
        new_reps = clamp(current_reps if reps is None else reps, skill.requirement.reps)
        if sets is not None and new_sets != sets:
            logger.debug("Clamped sets for '%s' from %d to %d", skill_id, sets, new_sets)
        if reps is not None and new_reps != reps:
            logger.debug("Clamped reps for '%s' from %d to %d", skill_id, reps, new_reps)

        record = ProgressRecord(
            skill_id=skill_id,
            current_sets=new_sets,
            current_reps=new_reps,
            completed=skill.requirement.is_met(new_sets, new_reps),
            last_updated=self.clock(),
        )
        self.store.put(record)

        if record.completed and not (existing and existing.completed):
            logger.info("Skill '%s' completed", skill_id)
        return record

    def reconcile(self) -> List[str]:
        """
        Re-derives every stored record against the catalog's current requirements:
        counters are clamped and `completed` recomputed. Records for skills outside
        the catalog are left alone. Returns the ids whose completion flipped.
        """
        flipped = []
        for skill_id, record in self.store.items():
            skill = self.catalog.get(skill_id)
            if skill is None:
                continue
            record.current_sets = clamp(record.current_sets, skill.requirement.sets)
            record.current_reps = clamp(record.current_reps, skill.requirement.reps)
            completed = skill.requirement.is_met(record.current_sets, record.current_reps)
            if completed != record.completed:
                record.completed = completed
                flipped.append(skill_id)
        if flipped:
            logger.info("Completion re-derived for %s", ", ".join(flipped))
        return flipped

    def _adjust(self, skill_id: str, sets_delta: int = 0, reps_delta: int = 0) -> ProgressRecord:
        self.catalog.require(skill_id)
        existing = self.store.get(skill_id)
        sets = existing.current_sets if existing else 0
        reps = existing.current_reps if existing else 0
        return self.apply_update(skill_id, sets=sets + sets_delta, reps=reps + reps_delta)

    def increment_sets(self, skill_id: str) -> ProgressRecord:
        return self._adjust(skill_id, sets_delta=1)

    def decrement_sets(self, skill_id: str) -> ProgressRecord:
        return self._adjust(skill_id, sets_delta=-1)

    def increment_reps(self, skill_id: str) -> ProgressRecord:
        return self._adjust(skill_id, reps_delta=1)

    def decrement_reps(self, skill_id: str) -> ProgressRecord:
        return self._adjust(skill_id, reps_delta=-1)

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Dict, List, Optional

from .errors import CycleDetected
from .models import ProgressRecord, Skill, SkillCatalog, Status
from .store import ProgressStore
from .tracker import percent_complete

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedSkill:
    """A catalog skill annotated with its derived status and progress."""

    skill: Skill
    status: Status
    progress: Optional[ProgressRecord] = None
    percent_complete: int = 0

    @property
    def id(self) -> str:
        return self.skill.id


def _seed_status(record: Optional[ProgressRecord]) -> Status:
    if record is None:
        return Status.LOCKED
    if record.completed:
        return Status.COMPLETED
    if record.has_activity:
        return Status.IN_PROGRESS
    return Status.LOCKED


def resolve_statuses(catalog: SkillCatalog, store: ProgressStore) -> Dict[str, Status]:
    """
    Derives the status of every skill in the catalog from the stored progress.

    Completed and in-progress come straight from the records; a completed record
    wins even if its prerequisites are no longer satisfied. Every other skill
    starts locked and is unlocked once all of its prerequisites resolve to
    completed, repeating until a full scan changes nothing.
    """
    # Raises CycleDetected for a cyclic catalog before any work is done.
    order = catalog.topological_order()

    statuses = {skill_id: _seed_status(store.get(skill_id)) for skill_id in order}

    changing_passes = 0
    while True:
        changed = False
        for skill_id in order:
            if statuses[skill_id] is not Status.LOCKED:
                continue
            prerequisites = catalog.get(skill_id).prerequisites
            if all(statuses.get(p) is Status.COMPLETED for p in prerequisites):
                statuses[skill_id] = Status.UNLOCKED
                changed = True
        if not changed:
            break
        changing_passes += 1
        if changing_passes > len(order):
            raise CycleDetected(
                [skill_id for skill_id, status in statuses.items() if status is Status.LOCKED]
            )

    logger.debug("Resolved %d skills in %d passes", len(statuses), changing_passes + 1)
    # Report in catalog order.
    return {skill.id: statuses[skill.id] for skill in catalog}


def annotate_skills(catalog: SkillCatalog, store: ProgressStore) -> List[ResolvedSkill]:
    statuses = resolve_statuses(catalog, store)
    resolved = []
    for skill in catalog:
        record = store.get(skill.id)
        resolved.append(
            ResolvedSkill(
                skill=skill,
                status=statuses[skill.id],
                progress=record.copy() if record else None,
                percent_complete=percent_complete(skill.requirement, record),
            )
        )
    return resolved


def status_counts(resolved: List[ResolvedSkill]) -> Dict[Status, int]:
    counts = Counter(item.status for item in resolved)
    return {status: counts.get(status, 0) for status in Status}

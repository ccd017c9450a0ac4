import logging
from typing import Dict, List, Optional

from .experience import ExperienceSummary, experience_summary
from .layout import LayoutResult, compute_layout, filter_skills_by_category
from .models import Category, ProgressRecord, SkillCatalog, Status
from .persistence import LocalProgressCache, export_progress, import_progress
from .resolver import ResolvedSkill, annotate_skills, resolve_statuses
from .store import ProgressStore
from .tracker import ProgressTracker

logger = logging.getLogger(__name__)


class SkillTreeSession:
    """
    One user's view of the skill tree: a catalog, the user's progress, and the
    derived statuses.

    All mutations go through this object and are followed by an eager
    re-resolution, so `statuses` always reflects the last committed change. When
    a cache is given it is loaded once on construction and written after every
    committed mutation.
    """

    def __init__(
        self,
        catalog: SkillCatalog,
        store: Optional[ProgressStore] = None,
        cache: Optional[LocalProgressCache] = None,
        clock=None,
    ):
        self.catalog = catalog.validate()
        self.store = store if store is not None else ProgressStore()
        self.cache = cache
        self._clock = clock
        self.tracker = ProgressTracker(self.catalog, self.store, clock=clock)
        if cache is not None:
            cache.load(self.store, self.catalog)
        self._statuses = resolve_statuses(self.catalog, self.store)

    @property
    def statuses(self) -> Dict[str, Status]:
        return dict(self._statuses)

    def status_of(self, skill_id: str) -> Status:
        self.catalog.require(skill_id)
        return self._statuses[skill_id]

    def skills(self) -> List[ResolvedSkill]:
        return annotate_skills(self.catalog, self.store)

    def experience(self) -> ExperienceSummary:
        return experience_summary(self.skills())

    def layout(self, category: Optional[Category] = None) -> LayoutResult:
        return compute_layout(filter_skills_by_category(self.catalog, category))

    def _committed(self):
        self._statuses = resolve_statuses(self.catalog, self.store)
        if self.cache is not None:
            self.cache.save(self.store)

    def update_progress(self, skill_id: str, sets: Optional[int] = None, reps: Optional[int] = None) -> ProgressRecord:
        record = self.tracker.apply_update(skill_id, sets=sets, reps=reps)
        self._committed()
        return record

    def import_progress(self, data) -> int:
        count = import_progress(self.store, data, self.catalog)
        self._committed()
        return count

    def export_progress(self) -> Dict[str, dict]:
        return export_progress(self.store)

    def reset_progress(self):
        self.store.clear()
        self._committed()
        logger.info("Progress reset")

    def replace_catalog(self, catalog: SkillCatalog):
        """
        Swaps in a new catalog while keeping all recorded progress. Records are
        re-derived against the new requirements, so a raised requirement takes a
        completed skill back to in-progress. A cyclic catalog is rejected and the
        session keeps its current one with its progress untouched.
        """
        catalog.validate()
        self.catalog = catalog
        self.tracker = ProgressTracker(catalog, self.store, clock=self._clock)
        self.tracker.reconcile()
        self._committed()
        logger.info("Catalog replaced with %d skills", len(catalog))

import logging
from typing import Dict, Iterable, Iterator, Optional, Tuple

from .models import ProgressRecord

logger = logging.getLogger(__name__)


class ProgressStore:
    """
    Mutable mapping from skill id to ProgressRecord for one user.

    This is the only mutable state the engine owns. It does no locking: callers
    serialize mutations (one writer per session).
    """

    def __init__(self, records: Iterable[ProgressRecord] = ()):
        self._records: Dict[str, ProgressRecord] = {}
        for record in records:
            self._records[record.skill_id] = record

    def __len__(self):
        return len(self._records)

    def __contains__(self, skill_id):
        return skill_id in self._records

    def __iter__(self) -> Iterator[str]:
        return iter(self._records)

    def __repr__(self):
        return f"ProgressStore({len(self._records)} records)"

    def get(self, skill_id: str) -> Optional[ProgressRecord]:
        return self._records.get(skill_id)

    def items(self) -> Iterator[Tuple[str, ProgressRecord]]:
        return iter(list(self._records.items()))

    def put(self, record: ProgressRecord) -> ProgressRecord:
        self._records[record.skill_id] = record
        return record

    def remove(self, skill_id: str) -> Optional[ProgressRecord]:
        return self._records.pop(skill_id, None)

    def replace_all(self, records: Iterable[ProgressRecord]):
        """Swaps in a whole new set of records in one step (used by imports)."""
        replacement = {record.skill_id: record for record in records}
        self._records = replacement
        logger.info("Progress store replaced with %d records", len(replacement))

    def clear(self):
        self._records = {}
        logger.info("Progress store cleared")

    def snapshot(self) -> "ProgressStore":
        """An independent copy; later mutations of either side do not leak."""
        return ProgressStore(record.copy() for record in self._records.values())

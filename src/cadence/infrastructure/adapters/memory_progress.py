"""
In-memory progress repository — Infrastructure adapter.

Implements ProgressRepository with a process-local dict. Records are lost on
restart; durable storage belongs to the embedding application.
"""

import logging
from dataclasses import replace

from cadence.domain.models import ProgressRecord
from cadence.domain.ports import ProgressRepository

logger = logging.getLogger(__name__)


class InMemoryProgressRepository(ProgressRepository):
    """
    Keeps progress records keyed by (learner_id, card_id).

    Stored and returned records are copies, so callers cannot mutate the store.
    """

    def __init__(self, records: list[ProgressRecord] | None = None):
        self._records: dict[tuple[str, str], ProgressRecord] = {}
        for record in records or []:
            self._records[(record.learner_id, record.card_id)] = replace(record)

    def __len__(self) -> int:
        return len(self._records)

    async def get(self, learner_id: str, card_id: str) -> ProgressRecord | None:
        record = self._records.get((learner_id, card_id))
        return replace(record) if record else None

    async def get_many(self, learner_id: str, card_ids: list[str]) -> dict[str, ProgressRecord]:
        found: dict[str, ProgressRecord] = {}
        for card_id in card_ids:
            record = self._records.get((learner_id, card_id))
            if record is not None:
                found[card_id] = replace(record)
        return found

    async def save(self, record: ProgressRecord) -> None:
        self._records[(record.learner_id, record.card_id)] = replace(record)
        logger.debug(f"Saved progress for {record.learner_id}/{record.card_id}")

    def clear(self) -> None:
        self._records.clear()

"""
Ports (interfaces) for progress storage.

The review service depends on this abstraction; concrete storage engines
live in the infrastructure layer or in the embedding application.
"""

from abc import ABC, abstractmethod

from .models import ProgressRecord


class ProgressRepository(ABC):
    """
    Port for loading and storing per-(learner, card) progress.

    Implementations:
        - InMemoryProgressRepository: process-local dict, used by the HTTP service and tests.
    """

    @abstractmethod
    async def get(self, learner_id: str, card_id: str) -> ProgressRecord | None:
        """
        Fetch the stored record for one card, or None if it was never reviewed.
        """
        pass

    @abstractmethod
    async def get_many(self, learner_id: str, card_ids: list[str]) -> dict[str, ProgressRecord]:
        """
        Fetch stored records for several cards.

        Args:
            learner_id: Owner of the progress records.
            card_ids: Cards to look up.

        Returns:
            Mapping of card_id -> record. Cards never reviewed are absent.
        """
        pass

    @abstractmethod
    async def save(self, record: ProgressRecord) -> None:
        """
        Insert or replace the record keyed by (learner_id, card_id).
        """
        pass

"""
Review Service — Application layer orchestrator.

Loads stored progress, runs the scheduler and session selector, and writes
the updated records back through the repository port.
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Callable, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone

from cadence.domain.constants import DEFAULT_DAILY_CAP, DEFAULT_NEW_CARD_CAP, DEFAULT_STAGE
from cadence.domain.models import (
    LearningStage,
    ProgressRecord,
    ReviewOutcome,
    ScheduleResult,
    SessionCard,
    ensure_utc,
)
from cadence.domain.ports import ProgressRepository

from .grading import grade_answer, stage_after_answer
from .scheduler import schedule_next_review
from .session import order_session_pool, pick_daily_new_limit, select_session_cards

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class _KeyLock:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    users: int = 0


class ReviewService:
    """
    Application service for recording answers and assembling study sessions.

    Depends on the ProgressRepository abstraction, not a concrete store.
    Concurrent answers for the same (learner, card) are applied one at a time.
    """

    def __init__(
        self,
        repo: ProgressRepository,
        clock: Callable[[], datetime] | None = None,
        daily_cap: int = DEFAULT_DAILY_CAP,
        new_card_cap: int = DEFAULT_NEW_CARD_CAP,
    ):
        """
        Args:
            repo: The repository (port) holding progress records.
            clock: Source of the current time; defaults to UTC wall clock.
            daily_cap: Session size used when build_session gets no explicit cap.
            new_card_cap: Most never-seen cards mixed into one session.
        """
        self._repo = repo
        self._clock = clock or _utcnow
        self.daily_cap = daily_cap
        self.new_card_cap = new_card_cap
        self._locks: dict[tuple[str, str], _KeyLock] = {}

    @asynccontextmanager
    async def _card_lock(self, learner_id: str, card_id: str) -> AsyncIterator[None]:
        """Hold the lock for one (learner, card); entries are dropped once unused."""
        key = (learner_id, card_id)
        entry = self._locks.setdefault(key, _KeyLock())
        entry.users += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.users -= 1
            if entry.users == 0:
                del self._locks[key]

    async def submit_review(
        self,
        learner_id: str,
        card_id: str,
        outcome: ReviewOutcome,
        stage: LearningStage | None = None,
        now: datetime | None = None,
    ) -> ScheduleResult:
        """
        Schedule one reviewed card and persist the result.

        Args:
            learner_id: Learner who answered.
            card_id: Card that was answered.
            outcome: Grade plus optional latency and confidence.
            stage: New learning stage; keeps the stored one when omitted.
            now: Review time; defaults to the service clock.

        Returns:
            The ScheduleResult that was stored.
        """
        now = ensure_utc(now or self._clock())

        async with self._card_lock(learner_id, card_id):
            prior = await self._repo.get(learner_id, card_id)
            result = schedule_next_review(now, prior.state if prior else None, outcome)

            if prior is None:
                first_reviewed_at = now
                stored_stage = DEFAULT_STAGE
            else:
                first_reviewed_at = prior.first_reviewed_at or now
                stored_stage = prior.stage

            await self._repo.save(
                ProgressRecord(
                    learner_id=learner_id,
                    card_id=card_id,
                    state=result.state,
                    stage=stage or stored_stage,
                    due_at=result.next_due_at,
                    last_reviewed_at=now,
                    first_reviewed_at=first_reviewed_at,
                )
            )

        logger.info(
            f"Scheduled card {card_id} for learner {learner_id}: "
            f"grade={outcome.grade} next in {result.next_interval_minutes}m"
        )
        return result

    async def answer_card(
        self,
        learner_id: str,
        card_id: str,
        is_correct: bool,
        confidence: float | None = None,
        response_ms: float | None = None,
        now: datetime | None = None,
    ) -> ScheduleResult:
        """
        Record a right/wrong game answer.

        Grades the answer, moves the card to 'recognize' (correct) or
        'learn' (wrong), then schedules it.
        """
        outcome = grade_answer(is_correct, confidence=confidence, response_ms=response_ms)
        return await self.submit_review(
            learner_id,
            card_id,
            outcome,
            stage=stage_after_answer(is_correct),
            now=now,
        )

    async def build_session(
        self,
        learner_id: str,
        cards: Sequence[SessionCard],
        daily_cap: int | None = None,
    ) -> list[SessionCard]:
        """
        Assemble the cards for one study session.

        Stored stage and due time override what the caller passed. Cards with
        no stored progress count as new and are limited by new_card_cap.

        Args:
            learner_id: Learner the session is for.
            cards: Candidate cards, e.g. every card of a set.
            daily_cap: Session size; uses the service default when None.

        Returns:
            Ordered session, at most daily_cap cards long.
        """
        cap = self.daily_cap if daily_cap is None else daily_cap
        if not cards:
            return []

        records = await self._repo.get_many(learner_id, [c.card_id for c in cards])

        seen: list[SessionCard] = []
        new: list[SessionCard] = []
        for card in cards:
            record = records.get(card.card_id)
            if record is None:
                new.append(card)
            else:
                seen.append(replace(card, stage=record.stage, due_at=record.due_at))

        new_limit = pick_daily_new_limit(len(new), self.new_card_cap)
        pool = order_session_pool(seen + new[:new_limit])
        session = select_session_cards(pool, cap)

        logger.info(
            f"Session for learner {learner_id}: {len(session)} cards "
            f"({len(seen)} seen, {new_limit}/{len(new)} new, cap {cap})"
        )
        return session

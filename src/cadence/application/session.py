"""
Session selection for study sessions.

Callers hand over a pool already ordered by priority (learning-stage bucket,
then due time). Selection is a capped prefix; order_session_pool provides
the standard ordering for callers that do not build their own.
"""

import logging
from collections.abc import Iterable, Sequence
from typing import TypeVar

from cadence.domain.constants import STAGE_ORDER
from cadence.domain.models import SessionCard, ensure_utc

logger = logging.getLogger(__name__)

T = TypeVar("T")


def select_session_cards(ordered_cards: Sequence[T], daily_cap: int) -> list[T]:
    """
    Take at most `daily_cap` cards from the front of the pool.

    Input order is preserved. A cap of zero or below selects nothing.
    """
    if daily_cap <= 0 or not ordered_cards:
        return []
    return list(ordered_cards[:daily_cap])


def pick_daily_new_limit(total_new: int, daily_cap: int) -> int:
    """Number of never-seen cards to mix in: total_new clamped to [0, daily_cap]."""
    return max(0, min(total_new, daily_cap))


def _stage_rank(stage: str | None) -> int:
    if not stage:
        return 0
    try:
        return STAGE_ORDER.index(stage)
    except ValueError:
        # Unrecognized labels go with the last bucket
        return len(STAGE_ORDER) - 1


def order_session_pool(cards: Iterable[SessionCard]) -> list[SessionCard]:
    """
    Order cards learn -> recognize -> know, soonest due first within a bucket.

    Cards without a due time go last in their bucket. Ties keep input order.
    """
    buckets: dict[int, list[SessionCard]] = {}
    for card in cards:
        buckets.setdefault(_stage_rank(card.stage), []).append(card)

    ordered: list[SessionCard] = []
    for rank in sorted(buckets):
        bucket = buckets[rank]
        scheduled = sorted(
            (c for c in bucket if c.due_at is not None), key=lambda c: ensure_utc(c.due_at)
        )
        unscheduled = [c for c in bucket if c.due_at is None]
        ordered.extend(scheduled + unscheduled)

    logger.debug(f"Ordered session pool of {len(ordered)} cards")
    return ordered

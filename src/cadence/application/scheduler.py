"""
Review scheduler: SM-2 style interval and ease updates.

Extends classic SM-2 with two soft signals blended into the ease factor:
response latency (slow answers are penalized) and self-rated confidence
(rewarded above 0.6, penalized below). Intervals are tracked in minutes.

This is a pure computation module with no I/O.
"""

import logging
import math
from datetime import datetime, timedelta, timezone

from cadence.domain.constants import (
    CONFIDENCE_PIVOT,
    CONFIDENCE_REWARD_SCALE,
    EWMA_NEW_WEIGHT,
    EWMA_OLD_WEIGHT,
    FAILURE_ASSUMED_PRIOR_INTERVAL,
    FAILURE_INTERVAL_FACTOR,
    FIRST_SUCCESS_INTERVAL,
    LATENCY_GRACE_SECONDS,
    LATENCY_PENALTY_PER_SECOND,
    MAX_CONFIDENCE_REWARD,
    MAX_EASE_FACTOR,
    MAX_GRADE,
    MAX_LATENCY_PENALTY,
    MIN_EASE_FACTOR,
    MIN_FAILURE_INTERVAL,
    MIN_INTERVAL_LADDER,
    SECOND_SUCCESS_INTERVAL,
)
from cadence.domain.models import ProgressState, ReviewOutcome, ScheduleResult, ensure_utc

logger = logging.getLogger(__name__)

# Latest representable due time; very mature cards saturate here
MAX_DUE_AT = datetime.max.replace(tzinfo=timezone.utc)


def round_half_away_from_zero(value: float) -> int:
    """Round to the nearest integer, ties away from zero (2.5 -> 3, -2.5 -> -3)."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def clamp_ease_factor(ease_factor: float) -> float:
    return max(MIN_EASE_FACTOR, min(MAX_EASE_FACTOR, ease_factor))


def clamp_confidence_reward(confidence: float) -> float:
    """
    Ease adjustment for a self-rated confidence.

    Positive above the 0.6 pivot, negative below, magnitude capped at 0.15.
    """
    reward = (confidence - CONFIDENCE_PIVOT) * CONFIDENCE_REWARD_SCALE
    return max(-MAX_CONFIDENCE_REWARD, min(MAX_CONFIDENCE_REWARD, reward))


def latency_penalty(response_ms: float) -> float:
    """
    Ease penalty for a slow answer.

    Zero up to 6 seconds, then 0.02 per extra second, capped at 0.2.
    """
    seconds = response_ms / 1000
    overrun = (seconds - LATENCY_GRACE_SECONDS) * LATENCY_PENALTY_PER_SECOND
    return min(MAX_LATENCY_PENALTY, max(0.0, overrun))


def sm2_ease_delta(grade: float) -> float:
    """Classic SM-2 ease change. Grade is used at face value, unclamped."""
    miss = MAX_GRADE - grade
    return 0.1 - miss * (0.08 + miss * 0.02)


def apply_interval_ladder(interval_minutes: float, repetitions: int) -> float:
    """
    Raise the interval to the floor for this repetition count.

    Floors: 10 min, 1 hr, 6 hr, 1 day, 1 week for repetitions 1..5.
    Outside that range the interval is returned unchanged.
    """
    if 1 <= repetitions <= len(MIN_INTERVAL_LADDER):
        return max(interval_minutes, MIN_INTERVAL_LADDER[repetitions - 1])
    return interval_minutes


def _ewma(previous: float, sample: float) -> float:
    return previous * EWMA_OLD_WEIGHT + sample * EWMA_NEW_WEIGHT


def _finite_or_none(value: float | None) -> float | None:
    if value is None or not math.isfinite(value):
        return None
    return value


def _due_after(now: datetime, interval_minutes: float) -> datetime:
    try:
        return now + timedelta(minutes=interval_minutes)
    except OverflowError:
        return MAX_DUE_AT


def schedule_next_review(
    now: datetime,
    prior_state: ProgressState | None,
    outcome: ReviewOutcome,
) -> ScheduleResult:
    """
    Compute the new mastery state and next due time for one answered card.

    Args:
        now: Clock time of the review. Naive datetimes are taken as UTC.
        prior_state: Stored state, or None for a card's first review.
        outcome: Grade plus optional latency and confidence.

    Returns:
        ScheduleResult with the full updated state and the absolute due time.

    Inputs are not validated: a grade outside 0-5 flows straight into the
    ease formula, and confidence is not clamped to [0, 1]. A NaN or infinite
    latency or confidence is treated as missing. The due time saturates at
    MAX_DUE_AT once the interval runs past the calendar.
    """
    state = prior_state if prior_state is not None else ProgressState.initial()
    response_ms = _finite_or_none(outcome.response_ms)
    confidence = _finite_or_none(outcome.confidence)

    response_ms_avg = state.response_ms_avg
    if response_ms is not None:
        response_ms_avg = round_half_away_from_zero(_ewma(response_ms_avg, response_ms))

    confidence_avg = state.confidence_avg
    if confidence is not None:
        confidence_avg = _ewma(confidence_avg, confidence)

    if outcome.is_failure:
        repetitions = 0
        prior_interval = state.interval_minutes or FAILURE_ASSUMED_PRIOR_INTERVAL
        interval = max(
            MIN_FAILURE_INTERVAL,
            round_half_away_from_zero(prior_interval * FAILURE_INTERVAL_FACTOR),
        )
    else:
        repetitions = state.repetitions + 1
        if repetitions == 1:
            interval = FIRST_SUCCESS_INTERVAL
        elif repetitions == 2:
            interval = SECOND_SUCCESS_INTERVAL
        else:
            # Grows by the ease factor held before this review
            interval = round_half_away_from_zero(state.interval_minutes * state.ease_factor)

    ease_factor = state.ease_factor + sm2_ease_delta(outcome.grade)
    if response_ms is not None:
        ease_factor -= latency_penalty(response_ms)
    if confidence is not None:
        ease_factor += clamp_confidence_reward(confidence)
    ease_factor = clamp_ease_factor(ease_factor)

    interval = apply_interval_ladder(interval, repetitions)

    new_state = ProgressState(
        ease_factor=ease_factor,
        repetitions=repetitions,
        interval_minutes=interval,
        last_grade=outcome.grade,
        last_response_ms=response_ms if response_ms is not None else state.last_response_ms,
        response_ms_avg=response_ms_avg,
        confidence_avg=confidence_avg,
    )
    next_due_at = _due_after(ensure_utc(now), interval)

    logger.debug(
        f"grade={outcome.grade} reps={repetitions} interval={interval}m "
        f"ef={state.ease_factor:.3f}->{ease_factor:.3f}"
    )
    return ScheduleResult(state=new_state, next_due_at=next_due_at)

"""
Domain models for review scheduling.

These are pure data structures with no I/O or external dependencies.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Literal

from .constants import DEFAULT_EASE_FACTOR, DEFAULT_STAGE, PASSING_GRADE

LearningStage = Literal["learn", "recognize", "know"]


@dataclass(frozen=True)
class ProgressState:
    """
    Mastery state for one (learner, card) pair.

    Attributes:
        ease_factor: Interval growth multiplier, kept within [1.3, 2.8].
        repetitions: Consecutive successful recalls since the last failure.
        interval_minutes: Minutes until the next presentation, as last computed.
        last_grade: Most recent grade recorded (0-5).
        last_response_ms: Most recent raw response latency.
        response_ms_avg: Exponentially weighted average of response latency.
        confidence_avg: Exponentially weighted average of self-rated confidence.
    """

    ease_factor: float = DEFAULT_EASE_FACTOR
    repetitions: int = 0
    interval_minutes: float = 0
    last_grade: int | None = None
    last_response_ms: float | None = None
    response_ms_avg: float = 0
    confidence_avg: float = 0

    @classmethod
    def initial(cls) -> "ProgressState":
        """State of a card that has never been reviewed."""
        return cls()


@dataclass(frozen=True)
class ReviewOutcome:
    """
    A single review event.

    Attributes:
        grade: 5 = effortless recall, 0 = total failure. Below 3 is a failure.
        response_ms: Time the learner took to answer.
        confidence: Self-rated confidence (0.0-1.0), independent of correctness.
    """

    grade: int
    response_ms: float | None = None
    confidence: float | None = None

    @property
    def is_failure(self) -> bool:
        return self.grade < PASSING_GRADE


@dataclass(frozen=True)
class ScheduleResult:
    """Updated state plus the absolute time the card is next due."""

    state: ProgressState
    next_due_at: datetime

    @property
    def next_interval_minutes(self) -> float:
        return self.state.interval_minutes

    @property
    def next_due_at_iso(self) -> str:
        return to_iso(self.next_due_at)

    def to_dict(self) -> dict[str, Any]:
        return {
            "ease_factor": self.state.ease_factor,
            "repetitions": self.state.repetitions,
            "interval_minutes": self.state.interval_minutes,
            "last_grade": self.state.last_grade,
            "last_response_ms": self.state.last_response_ms,
            "response_ms_avg": self.state.response_ms_avg,
            "confidence_avg": self.state.confidence_avg,
            "next_interval_minutes": self.next_interval_minutes,
            "next_due_at": self.next_due_at_iso,
        }


@dataclass(frozen=True)
class SessionCard:
    """
    A card as seen by session selection.

    The stage is assigned by the calling application; the core only reads it.
    """

    card_id: str
    stage: LearningStage = DEFAULT_STAGE
    due_at: datetime | None = None
    term: str | None = None
    definition: str | None = None


@dataclass
class ProgressRecord:
    """
    What the review service stores per (learner, card) after each answer.
    """

    learner_id: str
    card_id: str
    state: ProgressState
    stage: LearningStage = DEFAULT_STAGE
    due_at: datetime | None = None
    last_reviewed_at: datetime | None = None
    first_reviewed_at: datetime | None = None


def ensure_utc(moment: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def to_iso(moment: datetime) -> str:
    return ensure_utc(moment).isoformat().replace("+00:00", "Z")


def parse_iso(value: str) -> datetime:
    """Parse an ISO-8601 timestamp (``Z`` suffix accepted) into an aware UTC datetime."""
    return ensure_utc(datetime.fromisoformat(value.strip().replace("Z", "+00:00")))

"""Turns a game answer (right/wrong plus optional confidence) into a review outcome."""

from typing import Literal

from cadence.domain.constants import (
    CONFIDENCE_HIGH,
    CONFIDENCE_LOW,
    CONFIDENCE_MEDIUM,
    DEFAULT_CONFIDENCE_CORRECT,
    DEFAULT_CONFIDENCE_WRONG,
    EFFORTLESS_CONFIDENCE,
    GRADE_CORRECT,
    GRADE_EFFORTLESS,
    GRADE_WRONG,
)
from cadence.domain.models import LearningStage, ReviewOutcome

ConfidenceLevel = Literal["low", "medium", "high"]

CONFIDENCE_PRESETS: dict[str, float] = {
    "low": CONFIDENCE_LOW,
    "medium": CONFIDENCE_MEDIUM,
    "high": CONFIDENCE_HIGH,
}


def confidence_for_level(level: ConfidenceLevel) -> float:
    """Confidence value behind a low / medium / high self-rating."""
    try:
        return CONFIDENCE_PRESETS[level]
    except KeyError:
        raise ValueError(f"Unknown confidence level: {level!r}") from None


def grade_answer(
    is_correct: bool,
    confidence: float | None = None,
    response_ms: float | None = None,
) -> ReviewOutcome:
    """
    Build the outcome recorded for one answered card.

    Without a confidence rating, 0.7 is assumed for a correct answer and 0.3
    for a wrong one. Correct answers grade 5 above 0.8 confidence, else 4;
    wrong answers grade 2.
    """
    if confidence is None:
        confidence = DEFAULT_CONFIDENCE_CORRECT if is_correct else DEFAULT_CONFIDENCE_WRONG

    if is_correct:
        grade = GRADE_EFFORTLESS if confidence > EFFORTLESS_CONFIDENCE else GRADE_CORRECT
    else:
        grade = GRADE_WRONG

    if response_ms is not None:
        response_ms = max(0.0, response_ms)

    return ReviewOutcome(grade=grade, response_ms=response_ms, confidence=confidence)


def stage_after_answer(is_correct: bool) -> LearningStage:
    return "recognize" if is_correct else "learn"

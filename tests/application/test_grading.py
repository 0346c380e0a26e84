import pytest

from cadence.application.grading import confidence_for_level, grade_answer, stage_after_answer


def test_correct_without_confidence():
    outcome = grade_answer(True)
    assert outcome.grade == 4
    assert outcome.confidence == 0.7
    assert outcome.response_ms is None


def test_wrong_without_confidence():
    outcome = grade_answer(False)
    assert outcome.grade == 2
    assert outcome.confidence == 0.3
    assert outcome.is_failure


@pytest.mark.parametrize(
    "confidence, expected",
    [(0.9, 5), (0.81, 5), (0.8, 4), (0.6, 4), (0.3, 4)],
)
def test_correct_grade_follows_confidence(confidence, expected):
    assert grade_answer(True, confidence=confidence).grade == expected


def test_wrong_answer_ignores_confidence():
    assert grade_answer(False, confidence=0.9).grade == 2


def test_negative_latency_floored():
    assert grade_answer(True, response_ms=-40).response_ms == 0.0
    assert grade_answer(True, response_ms=2500).response_ms == 2500


def test_stage_after_answer():
    assert stage_after_answer(True) == "recognize"
    assert stage_after_answer(False) == "learn"


@pytest.mark.parametrize("level, value", [("low", 0.3), ("medium", 0.6), ("high", 0.9)])
def test_confidence_levels(level, value):
    assert confidence_for_level(level) == value


def test_high_confidence_button_earns_top_grade():
    assert grade_answer(True, confidence=confidence_for_level("high")).grade == 5


def test_unknown_confidence_level():
    with pytest.raises(ValueError):
        confidence_for_level("extreme")

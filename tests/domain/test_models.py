from dataclasses import FrozenInstanceError
from datetime import datetime, timedelta, timezone

import pytest

from cadence.domain.models import (
    ProgressState,
    ReviewOutcome,
    ScheduleResult,
    SessionCard,
    ensure_utc,
    parse_iso,
    to_iso,
)


def test_initial_state():
    state = ProgressState.initial()
    assert state.ease_factor == 2.5
    assert state.repetitions == 0
    assert state.interval_minutes == 0
    assert state.last_grade is None
    assert state.last_response_ms is None
    assert state.response_ms_avg == 0
    assert state.confidence_avg == 0


def test_state_is_immutable():
    with pytest.raises(FrozenInstanceError):
        ProgressState().repetitions = 3


@pytest.mark.parametrize("grade, failed", [(0, True), (2, True), (3, False), (5, False)])
def test_outcome_failure(grade, failed):
    assert ReviewOutcome(grade=grade).is_failure is failed


def test_schedule_result_aliases_interval():
    state = ProgressState(repetitions=2, interval_minutes=60)
    result = ScheduleResult(state=state, next_due_at=datetime(2024, 1, 1, 1, tzinfo=timezone.utc))
    assert result.next_interval_minutes == 60
    assert result.next_due_at_iso == "2024-01-01T01:00:00Z"


def test_session_card_defaults_to_learn():
    card = SessionCard("c1")
    assert card.stage == "learn"
    assert card.due_at is None


def test_iso_helpers():
    aware = parse_iso("2024-01-01T02:41:00Z")
    assert aware == datetime(2024, 1, 1, 2, 41, tzinfo=timezone.utc)
    assert to_iso(aware) == "2024-01-01T02:41:00Z"
    assert parse_iso("2024-01-01T04:41:00+02:00") == aware
    assert parse_iso("2024-01-01T02:41:00") == aware


def test_ensure_utc():
    naive = datetime(2024, 1, 1)
    assert ensure_utc(naive).tzinfo == timezone.utc
    shifted = datetime(2024, 1, 1, 3, tzinfo=timezone(timedelta(hours=3)))
    assert ensure_utc(shifted) == datetime(2024, 1, 1, tzinfo=timezone.utc)
    assert ensure_utc(shifted).utcoffset() == timedelta(0)


def test_parse_iso_rejects_garbage():
    with pytest.raises(ValueError):
        parse_iso("next tuesday")

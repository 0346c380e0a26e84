from datetime import datetime, timezone

import pytest

from cadence.domain.models import ProgressState, SessionCard


@pytest.fixture
def now():
    """A fixed review time: 2024-01-01T00:00:00Z."""
    return datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def mature_state():
    """Card with two successful recalls behind it."""
    return ProgressState(ease_factor=2.5, repetitions=2, interval_minutes=60)


@pytest.fixture
def sample_cards():
    return [
        SessionCard("k1", stage="know", due_at=datetime(2024, 1, 1, 9, tzinfo=timezone.utc)),
        SessionCard("l1", stage="learn"),
        SessionCard("r1", stage="recognize", due_at=datetime(2024, 1, 3, tzinfo=timezone.utc)),
        SessionCard("l2", stage="learn", due_at=datetime(2024, 1, 2, tzinfo=timezone.utc)),
        SessionCard("r2", stage="recognize", due_at=datetime(2024, 1, 1, tzinfo=timezone.utc)),
        SessionCard("l3", stage="learn", due_at=datetime(2024, 1, 1, 12, tzinfo=timezone.utc)),
    ]


@pytest.fixture
def mock_home(tmp_path, monkeypatch):
    """Mocks Path.home() to point to a temp dir."""
    home = tmp_path / "home"
    home.mkdir()

    # Mocking HOME to a temp directory to isolate config files
    monkeypatch.setenv("HOME", str(home))
    for var in (
        "CADENCE_DAILY_CAP",
        "CADENCE_NEW_CARD_CAP",
        "CADENCE_HOST",
        "CADENCE_PORT",
        "CADENCE_LOG_LEVEL",
        "CADENCE_VERBOSE",
    ):
        monkeypatch.delenv(var, raising=False)
    return home

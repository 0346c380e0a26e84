# Domain Package
from .models import (
    LearningStage,
    ProgressRecord,
    ProgressState,
    ReviewOutcome,
    ScheduleResult,
    SessionCard,
)
from .ports import ProgressRepository

__all__ = [
    "LearningStage",
    "ProgressRecord",
    "ProgressState",
    "ReviewOutcome",
    "ScheduleResult",
    "SessionCard",
    "ProgressRepository",
]

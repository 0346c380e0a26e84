"""cadence: spaced-repetition scheduling for flashcard study sessions."""

from cadence.application.scheduler import schedule_next_review
from cadence.application.session import pick_daily_new_limit, select_session_cards
from cadence.consts import VERSION

__version__ = VERSION

__all__ = ["schedule_next_review", "select_session_cards", "pick_daily_new_limit", "VERSION"]

# Application Package
from .grading import confidence_for_level, grade_answer, stage_after_answer
from .review_service import ReviewService
from .scheduler import schedule_next_review
from .session import order_session_pool, pick_daily_new_limit, select_session_cards

__all__ = [
    "ReviewService",
    "confidence_for_level",
    "grade_answer",
    "order_session_pool",
    "pick_daily_new_limit",
    "schedule_next_review",
    "select_session_cards",
    "stage_after_answer",
]

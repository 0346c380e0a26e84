"""Centralized constants for the cadence scheduler.

All tuning knobs of the scheduling heuristic live here so the scheduler,
the session selector and the interface layers import from one place.
"""

# ---------- Ease factor ----------
DEFAULT_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3
MAX_EASE_FACTOR = 2.8

# ---------- Grades ----------
MIN_GRADE = 0
MAX_GRADE = 5
PASSING_GRADE = 3  # grade < 3 is a failed recall

# ---------- Rolling averages ----------
EWMA_NEW_WEIGHT = 0.3
EWMA_OLD_WEIGHT = 0.7

# ---------- Intervals (minutes) ----------
FIRST_SUCCESS_INTERVAL = 10
SECOND_SUCCESS_INTERVAL = 60
FAILURE_ASSUMED_PRIOR_INTERVAL = 10
FAILURE_INTERVAL_FACTOR = 0.25
MIN_FAILURE_INTERVAL = 1

# Floors indexed by repetitions - 1: 10 min, 1 hr, 6 hr, 1 day, 1 week
MIN_INTERVAL_LADDER = (10, 60, 60 * 6, 60 * 24, 60 * 24 * 7)

# ---------- Latency penalty ----------
LATENCY_GRACE_SECONDS = 6.0
LATENCY_PENALTY_PER_SECOND = 0.02
MAX_LATENCY_PENALTY = 0.2

# ---------- Confidence reward ----------
CONFIDENCE_PIVOT = 0.6
CONFIDENCE_REWARD_SCALE = 0.3
MAX_CONFIDENCE_REWARD = 0.15

# ---------- Sessions ----------
DEFAULT_DAILY_CAP = 20
DEFAULT_NEW_CARD_CAP = 10
STAGE_ORDER = ("learn", "recognize", "know")
DEFAULT_STAGE = "learn"

# ---------- Answer grading ----------
CONFIDENCE_LOW = 0.3
CONFIDENCE_MEDIUM = 0.6
CONFIDENCE_HIGH = 0.9
DEFAULT_CONFIDENCE_CORRECT = 0.7
DEFAULT_CONFIDENCE_WRONG = 0.3
EFFORTLESS_CONFIDENCE = 0.8  # correct answers above this earn a 5
GRADE_EFFORTLESS = 5
GRADE_CORRECT = 4
GRADE_WRONG = 2

# ---------- Server ----------
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8787

import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Literal

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from cadence.application.config import resolve_config
from cadence.application.grading import ConfidenceLevel, confidence_for_level, stage_after_answer
from cadence.application.review_service import ReviewService
from cadence.application.scheduler import schedule_next_review
from cadence.application.session import (
    order_session_pool,
    pick_daily_new_limit,
    select_session_cards,
)
from cadence.consts import VERSION
from cadence.domain.constants import DEFAULT_EASE_FACTOR
from cadence.domain.models import ProgressState, ReviewOutcome, SessionCard, ensure_utc, to_iso
from cadence.infrastructure.adapters.memory_progress import InMemoryProgressRepository

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("cadence.server")

config = resolve_config()
logging.getLogger("cadence").setLevel(config.effective_log_level)
repository = InMemoryProgressRepository()
review_service = ReviewService(
    repository,
    daily_cap=config.daily_cap,
    new_card_cap=config.new_card_cap,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info(f"cadence server v{VERSION} starting up (daily cap {config.daily_cap})...")
    yield
    # Shutdown
    logger.info("cadence server shutting down...")


app = FastAPI(
    title="cadence",
    description="Spaced-repetition scheduling and session selection.",
    version=VERSION,
    lifespan=lifespan,
)


class HealthResponse(BaseModel):
    status: str
    version: str
    uptime_seconds: float


start_time = time.time()


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Simple health check to verify server is reachable.
    """
    return HealthResponse(status="ok", version=VERSION, uptime_seconds=time.time() - start_time)


@app.get("/version")
async def get_version():
    return {"version": VERSION}


# ---------------------------------------------------------------------------
# Request / response models
# ---------------------------------------------------------------------------


class ProgressStateModel(BaseModel):
    # Absent fields fall back to the never-reviewed defaults
    ease_factor: float = DEFAULT_EASE_FACTOR
    repetitions: int = Field(default=0, ge=0)
    interval_minutes: float = Field(default=0, ge=0)
    last_grade: int | None = None
    last_response_ms: float | None = None
    response_ms_avg: float = 0
    confidence_avg: float = 0


class OutcomeModel(BaseModel):
    grade: int
    response_ms: float | None = None
    confidence: float | None = None


class ScheduleRequest(BaseModel):
    now: datetime | None = None
    prior: ProgressStateModel | None = None
    outcome: OutcomeModel


class ScheduleResponse(BaseModel):
    ease_factor: float
    repetitions: int
    interval_minutes: float
    last_grade: int | None
    last_response_ms: float | None
    response_ms_avg: float
    confidence_avg: float
    next_interval_minutes: float
    next_due_at: str


class CardModel(BaseModel):
    id: str
    stage: Literal["learn", "recognize", "know"] = "learn"
    due_at: datetime | None = None
    term: str | None = None
    definition: str | None = None

    def to_domain(self) -> SessionCard:
        return SessionCard(
            card_id=self.id,
            stage=self.stage,
            due_at=ensure_utc(self.due_at) if self.due_at else None,
            term=self.term,
            definition=self.definition,
        )

    @classmethod
    def from_domain(cls, card: SessionCard) -> "CardModel":
        return cls(
            id=card.card_id,
            stage=card.stage,
            due_at=card.due_at,
            term=card.term,
            definition=card.definition,
        )


class SessionRequest(BaseModel):
    cards: list[CardModel]
    daily_cap: int | None = None
    order: bool = True


class SessionResponse(BaseModel):
    cards: list[CardModel]
    daily_cap: int


class AnswerRequest(BaseModel):
    is_correct: bool
    confidence: float | None = None
    # low / medium / high button; ignored when confidence is given
    confidence_level: ConfidenceLevel | None = None
    response_ms: float | None = None
    now: datetime | None = None


class AnswerResponse(ScheduleResponse):
    stage: str


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Stateless scheduling
# ---------------------------------------------------------------------------


@app.post("/schedule", response_model=ScheduleResponse)
async def schedule(req: ScheduleRequest):
    """
    Compute the next review for one card from an explicit prior state.
    """
    try:
        prior = ProgressState(**req.prior.model_dump()) if req.prior else None
        outcome = ReviewOutcome(**req.outcome.model_dump())
        result = schedule_next_review(req.now or _utcnow(), prior, outcome)
        return ScheduleResponse(**result.to_dict())
    except Exception as e:
        logger.error(f"Scheduling failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e)) from e


@app.post("/session/select", response_model=SessionResponse)
async def select_session(req: SessionRequest):
    """
    Select a capped session from candidate cards.

    With order=false the cards are assumed to be sorted already.
    """
    cap = config.daily_cap if req.daily_cap is None else req.daily_cap
    cards = [c.to_domain() for c in req.cards]
    pool = order_session_pool(cards) if req.order else cards
    selected = select_session_cards(pool, cap)
    return SessionResponse(cards=[CardModel.from_domain(c) for c in selected], daily_cap=cap)


@app.get("/session/new-limit")
async def new_card_limit(total_new: int, daily_cap: int | None = None):
    cap = config.new_card_cap if daily_cap is None else daily_cap
    return {"limit": pick_daily_new_limit(total_new, cap)}


# ---------------------------------------------------------------------------
# Learner progress (in-memory store)
# ---------------------------------------------------------------------------


@app.post(
    "/learners/{learner_id}/cards/{card_id}/answer",
    response_model=AnswerResponse,
)
async def answer_card(learner_id: str, card_id: str, req: AnswerRequest):
    """Record a right/wrong answer and return the card's new schedule."""
    confidence = req.confidence
    if confidence is None and req.confidence_level is not None:
        confidence = confidence_for_level(req.confidence_level)

    try:
        result = await review_service.answer_card(
            learner_id,
            card_id,
            is_correct=req.is_correct,
            confidence=confidence,
            response_ms=req.response_ms,
            now=req.now,
        )
        return AnswerResponse(**result.to_dict(), stage=stage_after_answer(req.is_correct))
    except Exception as e:
        logger.error(f"Answer failed for {learner_id}/{card_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e)) from e


@app.post("/learners/{learner_id}/session", response_model=SessionResponse)
async def learner_session(learner_id: str, req: SessionRequest):
    """
    Build a session using the learner's stored progress.

    Stored stage and due time override what the request carries.
    """
    try:
        cap = review_service.daily_cap if req.daily_cap is None else req.daily_cap
        cards = [c.to_domain() for c in req.cards]
        selected = await review_service.build_session(learner_id, cards, daily_cap=cap)
        return SessionResponse(
            cards=[CardModel.from_domain(c) for c in selected],
            daily_cap=cap,
        )
    except Exception as e:
        logger.error(f"Session build failed for {learner_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e)) from e


@app.get("/learners/{learner_id}/cards/{card_id}")
async def get_progress(learner_id: str, card_id: str):
    record = await repository.get(learner_id, card_id)
    if record is None:
        raise HTTPException(status_code=404, detail="No progress recorded for this card")
    return {
        "learner_id": record.learner_id,
        "card_id": record.card_id,
        "stage": record.stage,
        "ease_factor": record.state.ease_factor,
        "repetitions": record.state.repetitions,
        "interval_minutes": record.state.interval_minutes,
        "last_grade": record.state.last_grade,
        "response_ms_avg": record.state.response_ms_avg,
        "confidence_avg": record.state.confidence_avg,
        "due_at": to_iso(record.due_at) if record.due_at else None,
        "last_reviewed_at": to_iso(record.last_reviewed_at) if record.last_reviewed_at else None,
        "first_reviewed_at": to_iso(record.first_reviewed_at) if record.first_reviewed_at else None,
    }

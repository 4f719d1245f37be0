"""
Learning progress endpoints.
"""
from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlmodel import Session
from typing import Optional
import logging

from lexitrack.core.database import get_session
from lexitrack.schemas.learning import (
    LearningEvent,
    ProcessEventResponse,
    KnownWordsResponse,
    ReviewDueResponse,
    ProgressSummaryResponse,
    LexemeProgressResponse,
    AnalyzeTurnRequest,
)
from lexitrack.schemas.queue import JobAcceptedResponse
from lexitrack.services import srs_service
from lexitrack.services.queue_service import learning_queue, UPDATE_PROGRESS_JOB, ANALYZE_TURN_JOB
from lexitrack.utils.text_utils import normalize_lemma, normalize_pos
from lexitrack.api.v1.endpoints.utils import require_user_id, resolve_language

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/learning", tags=["learning"])


@router.post("/process-event", response_model=ProcessEventResponse)
def process_event(
    event: LearningEvent,
    background_tasks: BackgroundTasks,
    queued: bool = False,
    session: Session = Depends(get_session)
):
    """
    Apply a learning event to the user's progress.

    With queued=true the event is handed to the learning queue and processed
    after the response is sent; the returned job_id can be polled at /queue/jobs.
    """
    if queued:
        job_id = learning_queue.add(UPDATE_PROGRESS_JOB, {'learning_event': event.model_dump(mode='json')})
        background_tasks.add_task(learning_queue.run, job_id)
        return ProcessEventResponse(
            message="Learning event queued",
            lexemes_processed=0,
            queued=True,
            job_id=job_id
        )

    processed = srs_service.process_learning_event(session, event)
    logger.info(f"Learning event processed for user {event.user_id}: {processed} lexeme(s)")

    return ProcessEventResponse(
        message="Learning event processed successfully",
        lexemes_processed=processed
    )


@router.get("/known-words", response_model=KnownWordsResponse)
def get_known_words(
    user_id: Optional[str] = None,
    language: Optional[str] = None,
    min_level: int = Query(srs_service.DEFAULT_KNOWN_MIN_LEVEL, ge=1, le=srs_service.MAX_LEVEL),
    session: Session = Depends(get_session)
):
    """Lemmas at or above min_level with an overall success rate above 0.7."""
    user_id = require_user_id(user_id)
    language = resolve_language(language)

    known_words = srs_service.get_known_words(session, user_id, language, min_level)
    return KnownWordsResponse(
        known_words=known_words,
        count=len(known_words),
        min_level=min_level,
        language=language
    )


@router.get("/review-due", response_model=ReviewDueResponse)
def get_review_due(
    user_id: Optional[str] = None,
    language: Optional[str] = None,
    limit: int = Query(10, ge=1, le=100),
    session: Session = Depends(get_session)
):
    """Lexemes due for review, most overdue and least mastered first."""
    user_id = require_user_id(user_id)
    language = resolve_language(language)

    review_words = srs_service.get_review_due(session, user_id, language, limit)
    return ReviewDueResponse(
        review_words=review_words,
        count=len(review_words),
        language=language
    )


@router.get("/progress", response_model=ProgressSummaryResponse)
def get_progress(
    user_id: Optional[str] = None,
    language: Optional[str] = None,
    session: Session = Depends(get_session)
):
    """Aggregate progress summary for a user in one language."""
    user_id = require_user_id(user_id)
    return srs_service.get_user_progress(session, user_id, resolve_language(language))


@router.get("/lexeme", response_model=LexemeProgressResponse)
def get_lexeme_progress(
    lemma: str,
    user_id: Optional[str] = None,
    language: Optional[str] = None,
    pos: Optional[str] = None,
    session: Session = Depends(get_session)
):
    """Progress of one lemma with per-form statistics, weakest forms and error patterns."""
    user_id = require_user_id(user_id)
    return srs_service.get_lexeme_progress(
        session,
        user_id,
        resolve_language(language),
        normalize_lemma(lemma),
        normalize_pos(pos) if pos else None
    )


@router.post("/analyze-turn", response_model=JobAcceptedResponse, status_code=status.HTTP_202_ACCEPTED)
def analyze_turn(
    request: AnalyzeTurnRequest,
    background_tasks: BackgroundTasks
):
    """
    Queue analysis of a conversation turn.

    The utterance is sent to the completion endpoint in the background and the
    resulting observations are applied to the user's progress.
    """
    job_id = learning_queue.add(ANALYZE_TURN_JOB, request.model_dump(mode='json'))
    background_tasks.add_task(learning_queue.run, job_id)

    return JobAcceptedResponse(
        job_id=job_id,
        name=ANALYZE_TURN_JOB,
        status="waiting",
        message="Turn analysis queued. Use the job_id to check status."
    )

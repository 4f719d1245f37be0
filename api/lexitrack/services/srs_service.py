"""
SRS (Spaced Repetition System) service implementing the Leitner system.

This service turns lexeme observations into per-user progress records: per-form
statistics embedded under each lemma, word-level aggregates derived from them,
a Leitner level (box 1-5) and a next review date.
"""
import logging
from collections import Counter
from datetime import datetime, date, timedelta
from threading import Lock
from typing import Dict, List, Optional, Tuple, Union
from sqlmodel import Session, select, func
from sqlalchemy import and_, case
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from lexitrack.core.exceptions import LexitrackException, NotFoundError, PersistenceError
from lexitrack.languages import extract_morph_features
from lexitrack.models.enums import PerformanceType
from lexitrack.models.learning_progress import LearningProgress, FormStats
from lexitrack.models.lexeme import Lexeme
from lexitrack.models.user import User
from lexitrack.schemas.learning import (
    LearningEvent,
    LexemeObservation,
    WordLevelStats,
    ErrorPattern,
    ReviewItem,
    ProgressSummaryResponse,
    LexemeProgressResponse,
)
from lexitrack.utils.time_utils import utc_now, utc_today

logger = logging.getLogger(__name__)


# Leitner boxes. Box n is reviewed after 2^(n-1) days: 1, 2, 4, 8, 16
MIN_LEVEL = 1
MAX_LEVEL = 5

# Form statistics
MAX_ERROR_TAGS = 5
WEAK_FORM_THRESHOLD = 0.7
MAX_WEAKEST_FORMS = 3

# Known-vocabulary filter
KNOWN_WORD_SUCCESS_RATE = 0.7
DEFAULT_KNOWN_MIN_LEVEL = 3

# Error tag recorded for a wrong_use observation that carries none
DEFAULT_ERROR_TAGS = {
    'VERB': 'verb form error',
    'NOUN': 'noun case error',
    'ADJ': 'adjective agreement error',
    'PRON': 'pronoun form error',
}
FALLBACK_ERROR_TAG = 'usage error'


def record_observation(
    current_level: Optional[int],
    performance: Union[PerformanceType, str]
) -> Tuple[int, int]:
    """
    Compute the new Leitner level and review interval for one observation.

    Args:
        current_level: Current level (1-5); None or 0 is treated as level 1
        performance: Observed outcome

    Returns:
        Tuple of (new level, interval in days)

    Raises:
        ValueError: If performance is not a known outcome
    """
    performance = PerformanceType(performance)
    level = current_level or MIN_LEVEL
    level = max(MIN_LEVEL, min(MAX_LEVEL, level))

    if performance == PerformanceType.CORRECT_USE:
        new_level = min(level + 1, MAX_LEVEL)
        return new_level, 2 ** (new_level - 1)

    # introduced, wrong_use and recall_fail all restart the lemma in box 1
    return MIN_LEVEL, 1


def calculate_next_review_date(interval_days: int, base_date: date = None) -> date:
    """Date of the next review, interval_days after base_date (defaults to today, UTC)."""
    if base_date is None:
        base_date = utc_today()
    return base_date + timedelta(days=interval_days)


def default_error_tag(pos: str) -> str:
    return DEFAULT_ERROR_TAGS.get((pos or '').upper(), FALLBACK_ERROR_TAG)


def update_form_statistics(
    form_stats: Dict[str, FormStats],
    form: str,
    performance: Union[PerformanceType, str],
    error_tag: Optional[str] = None,
    morph_features: Optional[Dict[str, str]] = None,
    now: datetime = None
) -> FormStats:
    """
    Apply one observation to the statistics of a surface form.

    The mapping is updated in place; a record is created for forms not seen before.
    The success rate is recomputed from the counters every time.

    Args:
        form_stats: Mapping from surface form to its statistics
        form: The observed surface form
        performance: Observed outcome
        error_tag: Error description; kept only for wrong_use, deduplicated and
                   capped at the MAX_ERROR_TAGS most recent tags
        morph_features: Features of the form; stored when the form has none yet
        now: Observation time (defaults to now)

    Returns:
        The updated FormStats record
    """
    performance = PerformanceType(performance)
    if now is None:
        now = utc_now()

    stats = form_stats.get(form)
    if stats is None:
        stats = FormStats()
        form_stats[form] = stats

    stats.encounters += 1
    if performance == PerformanceType.CORRECT_USE:
        stats.correct += 1
    stats.success_rate = stats.correct / stats.encounters
    stats.last_seen = now

    if performance == PerformanceType.WRONG_USE and error_tag:
        if error_tag not in stats.common_errors:
            stats.common_errors.append(error_tag)
            if len(stats.common_errors) > MAX_ERROR_TAGS:
                # Oldest tag is evicted first
                stats.common_errors = stats.common_errors[-MAX_ERROR_TAGS:]

    if morph_features and not stats.morph_features:
        stats.morph_features = dict(morph_features)

    return stats


def derive_word_level_stats(form_stats: Dict[str, FormStats]) -> WordLevelStats:
    """
    Aggregate per-form statistics of one lemma.

    Weakest forms are attempted forms (encounters > 0) whose success rate is below
    WEAK_FORM_THRESHOLD, lowest rate first, at most MAX_WEAKEST_FORMS.
    """
    total_encounters = sum(s.encounters for s in form_stats.values())
    total_correct = sum(s.correct for s in form_stats.values())
    overall_success_rate = total_correct / total_encounters if total_encounters > 0 else 0.0

    weak = [
        (form, s.correct / s.encounters)
        for form, s in form_stats.items()
        if s.encounters > 0 and s.correct / s.encounters < WEAK_FORM_THRESHOLD
    ]
    # sorted() is stable, so equally weak forms keep first-seen order
    weak.sort(key=lambda item: item[1])

    return WordLevelStats(
        total_encounters=total_encounters,
        total_correct=total_correct,
        overall_success_rate=overall_success_rate,
        weakest_forms=[form for form, _ in weak[:MAX_WEAKEST_FORMS]],
    )


def derive_error_patterns(form_stats: Dict[str, FormStats]) -> List[ErrorPattern]:
    """Count error tags across all forms of a lemma, most frequent first."""
    counter = Counter(
        tag for stats in form_stats.values() for tag in stats.common_errors
    )
    return [ErrorPattern(error=tag, count=count) for tag, count in counter.most_common()]


# Striped locks serialize the read-modify-write of a progress record within this
# process; a (user, lexeme) key always maps to the same stripe. The row lock taken
# by the SELECT covers other processes on databases that support FOR UPDATE.
PROGRESS_LOCK_STRIPES = 64
_progress_locks: List[Lock] = [Lock() for _ in range(PROGRESS_LOCK_STRIPES)]


def _progress_lock(user_id: str, lexeme_id: int) -> Lock:
    return _progress_locks[hash((user_id, lexeme_id)) % PROGRESS_LOCK_STRIPES]


def ensure_user(session: Session, user_id: str) -> User:
    """Get the user, creating it if absent."""
    user = session.get(User, user_id)
    if user:
        return user

    try:
        user = User(id=user_id)
        session.add(user)
        session.commit()
        session.refresh(user)
        logger.info(f"Created user {user_id}")
        return user
    except IntegrityError:
        # Created concurrently by another request
        session.rollback()
        user = session.get(User, user_id)
        if user is None:
            raise
        return user


def ensure_lexeme(session: Session, lemma: str, language: str, pos: str) -> Lexeme:
    """Get the (lemma, language, pos) lexeme, creating it if absent."""
    query = select(Lexeme).where(
        Lexeme.lemma == lemma,
        Lexeme.language == language,
        Lexeme.pos == pos
    )
    lexeme = session.exec(query).first()
    if lexeme:
        return lexeme

    try:
        lexeme = Lexeme(lemma=lemma, language=language, pos=pos)
        session.add(lexeme)
        session.commit()
        session.refresh(lexeme)
        logger.info(f"Created lexeme {lemma} ({language}, {pos})")
        return lexeme
    except IntegrityError:
        session.rollback()
        lexeme = session.exec(query).first()
        if lexeme is None:
            raise
        return lexeme


def update_user_progress(
    session: Session,
    user_id: str,
    language: str,
    observation: LexemeObservation,
    now: datetime = None
) -> LearningProgress:
    """
    Apply one lexeme observation to the user's progress record and persist it.

    This function:
    - Ensures the user and lexeme exist
    - Loads the progress record (locked) or initializes a new one at level 1
    - Updates the statistics of the observed surface form; morphological features
      are extracted only when the form differs from the lemma
    - Recomputes word-level aggregates from the form statistics
    - Moves the Leitner level and schedules the next review
    - Commits the record

    Args:
        session: Database session
        user_id: Learner ID
        language: Language code of the observation
        observation: The lexeme observation
        now: Observation time (defaults to now)

    Returns:
        The persisted LearningProgress

    Raises:
        PersistenceError: If reading or writing the record fails
    """
    if now is None:
        now = utc_now()

    try:
        ensure_user(session, user_id)
        lexeme = ensure_lexeme(session, observation.lemma, language, observation.pos)
    except SQLAlchemyError as e:
        session.rollback()
        raise PersistenceError(
            f"Failed to upsert user/lexeme for '{observation.lemma}': {str(e)}",
            lemma=observation.lemma
        ) from e

    with _progress_lock(user_id, lexeme.id):
        try:
            progress = session.exec(
                select(LearningProgress)
                .where(
                    LearningProgress.user_id == user_id,
                    LearningProgress.lexeme_id == lexeme.id
                )
                .with_for_update()
            ).first()

            if progress is None:
                progress = LearningProgress(
                    user_id=user_id,
                    lexeme_id=lexeme.id,
                    srs_level=MIN_LEVEL,
                    next_review=now.date(),
                    created_at=now,
                )

            form_stats = progress.get_form_stats()

            if observation.form == observation.lemma:
                # Uninflected: nothing to analyse
                morph_features = {}
            else:
                morph_features = extract_morph_features(observation.form, observation.pos, language)

            error_tag = None
            if observation.performance == PerformanceType.WRONG_USE:
                error_tag = observation.error or default_error_tag(observation.pos)

            update_form_statistics(
                form_stats,
                observation.form,
                observation.performance,
                error_tag=error_tag,
                morph_features=morph_features,
                now=now
            )
            word_stats = derive_word_level_stats(form_stats)

            previous_level = progress.srs_level
            new_level, interval_days = record_observation(previous_level, observation.performance)

            progress.set_form_stats(form_stats)
            progress.total_encounters = word_stats.total_encounters
            progress.correct_uses = word_stats.total_correct
            progress.success_rate = word_stats.overall_success_rate
            progress.srs_level = new_level
            progress.next_review = calculate_next_review_date(interval_days, now.date())
            progress.last_seen = now
            progress.active = True
            progress.updated_at = now

            session.add(progress)
            session.commit()
            session.refresh(progress)
        except SQLAlchemyError as e:
            session.rollback()
            raise PersistenceError(
                f"Failed to update progress for '{observation.lemma}': {str(e)}",
                lemma=observation.lemma
            ) from e

    logger.info(
        f"Progress for user {user_id}, lemma {observation.lemma} ({language}): "
        f"{observation.performance.value} form={observation.form}, "
        f"level {previous_level} -> {new_level}, next_review={progress.next_review}, "
        f"success_rate={progress.success_rate:.2f}"
    )
    return progress


def process_learning_event(session: Session, event: LearningEvent, now: datetime = None) -> int:
    """
    Apply every observation of a learning event in order.

    Observations are committed one at a time. The first failure stops the batch:
    observations already committed stay, the rest are not applied, and the error
    is raised to the caller.

    Returns:
        Number of observations processed
    """
    logger.info(
        f"Processing learning event: user={event.user_id}, language={event.language}, "
        f"lexemes={len(event.lexemes)}"
    )

    for index, observation in enumerate(event.lexemes, 1):
        try:
            update_user_progress(session, event.user_id, event.language, observation, now=now)
        except LexitrackException:
            logger.error(
                f"Learning event aborted at lexeme {index}/{len(event.lexemes)} ({observation.lemma})"
            )
            raise
        except Exception as e:
            logger.error(
                f"Learning event aborted at lexeme {index}/{len(event.lexemes)} ({observation.lemma}): {str(e)}"
            )
            raise PersistenceError(
                f"Failed to process lexeme '{observation.lemma}': {str(e)}",
                lemma=observation.lemma
            ) from e

    if event.grammar_hints:
        logger.info(f"Grammar hints for user {event.user_id}: {event.grammar_hints}")

    return len(event.lexemes)


def get_known_words(
    session: Session,
    user_id: str,
    language: str,
    min_level: int = DEFAULT_KNOWN_MIN_LEVEL
) -> List[str]:
    """Lemmas at or above min_level with success rate above KNOWN_WORD_SUCCESS_RATE."""
    results = session.exec(
        select(Lexeme.lemma)
        .join(LearningProgress, LearningProgress.lexeme_id == Lexeme.id)
        .where(
            LearningProgress.user_id == user_id,
            Lexeme.language == language,
            LearningProgress.srs_level >= min_level,
            LearningProgress.success_rate > KNOWN_WORD_SUCCESS_RATE,
            LearningProgress.active == True  # noqa: E712
        )
        .order_by(Lexeme.lemma)
    ).all()
    return list(results)


def get_review_due(
    session: Session,
    user_id: str,
    language: str,
    limit: int = 10,
    today: date = None
) -> List[ReviewItem]:
    """
    Lexemes whose next review date is today or earlier.

    Ordered most overdue first, then least mastered first.
    """
    if today is None:
        today = utc_today()

    rows = session.exec(
        select(LearningProgress, Lexeme)
        .join(Lexeme, LearningProgress.lexeme_id == Lexeme.id)
        .where(
            LearningProgress.user_id == user_id,
            Lexeme.language == language,
            LearningProgress.next_review <= today,
            LearningProgress.active == True  # noqa: E712
        )
        .order_by(LearningProgress.next_review, LearningProgress.srs_level)
        .limit(limit)
    ).all()

    return [
        ReviewItem(
            lemma=lexeme.lemma,
            pos=lexeme.pos,
            srs_level=progress.srs_level,
            success_rate=progress.success_rate,
            next_review=progress.next_review,
            days_overdue=(today - progress.next_review).days
        )
        for progress, lexeme in rows
    ]


def get_user_progress(
    session: Session,
    user_id: str,
    language: str,
    today: date = None
) -> ProgressSummaryResponse:
    """Aggregate progress of active records for a user in one language."""
    if today is None:
        today = utc_today()

    row = session.exec(
        select(
            func.count(LearningProgress.id),
            func.sum(case(
                (and_(
                    LearningProgress.srs_level >= DEFAULT_KNOWN_MIN_LEVEL,
                    LearningProgress.success_rate > KNOWN_WORD_SUCCESS_RATE
                ), 1),
                else_=0
            )),
            func.sum(case((LearningProgress.next_review <= today, 1), else_=0)),
            func.avg(LearningProgress.success_rate),
            func.max(LearningProgress.last_seen),
        )
        .select_from(LearningProgress)
        .join(Lexeme, LearningProgress.lexeme_id == Lexeme.id)
        .where(
            LearningProgress.user_id == user_id,
            Lexeme.language == language,
            LearningProgress.active == True  # noqa: E712
        )
    ).one()

    total_words, known_words, review_due, average_success_rate, last_activity = row

    return ProgressSummaryResponse(
        user_id=user_id,
        language=language,
        total_words=total_words or 0,
        known_words=int(known_words or 0),
        review_due=int(review_due or 0),
        average_success_rate=float(average_success_rate or 0.0),
        last_activity=last_activity
    )


def get_lexeme_progress(
    session: Session,
    user_id: str,
    language: str,
    lemma: str,
    pos: Optional[str] = None
) -> LexemeProgressResponse:
    """
    Full progress record for one lemma, with weakest forms and error patterns derived on read.

    Raises:
        NotFoundError: If the user has no progress for the lemma
    """
    query = (
        select(LearningProgress, Lexeme)
        .join(Lexeme, LearningProgress.lexeme_id == Lexeme.id)
        .where(
            LearningProgress.user_id == user_id,
            Lexeme.language == language,
            Lexeme.lemma == lemma
        )
    )
    if pos:
        query = query.where(Lexeme.pos == pos)

    row = session.exec(query.order_by(Lexeme.pos)).first()
    if row is None:
        raise NotFoundError(f"No progress for lemma '{lemma}' ({language}) for user {user_id}")

    progress, lexeme = row
    form_stats = progress.get_form_stats()
    word_stats = derive_word_level_stats(form_stats)

    return LexemeProgressResponse(
        lemma=lexeme.lemma,
        language=lexeme.language,
        pos=lexeme.pos,
        srs_level=progress.srs_level,
        success_rate=progress.success_rate,
        next_review=progress.next_review,
        total_encounters=progress.total_encounters,
        correct_uses=progress.correct_uses,
        active=progress.active,
        last_seen=progress.last_seen,
        form_stats=form_stats,
        weakest_forms=word_stats.weakest_forms,
        error_patterns=derive_error_patterns(form_stats)
    )

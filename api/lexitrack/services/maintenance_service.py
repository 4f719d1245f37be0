"""
Administrative database operations: sample data and progress cleanup.
"""
import logging
from typing import Optional
from sqlmodel import Session, select

from lexitrack.models.learning_progress import LearningProgress
from lexitrack.models.lexeme import Lexeme
from lexitrack.services.srs_service import ensure_user, ensure_lexeme

logger = logging.getLogger(__name__)

SAMPLE_USER_ID = 'user123'

# Base forms of common Russian words
SAMPLE_LEXEMES = [
    # Nouns
    ('собака', 'NOUN'),
    ('кот', 'NOUN'),
    ('книга', 'NOUN'),
    ('дом', 'NOUN'),
    # Verbs (infinitive)
    ('быть', 'VERB'),
    ('идти', 'VERB'),
    ('читать', 'VERB'),
    ('говорить', 'VERB'),
    ('видеть', 'VERB'),
    # Adjectives
    ('большой', 'ADJ'),
    ('маленький', 'ADJ'),
    ('красивый', 'ADJ'),
    ('хороший', 'ADJ'),
    # Interjections
    ('привет', 'INTJ'),
    ('спасибо', 'INTJ'),
    ('пожалуйста', 'INTJ'),
]


def create_sample_data(session: Session) -> int:
    """
    Insert a sample user and sample Russian lexemes. Safe to run repeatedly.

    Returns:
        Number of sample lexemes ensured
    """
    ensure_user(session, SAMPLE_USER_ID)
    for lemma, pos in SAMPLE_LEXEMES:
        ensure_lexeme(session, lemma, 'ru', pos)
    logger.info(f"Sample data ensured: user {SAMPLE_USER_ID}, {len(SAMPLE_LEXEMES)} lexemes")
    return len(SAMPLE_LEXEMES)


def delete_user_progress(session: Session, user_id: str, language: Optional[str] = None) -> int:
    """
    Delete a user's progress records, optionally only for one language.

    Returns:
        Number of records deleted
    """
    query = select(LearningProgress).where(LearningProgress.user_id == user_id)
    if language:
        lexeme_ids = select(Lexeme.id).where(Lexeme.language == language)
        query = query.where(LearningProgress.lexeme_id.in_(lexeme_ids))  # type: ignore[attr-defined]

    records = session.exec(query).all()
    for record in records:
        session.delete(record)

    try:
        session.commit()
    except Exception:
        session.rollback()
        raise

    logger.info(f"Deleted {len(records)} progress record(s) for user {user_id} (language={language or 'all'})")
    return len(records)

"""
Lexeme model.
"""
from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import DateTime, UniqueConstraint, Index
from typing import Optional, List, TYPE_CHECKING
from datetime import datetime

from lexitrack.utils.time_utils import utc_now

if TYPE_CHECKING:
    from lexitrack.models.learning_progress import LearningProgress


class Lexeme(SQLModel, table=True):
    """Lexeme table - a dictionary headword: (lemma, language, part of speech)."""
    __tablename__ = "lexeme"
    __table_args__ = (
        UniqueConstraint("lemma", "language", "pos", name="uq_lexeme_lemma_language_pos"),
        Index("ix_lexeme_language_lemma", "language", "lemma"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    lemma: str  # Dictionary base form, normalized lowercase
    language: str = Field(max_length=8)  # Language code, e.g. 'ru'
    pos: str = Field(max_length=8)  # Universal POS tag, e.g. 'VERB'
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))

    # Relationships
    progress: List["LearningProgress"] = Relationship(back_populates="lexeme")

"""
LearningProgress model.
"""
from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import Column, DateTime, JSON, UniqueConstraint, Index
from sqlalchemy.dialects.postgresql import JSONB
from pydantic import BaseModel
from typing import Optional, Dict, List, Any, TYPE_CHECKING
from datetime import datetime, date

from lexitrack.utils.time_utils import utc_now, utc_today

if TYPE_CHECKING:
    from lexitrack.models.user import User
    from lexitrack.models.lexeme import Lexeme


class FormStats(BaseModel):
    """Statistics for one surface form of a lexeme, embedded in LearningProgress."""
    encounters: int = 0
    correct: int = 0
    success_rate: float = 0.0  # Always correct / encounters
    common_errors: List[str] = []  # Most recent distinct error tags, oldest first
    last_seen: Optional[datetime] = None
    morph_features: Dict[str, str] = {}


class LearningProgress(SQLModel, table=True):
    """LearningProgress table - one SRS record per (user, lexeme)."""
    __tablename__ = "learning_progress"
    __table_args__ = (
        UniqueConstraint("user_id", "lexeme_id", name="uq_learning_progress_user_lexeme"),
        Index("ix_learning_progress_next_review", "next_review"),
        Index("ix_learning_progress_active", "active"),
        Index("ix_learning_progress_srs_level", "srs_level"),
        Index("ix_learning_progress_user_id", "user_id"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(foreign_key="user.id", max_length=128)
    lexeme_id: int = Field(foreign_key="lexeme.id")
    srs_level: int = Field(default=1)  # Leitner box 1-5
    last_seen: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    success_rate: float = Field(default=0.0)  # Overall correct / encounters across forms
    next_review: date = Field(default_factory=utc_today)  # UTC date
    total_encounters: int = Field(default=0)
    correct_uses: int = Field(default=0)
    active: bool = Field(default=True)
    form_stats: Dict[str, Any] = Field(
        default_factory=dict,
        sa_column=Column(JSON().with_variant(JSONB(), "postgresql"), nullable=False),
    )
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
    updated_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))

    # Relationships
    user: "User" = Relationship(back_populates="progress")
    lexeme: "Lexeme" = Relationship(back_populates="progress")

    def get_form_stats(self) -> Dict[str, FormStats]:
        """Typed view of the embedded per-form statistics."""
        return {
            form: FormStats.model_validate(data)
            for form, data in (self.form_stats or {}).items()
        }

    def set_form_stats(self, stats: Dict[str, FormStats]) -> None:
        # Assign a new dict so the JSON column is flagged dirty
        self.form_stats = {form: s.model_dump(mode="json") for form, s in stats.items()}

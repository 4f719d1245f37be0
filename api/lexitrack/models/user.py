"""
User model.
"""
from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import DateTime
from typing import List, TYPE_CHECKING
from datetime import datetime

from lexitrack.utils.time_utils import utc_now

if TYPE_CHECKING:
    from lexitrack.models.learning_progress import LearningProgress


class User(SQLModel, table=True):
    """User table - a learner, identified by the id the tutor client sends."""
    __tablename__ = "user"

    id: str = Field(primary_key=True, max_length=128)
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))

    # Relationships
    progress: List["LearningProgress"] = Relationship(back_populates="user")

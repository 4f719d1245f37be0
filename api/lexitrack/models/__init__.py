"""
Models package - imports all models so SQLModel registers their tables.
"""
from lexitrack.models.enums import PerformanceType, PartOfSpeech
from lexitrack.models.user import User
from lexitrack.models.lexeme import Lexeme
from lexitrack.models.learning_progress import LearningProgress, FormStats

__all__ = [
    'PerformanceType',
    'PartOfSpeech',
    'User',
    'Lexeme',
    'LearningProgress',
    'FormStats',
]

"""
Custom exceptions for the application.
"""


class LexitrackException(Exception):
    """Base exception for all Lexitrack application exceptions."""
    pass


class ValidationError(LexitrackException):
    """Raised when validation fails."""
    pass


class NotFoundError(LexitrackException):
    """Raised when a requested resource is not found."""
    pass


class ConflictError(LexitrackException):
    """Raised when there's a conflict (e.g., duplicate entry)."""
    pass


class AnalysisError(LexitrackException):
    """Raised when the completion endpoint fails or returns unusable structured output."""
    pass


class PersistenceError(LexitrackException):
    """Raised when a progress record cannot be read or written."""

    def __init__(self, message: str, lemma: str = None):
        super().__init__(message)
        self.lemma = lemma

"""
Utility functions for endpoint operations.
"""
from typing import Optional

from lexitrack.core.config import settings
from lexitrack.core.exceptions import ValidationError
from lexitrack.utils.text_utils import normalize_language_code


def require_user_id(user_id: Optional[str]) -> str:
    """
    Validate a user_id query parameter.

    Args:
        user_id: Raw parameter value

    Returns:
        The user id with surrounding whitespace removed

    Raises:
        ValidationError: If the value is missing or blank
    """
    if user_id is None or not user_id.strip():
        raise ValidationError("user_id parameter is required")
    return user_id.strip()


def resolve_language(language: Optional[str]) -> str:
    return normalize_language_code(language or settings.default_language)

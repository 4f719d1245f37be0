"""
Text utility functions.
"""


def normalize_lemma(term: str) -> str:
    """
    Normalize a lemma or surface form for storage and lookup.

    Trims surrounding whitespace and sentence punctuation the analyser sometimes
    leaves attached (".", ",", "!", "?") and lowercases the result.

    Args:
        term: The lemma or surface form to normalize

    Returns:
        Normalized term
    """
    if not term:
        return term
    return term.strip().strip('.,!?;:').strip().lower()


def normalize_language_code(code: str) -> str:
    """Language codes are stored lowercase, e.g. 'ru'."""
    return code.strip().lower() if code else code


def normalize_pos(pos: str) -> str:
    """Part-of-speech tags are stored uppercase, e.g. 'VERB'."""
    return pos.strip().upper() if pos else pos

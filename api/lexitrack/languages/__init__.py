"""
Registry of supported languages and table-driven morphological feature extraction.
"""
import logging
import re
from typing import Dict, List

from lexitrack.languages.types import LanguageConfig, MorphologicalPattern
from lexitrack.languages.russian import russian_config
from lexitrack.languages.spanish import spanish_config

logger = logging.getLogger(__name__)

SUPPORTED_LANGUAGES: Dict[str, LanguageConfig] = {
    'ru': russian_config,
    'es': spanish_config,
}

DEFAULT_LANGUAGE = 'ru'


def get_language_config(language_code: str) -> LanguageConfig:
    """
    Get language configuration by code.

    Unknown codes fall back to the default language with a warning.
    """
    config = SUPPORTED_LANGUAGES.get((language_code or '').lower())
    if config is None:
        logger.warning(f"Language {language_code} not supported, falling back to {DEFAULT_LANGUAGE}")
        return SUPPORTED_LANGUAGES[DEFAULT_LANGUAGE]
    return config


def _patterns_for_pos(config: LanguageConfig, pos: str) -> List[MorphologicalPattern]:
    pos_lower = (pos or '').lower()
    if pos_lower == 'verb':
        return config.morphology.verbs
    if pos_lower == 'noun':
        return config.morphology.nouns
    if pos_lower in ('adj', 'adjective'):
        return config.morphology.adjectives
    if pos_lower in ('pron', 'pronoun'):
        return config.morphology.pronouns
    return []


def extract_morph_features(form: str, pos: str, language_code: str) -> Dict[str, str]:
    """
    Extract morphological features of a surface form from the language's suffix rules.

    Rules are tried in declaration order and the first match wins; there is no
    disambiguation between rules that could both apply. Returns an empty dict when
    the part of speech has no rules or no rule matches.

    Args:
        form: The surface form as used in the utterance
        pos: Part of speech tag (VERB, NOUN, ADJ, PRON; other tags have no rules)
        language_code: Language code of the form

    Returns:
        Feature mapping such as {'person': '1', 'number': 'sing', 'tense': 'pres'}
    """
    config = get_language_config(language_code)
    for rule in _patterns_for_pos(config, pos):
        if re.search(rule.pattern, form):
            return dict(rule.features)
    return {}


def get_supported_language_codes() -> List[str]:
    return list(SUPPORTED_LANGUAGES.keys())


def get_supported_languages() -> List[Dict[str, str]]:
    """List supported languages with their display metadata."""
    return [
        {'code': config.code, 'name': config.name, 'native_name': config.native_name}
        for config in SUPPORTED_LANGUAGES.values()
    ]


def is_language_supported(language_code: str) -> bool:
    return (language_code or '').lower() in SUPPORTED_LANGUAGES

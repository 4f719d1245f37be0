"""
Model enums.
"""
from enum import Enum


class PerformanceType(str, Enum):
    """How the learner performed with a lexeme in one utterance."""
    INTRODUCED = "introduced"
    CORRECT_USE = "correct_use"
    WRONG_USE = "wrong_use"
    RECALL_FAIL = "recall_fail"


class PartOfSpeech(str, Enum):
    """Universal part-of-speech tags produced by the turn analyser."""
    NOUN = "NOUN"
    VERB = "VERB"
    ADJ = "ADJ"
    ADV = "ADV"
    PRON = "PRON"
    PREP = "PREP"
    CONJ = "CONJ"
    INTJ = "INTJ"
    NUM = "NUM"
    PART = "PART"

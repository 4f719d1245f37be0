"""
Language configuration types for morphological analysis and teaching prompts.
"""
from pydantic import BaseModel
from typing import List, Dict, Optional


class MorphologicalPattern(BaseModel):
    """A suffix rule: a regex anchored at the end of the form and the features it implies."""
    pattern: str
    features: Dict[str, str]  # Sparse: person, number, case, gender, tense, aspect, mood


class Morphology(BaseModel):
    verbs: List[MorphologicalPattern]
    nouns: List[MorphologicalPattern]
    adjectives: List[MorphologicalPattern]
    pronouns: List[MorphologicalPattern] = []


class TeachingStrategy(BaseModel):
    description: str
    focus_areas: List[str]
    mix_ratio: str  # e.g. "80% English, 20% target language"


class TeachingStrategies(BaseModel):
    beginner: TeachingStrategy
    intermediate: TeachingStrategy
    advanced: TeachingStrategy


class CorrectExample(BaseModel):
    text: str
    translation: str
    explanation: str


class IncorrectExample(BaseModel):
    text: str
    error: str
    correction: str
    explanation: str


class GrammarExamples(BaseModel):
    correct: List[CorrectExample]
    incorrect: List[IncorrectExample]


class LanguageConfig(BaseModel):
    code: str
    name: str
    native_name: str
    script: Optional[str] = None
    morphology: Morphology
    teaching_strategies: TeachingStrategies
    grammar_examples: GrammarExamples

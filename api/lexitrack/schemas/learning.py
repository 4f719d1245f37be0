"""
Learning event and SRS progress schemas.
"""
from pydantic import BaseModel, Field, field_validator
from typing import List, Optional, Dict, Any
from datetime import datetime, date

from lexitrack.models.enums import PerformanceType
from lexitrack.models.learning_progress import FormStats
from lexitrack.utils.text_utils import normalize_lemma, normalize_language_code, normalize_pos


class LexemeObservation(BaseModel):
    """One vocabulary observation extracted from a user utterance."""
    lemma: str = Field(..., min_length=1, description="Dictionary base form of the word")
    form: str = Field(..., min_length=1, description="Surface form actually used in the utterance")
    pos: str = Field(..., min_length=1, description="Part of speech (NOUN, VERB, ADJ, ...)")
    known: bool = Field(False, description="Whether the analyser believes the user knows this word")
    confidence: float = Field(1.0, ge=0.0, le=1.0, description="Analyser certainty (0-1)")
    performance: PerformanceType = Field(..., description="introduced, correct_use, wrong_use or recall_fail")
    error: Optional[str] = Field(None, description="Short error tag, only used for wrong_use")

    @field_validator('lemma', 'form')
    @classmethod
    def normalize_terms(cls, v: str) -> str:
        v = normalize_lemma(v)
        if not v:
            raise ValueError("must not be empty")
        return v

    @field_validator('pos')
    @classmethod
    def normalize_part_of_speech(cls, v: str) -> str:
        return normalize_pos(v)


class LearningEvent(BaseModel):
    """A batch of observations derived from one user utterance."""
    user_id: str = Field(..., min_length=1, description="Learner identifier")
    language: str = Field(..., min_length=2, description="Target language code, e.g. 'ru'")
    session_id: Optional[str] = None
    timestamp: Optional[datetime] = None
    lexemes: List[LexemeObservation] = Field(default_factory=list)
    grammar_hints: List[str] = Field(default_factory=list)

    @field_validator('user_id')
    @classmethod
    def strip_user_id(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("user_id must not be blank")
        return v

    @field_validator('language')
    @classmethod
    def normalize_language(cls, v: str) -> str:
        return normalize_language_code(v)

    class Config:
        json_schema_extra = {
            "example": {
                "user_id": "demo-user",
                "language": "ru",
                "lexemes": [
                    {
                        "lemma": "читать",
                        "form": "читаю",
                        "pos": "VERB",
                        "known": True,
                        "confidence": 0.9,
                        "performance": "correct_use"
                    }
                ],
                "grammar_hints": ["Correct 1st person singular present tense verb 'читаю'"]
            }
        }


class ProcessEventResponse(BaseModel):
    """Response from submitting a learning event."""
    message: str
    lexemes_processed: int
    queued: bool = False
    job_id: Optional[str] = None


class WordLevelStats(BaseModel):
    """Aggregates across all forms of one lemma."""
    total_encounters: int
    total_correct: int
    overall_success_rate: float
    weakest_forms: List[str]


class ErrorPattern(BaseModel):
    """An error tag and how many forms of the lemma carry it."""
    error: str
    count: int


class KnownWordsResponse(BaseModel):
    """Lemmas the learner knows above a mastery threshold."""
    known_words: List[str]
    count: int
    min_level: int
    language: str


class ReviewItem(BaseModel):
    """A lexeme due for review."""
    lemma: str
    pos: str
    srs_level: int
    success_rate: float
    next_review: date
    days_overdue: int


class ReviewDueResponse(BaseModel):
    """Lexemes whose review date has passed."""
    review_words: List[ReviewItem]
    count: int
    language: str


class ProgressSummaryResponse(BaseModel):
    """Aggregate progress for a user in one language."""
    user_id: str
    language: str
    total_words: int
    known_words: int
    review_due: int
    average_success_rate: float
    last_activity: Optional[datetime] = None


class LexemeProgressResponse(BaseModel):
    """Full progress record for one lexeme including per-form statistics."""
    lemma: str
    language: str
    pos: str
    srs_level: int
    success_rate: float
    next_review: date
    total_encounters: int
    correct_uses: int
    active: bool
    last_seen: Optional[datetime] = None
    form_stats: Dict[str, FormStats]
    weakest_forms: List[str]
    error_patterns: List[ErrorPattern]


class AnalyzeTurnRequest(BaseModel):
    """Request to analyse one conversation turn for vocabulary progress."""
    user_id: str = Field(..., min_length=1)
    utterance: str = Field(..., min_length=1, description="The user's utterance to analyse")
    conversation_context: str = Field("", description="Recent context to judge correctness")
    language: Optional[str] = Field(None, description="Target language code; defaults to the configured language")
    history: List[Dict[str, Any]] = Field(default_factory=list, description="Recent conversation messages")


class AnalyzeTurnResult(BaseModel):
    """Outcome of a processed turn analysis."""
    language: str
    lexemes_processed: int
    grammar_hints: List[str]

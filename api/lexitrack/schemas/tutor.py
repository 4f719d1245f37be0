"""
Tutor supervisor and language registry schemas.
"""
from pydantic import BaseModel, Field
from typing import List, Optional, Dict, Any


class TutorRequest(BaseModel):
    """Request for the next tutoring response."""
    user_id: str = Field(..., min_length=1)
    relevant_context: str = Field(..., min_length=1, description="Key information from the user's last message")
    language: Optional[str] = None
    history: List[Dict[str, Any]] = Field(default_factory=list)


class TutorResponse(BaseModel):
    next_response: str


class AgentConfigResponse(BaseModel):
    """Realtime tutor agent configuration served to the client."""
    name: str
    voice: str
    instructions: str
    tools: List[Dict[str, Any]]


class LanguageInfo(BaseModel):
    code: str
    name: str
    native_name: str


class LanguagesResponse(BaseModel):
    languages: List[LanguageInfo]
    default_language: str

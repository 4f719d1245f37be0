"""
Tutor agent and supervisor endpoints.
"""
from fastapi import APIRouter, Depends
from sqlmodel import Session
from typing import Optional

from lexitrack.core.config import settings
from lexitrack.core.database import get_session
from lexitrack.languages import get_language_config
from lexitrack.schemas.tutor import TutorRequest, TutorResponse, AgentConfigResponse
from lexitrack.services import prompt_service
from lexitrack.services.analysis_service import get_next_tutor_response

router = APIRouter(prefix="/tutor", tags=["tutor"])


@router.post("/respond", response_model=TutorResponse)
def respond(
    request: TutorRequest,
    session: Session = Depends(get_session)
):
    """Next tutoring response from the supervisor model, informed by the learner's SRS data."""
    text = get_next_tutor_response(
        session,
        user_id=request.user_id,
        relevant_context=request.relevant_context,
        language=request.language,
        history=request.history
    )
    return TutorResponse(next_response=text)


@router.get("/agent-config", response_model=AgentConfigResponse)
def get_agent_config(language: Optional[str] = None):
    """Instructions and tool declarations for the realtime tutor agent."""
    config = get_language_config(language or settings.default_language)
    return AgentConfigResponse(
        name="languageTutorAgent",
        voice="sage",
        instructions=prompt_service.generate_tutor_agent_instructions(config),
        tools=prompt_service.tutor_agent_tool_declarations(config.code)
    )

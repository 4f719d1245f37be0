"""
Supervisor tools: conversation-turn analysis and tutoring responses.

Both build prompts, forward them to the completion endpoint and parse the
structured result; the SRS tracker is the only state they touch.
"""
import json
import logging
from typing import Any, Dict, List, Optional, Tuple
from pydantic import ValidationError as PydanticValidationError
from sqlmodel import Session

from lexitrack.core.config import settings
from lexitrack.core.exceptions import AnalysisError
from lexitrack.languages import get_language_config, is_language_supported
from lexitrack.schemas.learning import LearningEvent, LexemeObservation, AnalyzeTurnResult
from lexitrack.services import llm_service, prompt_service, srs_service
from lexitrack.utils.text_utils import normalize_language_code

logger = logging.getLogger(__name__)

MAX_TOOL_ROUNDS = 5


def validate_lexeme_analysis(
    llm_data: Dict[str, Any],
    target_language: str
) -> Tuple[str, List[LexemeObservation], List[str]]:
    """
    Validate the structured output of a turn analysis.

    The whole batch is rejected when any lexeme is malformed, so nothing from a
    bad analysis reaches the tracker.

    Returns:
        Tuple of (language code, observations, grammar hints)

    Raises:
        AnalysisError: If the output does not match the lexeme analysis format
    """
    lexemes = llm_data.get('lexemes')
    if lexemes is None:
        lexemes = []
    if not isinstance(lexemes, list):
        raise AnalysisError("LLM output field 'lexemes' must be a list")

    try:
        observations = [LexemeObservation.model_validate(item) for item in lexemes]
    except PydanticValidationError as e:
        logger.error(f"Invalid lexeme in analysis output: {e.errors()}")
        raise AnalysisError(f"LLM returned an invalid lexeme: {e.errors()[0].get('msg')}") from e

    hints = llm_data.get('grammar_hints') or []
    if not isinstance(hints, list):
        hints = [str(hints)]

    # The model sometimes answers with a language name instead of a code
    language = normalize_language_code(llm_data.get('language') or '')
    if not is_language_supported(language):
        language = target_language

    return language, observations, [str(h) for h in hints]


def analyze_conversation_turn(
    session: Session,
    user_id: str,
    utterance: str,
    conversation_context: str = "",
    language: Optional[str] = None,
    history: Optional[List[Dict[str, Any]]] = None
) -> AnalyzeTurnResult:
    """
    Analyse a user utterance and apply the resulting observations to the tracker.

    Raises:
        AnalysisError: If the completion call fails or its output is unusable
        PersistenceError: If applying an observation fails
    """
    target_language = normalize_language_code(language or settings.default_language)

    body = {
        "model": settings.analysis_model,
        "text": {"format": prompt_service.lexeme_analysis_format()},
        "input": [
            {
                "type": "message",
                "role": "system",
                "content": prompt_service.LEARNING_ANALYSIS_INSTRUCTIONS,
            },
            {
                "type": "message",
                "role": "user",
                "content": prompt_service.generate_analysis_user_prompt(
                    user_id=user_id,
                    target_language=target_language,
                    utterance=utterance,
                    conversation_context=conversation_context,
                    history=history
                ),
            },
        ],
    }

    logger.info(f"Analysing turn for user {user_id} ({target_language}): {utterance[:80]}")
    response = llm_service.call_responses_api(body)
    llm_data = llm_service.parse_json_output(llm_service.extract_output_text(response))
    event_language, observations, hints = validate_lexeme_analysis(llm_data, target_language)

    event = LearningEvent(
        user_id=user_id,
        language=event_language,
        lexemes=observations,
        grammar_hints=hints
    )

    processed = 0
    if event.lexemes:
        processed = srs_service.process_learning_event(session, event)
    else:
        logger.info(f"No lexemes found in turn for user {user_id}")

    return AnalyzeTurnResult(
        language=event.language,
        lexemes_processed=processed,
        grammar_hints=event.grammar_hints
    )


def execute_supervisor_tool(
    session: Session,
    name: str,
    arguments: Dict[str, Any],
    user_id: str,
    language: str
) -> Dict[str, Any]:
    """
    Run one supervisor tool call against the tracker.

    The learner and language of the request take precedence over values the
    model puts in the arguments.
    """
    if name == "getKnownWords":
        min_level = int(arguments.get("minLevel") or srs_service.DEFAULT_KNOWN_MIN_LEVEL)
        known_words = srs_service.get_known_words(session, user_id, language, min_level)
        return {"knownWords": known_words, "count": len(known_words)}
    if name == "getReviewDue":
        limit = int(arguments.get("limit") or 5)
        items = srs_service.get_review_due(session, user_id, language, limit)
        return {"reviewWords": [item.model_dump(mode="json") for item in items]}
    if name == "getUserProgress":
        summary = srs_service.get_user_progress(session, user_id, language)
        return summary.model_dump(mode="json")

    logger.warning(f"Supervisor requested unknown tool {name}")
    return {"error": f"Unknown tool {name}"}


def get_next_tutor_response(
    session: Session,
    user_id: str,
    relevant_context: str,
    language: Optional[str] = None,
    history: Optional[List[Dict[str, Any]]] = None
) -> str:
    """
    Ask the supervisor model for the next tutoring response.

    Tool calls are executed and their outputs appended to the input until the model
    answers with text, for at most MAX_TOOL_ROUNDS rounds.

    Raises:
        AnalysisError: If the completion call fails or no answer arrives in time
    """
    target_language = normalize_language_code(language or settings.default_language)
    config = get_language_config(target_language)

    body: Dict[str, Any] = {
        "model": settings.tutor_model,
        "input": [
            {
                "type": "message",
                "role": "system",
                "content": prompt_service.TUTOR_SUPERVISOR_INSTRUCTIONS
                + "\n\n"
                + prompt_service.generate_language_strategies(config),
            },
            {
                "type": "message",
                "role": "user",
                "content": prompt_service.generate_supervisor_user_prompt(
                    user_id=user_id,
                    target_language=target_language,
                    relevant_context=relevant_context,
                    history=history
                ),
            },
        ],
        "tools": prompt_service.supervisor_tool_declarations(),
    }

    response = llm_service.call_responses_api(body)
    for round_number in range(MAX_TOOL_ROUNDS + 1):
        function_calls = llm_service.extract_function_calls(response)
        if not function_calls:
            text = llm_service.extract_output_text(response)
            if not text:
                raise AnalysisError("Supervisor returned no response text")
            return text
        if round_number == MAX_TOOL_ROUNDS:
            break

        for call in function_calls:
            try:
                arguments = json.loads(call.get("arguments") or "{}")
            except json.JSONDecodeError:
                arguments = {}
            result = execute_supervisor_tool(session, call.get("name"), arguments, user_id, target_language)
            logger.info(f"Supervisor tool {call.get('name')} for user {user_id}")

            body["input"].append({
                "type": "function_call",
                "call_id": call.get("call_id"),
                "name": call.get("name"),
                "arguments": call.get("arguments") or "{}",
            })
            body["input"].append({
                "type": "function_call_output",
                "call_id": call.get("call_id"),
                "output": json.dumps(result, ensure_ascii=False),
            })

        response = llm_service.call_responses_api(body)

    raise AnalysisError(f"Supervisor did not answer within {MAX_TOOL_ROUNDS} tool rounds")

import json

import pytest
from sqlmodel import select

from lexitrack.core.config import settings
from lexitrack.core.exceptions import AnalysisError
from lexitrack.models import Lexeme, LearningProgress
from lexitrack.schemas.learning import LexemeObservation
from lexitrack.services import analysis_service, llm_service, srs_service
from lexitrack.services.analysis_service import (
    analyze_conversation_turn,
    get_next_tutor_response,
    validate_lexeme_analysis,
    MAX_TOOL_ROUNDS,
)


ANALYSIS = {
    "language": "ru",
    "lexemes": [
        {"lemma": "я", "form": "я", "pos": "PRON", "known": True, "confidence": 0.95,
         "performance": "correct_use", "error": None},
        {"lemma": "читать", "form": "читаешь", "pos": "VERB", "known": False, "confidence": 0.8,
         "performance": "wrong_use", "error": "wrong person ending"},
    ],
    "grammar_hints": ["Use 1st person: читаю"],
}


def test_turn_analysis_updates_progress(session, responses_api):
    responses_api.add_text(json.dumps(ANALYSIS, ensure_ascii=False))

    result = analyze_conversation_turn(session, "u1", "Я читаешь книгу", language="ru")

    assert result.language == "ru"
    assert result.lexemes_processed == 2
    assert result.grammar_hints == ["Use 1st person: читаю"]

    progress = session.exec(select(LearningProgress)).all()
    assert len(progress) == 2

    request = responses_api.requests[0]
    assert request["url"].endswith("/responses")
    assert request["headers"]["Authorization"] == "Bearer test-key"
    assert request["json"]["model"] == settings.analysis_model
    assert request["json"]["text"]["format"]["type"] == "json_schema"
    assert "Я читаешь книгу" in request["json"]["input"][1]["content"]


def test_invalid_lexeme_rejects_whole_batch(session, responses_api):
    bad = dict(ANALYSIS, lexemes=ANALYSIS["lexemes"] + [{"lemma": "книга", "form": "книгу", "pos": "NOUN",
                                                        "performance": "guessed"}])
    responses_api.add_text(json.dumps(bad, ensure_ascii=False))

    with pytest.raises(AnalysisError):
        analyze_conversation_turn(session, "u1", "Я читаешь книгу", language="ru")

    assert session.exec(select(Lexeme)).all() == []


def test_non_json_output_is_rejected(session, responses_api):
    responses_api.add_text("Sorry, I can't help with that.")

    with pytest.raises(AnalysisError):
        analyze_conversation_turn(session, "u1", "привет", language="ru")


def test_empty_analysis_processes_nothing(session, responses_api):
    responses_api.add_text(json.dumps({"language": "ru", "lexemes": [], "grammar_hints": []}))

    result = analyze_conversation_turn(session, "u1", "ммм", language="ru")

    assert result.lexemes_processed == 0
    assert session.exec(select(LearningProgress)).all() == []


def test_language_name_falls_back_to_target_language():
    language, observations, hints = validate_lexeme_analysis(dict(ANALYSIS, language="Russian"), "ru")

    assert language == "ru"
    assert len(observations) == 2
    assert observations[1].error == "wrong person ending"


def test_fenced_json_is_parsed():
    assert llm_service.parse_json_output('```json\n{"lexemes": []}\n```') == {"lexemes": []}


def test_json_array_is_rejected():
    with pytest.raises(AnalysisError):
        llm_service.parse_json_output("[1, 2]")


def test_missing_api_key(monkeypatch):
    monkeypatch.setattr(settings, "openai_api_key", "")

    with pytest.raises(AnalysisError):
        llm_service.call_responses_api({"model": "m", "input": []})


def test_error_payload_is_raised():
    with pytest.raises(AnalysisError):
        llm_service.extract_output_text({"error": {"message": "rate limited"}})


def test_supervisor_runs_tools_before_answering(session, responses_api):
    srs_service.update_user_progress(
        session, "u1", "ru",
        LexemeObservation(lemma="дом", form="дом", pos="NOUN", performance="introduced")
    )
    responses_api.add_function_call("getUserProgress", "{}")
    responses_api.add_text("Давай повторим слово «дом».")

    text = get_next_tutor_response(session, "u1", "User wants to practise", language="ru")

    assert text == "Давай повторим слово «дом»."
    assert len(responses_api.requests) == 2

    first = responses_api.requests[0]["json"]
    assert first["parallel_tool_calls"] is False
    assert {tool["name"] for tool in first["tools"]} == {"getKnownWords", "getReviewDue", "getUserProgress"}

    follow_up = responses_api.requests[1]["json"]["input"]
    assert follow_up[-2]["type"] == "function_call"
    output = json.loads(follow_up[-1]["output"])
    assert output["total_words"] == 1


def test_supervisor_gives_up_after_tool_rounds(session, responses_api):
    for _ in range(MAX_TOOL_ROUNDS + 1):
        responses_api.add_function_call("getKnownWords", '{"minLevel": 3}')

    with pytest.raises(AnalysisError):
        get_next_tutor_response(session, "u1", "context", language="ru")

    assert len(responses_api.requests) == MAX_TOOL_ROUNDS + 1


def test_unknown_supervisor_tool(session):
    result = analysis_service.execute_supervisor_tool(session, "deleteEverything", {}, "u1", "ru")
    assert "error" in result

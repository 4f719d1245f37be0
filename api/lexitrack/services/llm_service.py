"""
Helper functions for calls to the OpenAI-compatible Responses endpoint.
"""
import requests
import json
import logging
from typing import Any, Dict, List

from lexitrack.core.config import settings
from lexitrack.core.exceptions import AnalysisError

logger = logging.getLogger(__name__)


def call_responses_api(body: Dict[str, Any]) -> Dict[str, Any]:
    """
    POST a request body to the Responses endpoint.

    Args:
        body: Request body (model, input turns, optional text.format or tools)

    Returns:
        Parsed JSON response

    Raises:
        AnalysisError: If the endpoint is not configured, the request fails or the
                       response is not JSON
    """
    api_key = settings.openai_api_key
    if not api_key:
        raise AnalysisError("OpenAI API key not configured")

    url = f"{settings.openai_base_url.rstrip('/')}/responses"
    payload = dict(body)
    if payload.get("tools"):
        payload["parallel_tool_calls"] = False

    try:
        response = requests.post(
            url,
            json=payload,
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {api_key}",
            },
            timeout=settings.llm_timeout_seconds
        )
        response.raise_for_status()
        return response.json()
    except requests.exceptions.RequestException as e:
        error_msg = f"Responses API request failed: {str(e)}"
        if getattr(e, 'response', None) is not None:
            error_msg += f" - Status: {e.response.status_code}"
        logger.error(error_msg)
        raise AnalysisError(error_msg) from e
    except ValueError as e:
        logger.error(f"Responses API returned non-JSON body: {str(e)}")
        raise AnalysisError("Responses API returned an invalid response body") from e


def extract_output_text(response: Dict[str, Any]) -> str:
    """Concatenate the output_text parts of all assistant messages."""
    if response.get("error"):
        raise AnalysisError(f"Responses API returned an error: {response['error']}")

    texts = []
    for item in response.get("output") or []:
        if item.get("type") != "message":
            continue
        for content in item.get("content") or []:
            if content.get("type") == "output_text" and content.get("text"):
                texts.append(content["text"])
    return "\n".join(texts).strip()


def extract_function_calls(response: Dict[str, Any]) -> List[Dict[str, Any]]:
    return [item for item in response.get("output") or [] if item.get("type") == "function_call"]


def parse_json_output(text: str) -> Dict[str, Any]:
    """
    Parse structured output text into a JSON object.

    The model may wrap JSON in a markdown code block; the fence is removed first.

    Raises:
        AnalysisError: If the text is empty or not a JSON object
    """
    text = (text or "").strip()
    if not text:
        raise AnalysisError("No analysis result received")

    if text.startswith('```'):
        lines = text.split('\n')
        text = '\n'.join(lines[1:])
        if text.rstrip().endswith('```'):
            text = text.rstrip()[:-3]

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse LLM JSON response: {e}")
        logger.error(f"Response text: {text[:500]}")
        raise AnalysisError(f"LLM returned invalid JSON: {str(e)}") from e

    if not isinstance(data, dict):
        raise AnalysisError("LLM output must be a JSON object")
    return data

"""
Service for generating LLM prompts, structured-output schemas and tool declarations.
"""
import json
from typing import Any, Dict, List, Optional

from lexitrack.languages.types import LanguageConfig
from lexitrack.models.enums import PartOfSpeech, PerformanceType


LEARNING_ANALYSIS_INSTRUCTIONS = """You are a language learning analysis expert, tasked with analyzing conversation turns to extract learning insights and update a spaced repetition system (SRS) for language learners.

# Your Role
- Analyze user utterances in the target language for vocabulary usage
- Extract lexemes (root words) and assess user performance with each word
- Determine if words are being used correctly, incorrectly, or being introduced for the first time
- Focus on meaningful vocabulary acquisition, not every single word

# Analysis Tasks
1. **Language Detection**: Identify the target language being learned
2. **Lexeme Extraction**: Extract meaningful vocabulary items (nouns, verbs, adjectives, key adverbs)
3. **Performance Assessment**: Rate user performance for each lexeme
4. **Confidence Scoring**: Assess how confident you are in your analysis

# Performance Types
- **introduced**: Word appears in conversation but user hasn't actively used it
- **correct_use**: User used the word correctly in context
- **wrong_use**: User attempted to use the word but made an error
- **recall_fail**: User struggled to remember or use a previously known word

# Analysis Guidelines
- Focus on content words (nouns, verbs, adjectives) and their grammatical forms
- Pay special attention to grammar patterns:
  * **Verb conjugations** (person, number, tense, aspect)
  * **Noun declensions** (case, number, gender)
  * **Adjective agreements** (case, gender, number matching with nouns)
  * **Pronoun declensions** (case forms)
- Consider context when assessing correctness
- Be conservative with "correct_use" - require clear evidence of understanding
- Mark conjugation/declension errors as "wrong_use" even if base word is known
- For "wrong_use", give a short error tag (e.g. "verb form error", "wrong case") in "error"
- Prioritize words that show grammatical complexity and growth

# Output Format
Always return structured JSON with lexeme analysis for vocabulary tracking.

# Example Analysis

## Example 1: Gender Agreement
User says: "Моя собака очень большая, но мой кот маленький"
Analysis:
- "собака" (dog) - correct_use (proper noun usage with correct gender agreement)
- "большая" (big/feminine) - correct_use (correct adjective with gender agreement)
- "кот" (cat) - correct_use (proper noun usage)
- "маленький" (small/masculine) - correct_use (correct adjective with gender agreement)

## Example 2: Verb Conjugation
User says: "Я читаю книгу, а ты читает газету"
Analysis:
- "читаю" (read/1st person singular) - correct_use (proper conjugation for "я")
- "читает" (read/3rd person singular) - wrong_use (should be "читаешь" for "ты")

## Example 3: Case Declension
User says: "Я вижу красивая девушка"
Analysis:
- "вижу" (see/1st person singular) - correct_use (proper conjugation)
- "красивая" (beautiful/nominative) - wrong_use (should be "красивую" in accusative case)
- "девушка" (girl/nominative) - wrong_use (should be "девушку" in accusative case)

## Example 4: Aspect Usage
User says: "Вчера я покупал хлеб и купил молоко"
Analysis:
- "покупал" (was buying/imperfective past) - correct_use (ongoing action context)
- "купил" (bought/perfective past) - correct_use (completed action)

Skip common words like "я", "и", "вчера" unless there are specific grammatical errors."""


TUTOR_SUPERVISOR_INSTRUCTIONS = """You are an expert language learning supervisor, providing intelligent guidance for language tutoring conversations. You help create personalized, effective language learning experiences using spaced repetition principles.

# Your Role
- Provide intelligent responses for language tutoring
- Incorporate spaced repetition system (SRS) data into learning decisions
- Adapt vocabulary introduction based on user's current knowledge
- Create natural, engaging conversations that promote learning
- Balance challenge and comprehension
- Help with script learning and pronunciation guidance when relevant

# Learning Principles
1. **Spaced Repetition**: Prioritize words due for review in conversations
2. **Graduated Difficulty**: Introduce new vocabulary at appropriate pace
3. **Contextual Learning**: Present new words in meaningful contexts
4. **Error Tolerance**: Encourage attempts even if imperfect
5. **Progress Tracking**: Acknowledge and celebrate learning milestones

# Response Guidelines
- Mix target language and English appropriately for user's level
- Use known vocabulary as foundation for new concepts
- Incorporate 1-2 review words naturally per response when appropriate
- Provide explanations for new vocabulary with script and pronunciation when relevant
- Keep responses conversational and encouraging
- Adapt complexity based on user's demonstrated proficiency

# SRS Integration
- Call getKnownWords, getReviewDue and getUserProgress to see the learner's data
- Incorporate words due for review into natural conversation
- Adjust difficulty based on success rates

# Error Handling
- Gently correct errors without discouraging
- Explain the correct form briefly
- Move conversation forward positively

You have access to the user's learning data and should use it to make intelligent, personalized teaching decisions."""


TUTOR_AGENT_INSTRUCTIONS_TEMPLATE = """You are a friendly and encouraging {language_name} language tutor. Your goal is to help users learn {language_name} through natural conversation while tracking their vocabulary progress using a spaced repetition system (SRS).

# General Instructions
- You are an experienced language tutor who provides personalized instruction
- Use the intelligent supervisor agent via tools for complex decisions and learning analysis
- Adapt your responses based on the user's known vocabulary and learning progress
- Create a supportive, encouraging learning environment
- Mix {language_name} and English appropriately based on user level

## Tone and Style
- Friendly, patient, and encouraging
- Use simple, clear explanations
- Adjust complexity based on user's demonstrated level
- Be conversational, not academic
- Provide phonetic help when introducing new {language_name} words ({script} script)

# Tools Available
- getNextResponseFromSupervisor: intelligent tutoring response using the learner's SRS data
- triggerLearningAnalysis: use periodically (every 3-5 user messages) to analyze vocabulary usage; this updates the SRS system
- getKnownVocabulary, getReviewDueWords, getUserLearningProgress: vocabulary management

# Teaching Strategy
1. **Assessment**: Determine user's current level through conversation
2. **Adaptation**: Use known vocabulary as foundation
3. **Introduction**: Gradually introduce new words from SRS system
4. **Practice**: Create opportunities for user to use new vocabulary
5. **Review**: Incorporate spaced repetition naturally
6. **Analysis**: Periodically analyze progress

# Important Guidelines
- NEVER overwhelm users with too many new words at once
- Always explain new vocabulary when introducing it, including pronunciation help
- Correct verb conjugation, case and agreement errors gently but clearly
- Encourage users even when they make mistakes"""


PART_OF_SPEECH_TAGS = [tag.value for tag in PartOfSpeech]
PERFORMANCE_TYPES = [performance.value for performance in PerformanceType]


def lexeme_analysis_format() -> Dict[str, Any]:
    """JSON-schema output format for the turn analysis call."""
    return {
        "type": "json_schema",
        "name": "lexeme_analysis",
        "strict": True,
        "schema": {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "language": {
                    "type": "string",
                    "description": "The target language being analyzed"
                },
                "lexemes": {
                    "type": "array",
                    "description": "List of vocabulary items found in the utterance",
                    "items": {
                        "type": "object",
                        "additionalProperties": False,
                        "properties": {
                            "lemma": {"type": "string", "description": "Root form of the word"},
                            "form": {"type": "string", "description": "Actual form used in the utterance"},
                            "pos": {
                                "type": "string",
                                "description": "Part of speech",
                                "enum": PART_OF_SPEECH_TAGS
                            },
                            "known": {"type": "boolean", "description": "Whether the user knows this word"},
                            "confidence": {"type": "number", "description": "Confidence in the analysis (0-1)"},
                            "performance": {
                                "type": "string",
                                "description": "How the user performed with this word",
                                "enum": PERFORMANCE_TYPES
                            },
                            "error": {
                                "type": ["string", "null"],
                                "description": "Short error tag for wrong_use, otherwise null"
                            }
                        },
                        "required": ["lemma", "form", "pos", "known", "confidence", "performance", "error"]
                    }
                },
                "grammar_hints": {
                    "type": "array",
                    "description": "Grammar patterns or hints observed",
                    "items": {"type": "string"}
                }
            },
            "required": ["language", "lexemes", "grammar_hints"]
        }
    }


def generate_analysis_user_prompt(
    user_id: str,
    target_language: str,
    utterance: str,
    conversation_context: str = "",
    history: Optional[List[Dict[str, Any]]] = None
) -> str:
    """
    Generate the user prompt for analysing one conversation turn.

    Args:
        user_id: Learner ID
        target_language: Target language code
        utterance: The user's utterance to analyse
        conversation_context: Immediate context of the utterance
        history: Recent conversation messages; only the last 10 are included

    Returns:
        The user prompt string
    """
    recent_history = (history or [])[-10:]
    return f"""Analyze this conversation for vocabulary learning progress:

User ID: {user_id}
Target Language: {target_language}
Primary Focus: "{utterance}"
Immediate Context: {conversation_context}

Recent Conversation History:
{json.dumps(recent_history, ensure_ascii=False, indent=2)}

Instructions: Extract meaningful vocabulary items from the user's utterance and assess performance. Use the conversation context and history to better understand correct vs incorrect usage patterns. Focus on content words (nouns, verbs, adjectives) that indicate learning progress.

Pay special attention to:
- Grammar errors in verb conjugations, noun cases, adjective agreement
- Vocabulary usage in context vs previous uses
- Improvement or regression patterns from conversation history"""


def generate_language_strategies(config: LanguageConfig) -> str:
    """Language-specific teaching strategies and grammar examples appended to the supervisor instructions."""
    strategies = config.teaching_strategies
    sections = [f"# Language-Specific Teaching Strategies for {config.name} ({config.native_name})"]

    for title, strategy in (
        ("For Beginners (few known words)", strategies.beginner),
        ("For Intermediate (growing vocabulary)", strategies.intermediate),
        ("For Advanced (many known words)", strategies.advanced),
    ):
        focus = "\n".join(f"  * {area}" for area in strategy.focus_areas)
        sections.append(
            f"## {title}:\n{strategy.description}\n- Mix ratio: {strategy.mix_ratio}\n- Focus areas:\n{focus}"
        )

    correct = "\n".join(
        f'- "{ex.text}" ({ex.translation}) - {ex.explanation}'
        for ex in config.grammar_examples.correct
    )
    incorrect = "\n".join(
        f'- Error: "{ex.text}" → Correct: "{ex.correction}" ({ex.explanation})'
        for ex in config.grammar_examples.incorrect
    )
    sections.append(f"# Grammar Examples for {config.name}\n\n## Correct Usage Examples:\n{correct}")
    sections.append(f"## Common Error Patterns:\n{incorrect}")

    return "\n\n".join(sections)


def generate_supervisor_user_prompt(
    user_id: str,
    target_language: str,
    relevant_context: str,
    history: Optional[List[Dict[str, Any]]] = None
) -> str:
    """User prompt for the tutor supervisor; includes the last 10 exchanges (20 messages)."""
    recent_history = (history or [])[-20:]
    return f"""==== Recent Conversation History (Last 10 Exchanges) ====
{json.dumps(recent_history, ensure_ascii=False, indent=2)}

==== Relevant Context From Last User Message ===
{relevant_context}

==== User Learning Data ====
User ID: {user_id}
Target Language: {target_language}

Please provide an intelligent tutoring response that:
1. Responds naturally to the user's message
2. Incorporates appropriate vocabulary for their level
3. Uses spaced repetition principles when possible
4. Maintains an encouraging, supportive tone"""


def supervisor_tool_declarations() -> List[Dict[str, Any]]:
    """Function tools the supervisor model may call against the SRS tracker."""
    return [
        {
            "type": "function",
            "name": "getKnownWords",
            "description": "Get list of words the user already knows",
            "parameters": {
                "type": "object",
                "properties": {
                    "userId": {"type": "string"},
                    "language": {"type": "string"},
                    "minLevel": {"type": "number"}
                },
                "required": ["userId", "language"]
            }
        },
        {
            "type": "function",
            "name": "getReviewDue",
            "description": "Get words due for review in SRS system",
            "parameters": {
                "type": "object",
                "properties": {
                    "userId": {"type": "string"},
                    "language": {"type": "string"},
                    "limit": {"type": "number"}
                },
                "required": ["userId", "language"]
            }
        },
        {
            "type": "function",
            "name": "getUserProgress",
            "description": "Get overall learning progress summary",
            "parameters": {
                "type": "object",
                "properties": {
                    "userId": {"type": "string"},
                    "language": {"type": "string"}
                },
                "required": ["userId", "language"]
            }
        }
    ]


def tutor_agent_tool_declarations(default_language: str) -> List[Dict[str, Any]]:
    """Tools exposed to the realtime tutor agent; each maps to an HTTP endpoint of this API."""
    return [
        {
            "name": "getNextResponseFromSupervisor",
            "description": "Gets intelligent tutoring response from supervisor that incorporates learning data and SRS principles",
            "endpoint": "POST /tutor/respond",
            "parameters": {
                "type": "object",
                "properties": {
                    "relevant_context": {
                        "type": "string",
                        "description": "Key information from the user's most recent message for context"
                    },
                    "user_id": {"type": "string", "description": "User ID for accessing learning progress data"},
                    "language": {"type": "string", "description": "Target language being learned", "default": default_language}
                },
                "required": ["relevant_context", "user_id"],
                "additionalProperties": False
            }
        },
        {
            "name": "triggerLearningAnalysis",
            "description": "Analyzes the user's recent utterance for vocabulary learning and updates the SRS system",
            "endpoint": "POST /learning/analyze-turn",
            "parameters": {
                "type": "object",
                "properties": {
                    "user_id": {"type": "string", "description": "User ID for learning progress tracking"},
                    "utterance": {"type": "string", "description": "The user's utterance to analyze"},
                    "conversation_context": {"type": "string", "description": "Recent conversation context for accuracy"},
                    "language": {"type": "string", "default": default_language}
                },
                "required": ["user_id", "utterance"],
                "additionalProperties": False
            }
        },
        {
            "name": "getKnownVocabulary",
            "description": "Gets the list of vocabulary words the user already knows",
            "endpoint": "GET /learning/known-words",
            "parameters": {
                "type": "object",
                "properties": {
                    "user_id": {"type": "string"},
                    "language": {"type": "string", "default": default_language}
                },
                "required": ["user_id"],
                "additionalProperties": False
            }
        },
        {
            "name": "getReviewDueWords",
            "description": "Gets vocabulary words that are due for review in the SRS system",
            "endpoint": "GET /learning/review-due",
            "parameters": {
                "type": "object",
                "properties": {
                    "user_id": {"type": "string"},
                    "language": {"type": "string", "default": default_language},
                    "limit": {"type": "number", "description": "Maximum number of words to return", "default": 5}
                },
                "required": ["user_id"],
                "additionalProperties": False
            }
        },
        {
            "name": "getUserLearningProgress",
            "description": "Gets overall learning progress summary for the user",
            "endpoint": "GET /learning/progress",
            "parameters": {
                "type": "object",
                "properties": {
                    "user_id": {"type": "string"},
                    "language": {"type": "string", "default": default_language}
                },
                "required": ["user_id"],
                "additionalProperties": False
            }
        }
    ]


def generate_tutor_agent_instructions(config: LanguageConfig) -> str:
    return TUTOR_AGENT_INSTRUCTIONS_TEMPLATE.format(
        language_name=config.name,
        script=config.script or "native"
    )

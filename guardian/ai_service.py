"""
Generative drafting via Google Gemini.

Three pass-through calls back the "draft with AI" buttons: legal documents,
incident triage and awareness posts. Nothing is retried. When the API key is
missing, or the call fails, each function returns a fallback value that the
page can show in place of the generated content.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import google.generativeai as genai

from guardian.awareness import AwarenessCategory, Quiz
from guardian.config import config
from guardian.incidents import IncidentSeverity

logger = logging.getLogger(__name__)

MISSING_KEY_DOCUMENT = (
    "Configuration error: the AI API key was not found. "
    "Set GEMINI_API_KEY in the deployment environment variables."
)
FAILED_DOCUMENT = "Failed to generate the document."
ERROR_DOCUMENT = (
    "A technical error occurred while contacting the AI service. Check that the API key "
    "is valid and has access to the configured model."
)
MISSING_KEY_ANALYSIS = "Error: the AI API key is not configured."
FAILED_ANALYSIS = "The incident could not be analysed automatically."
ERROR_ANALYSIS = "Connection error with the AI service. Try again later."
ERROR_POST_TITLE = "Generation Error"
ERROR_POST_CONTENT = "The content could not be generated because of an AI configuration error."

_JSON_CONFIG = {"response_mime_type": "application/json"}


@dataclass
class IncidentAnalysis:
    severity: IncidentSeverity
    analysis: str


@dataclass
class AwarenessDraft:
    title: str
    content: str
    quiz: Optional[Quiz] = None


def _get_model() -> Optional[genai.GenerativeModel]:
    """Return a configured model, or ``None`` when no usable API key is set."""
    if not config.ai_configured:
        logger.error("LGPD Guardian: AI API key is invalid or not configured.")
        if config.is_production:
            logger.error("--> Production environment: add GEMINI_API_KEY to the deployment settings and redeploy.")
        else:
            logger.info("--> Development tip: create a .env file at the project root containing GEMINI_API_KEY=...")
        return None
    genai.configure(api_key=config.GEMINI_API_KEY)
    return genai.GenerativeModel(config.AI_MODEL)


def _parse_json(text: Optional[str]) -> Dict[str, Any]:
    data = json.loads(text or "{}")
    if not isinstance(data, dict):
        raise ValueError("Expected a JSON object from the model")
    return data


def generate_legal_document(doc_type: str, company_name: str, industry: str, data_types: List[str]) -> str:
    """Draft a legal document in Markdown for the given controller."""
    model = _get_model()
    if model is None:
        return MISSING_KEY_DOCUMENT

    prompt = f"""
    Act as a lawyer specialised in data protection and the Brazilian LGPD (Lei 13.709/2018).

    Task: write a complete, professional draft of "{doc_type}".

    Controller details:
    - Name: "{company_name}"
    - Industry: "{industry}"
    - Personal data processed: {", ".join(data_types)}.

    Requirements:
    1. The document must comply strictly with Lei 13.709/2018 (LGPD).
    2. Use clear but formal legal language.
    3. Include Definitions, Purpose of Processing, Data Subject Rights, Security, Retention
       and the contact of the Data Protection Officer (DPO).
    4. Format the output as clean Markdown (## for section titles, ** for emphasis, - for lists).
    5. Return only the document text, without greetings or explanations.
    6. Write in {config.CONTENT_LANGUAGE}.
    """

    try:
        logger.info("Drafting '%s' for %s with %s", doc_type, company_name, config.AI_MODEL)
        response = model.generate_content(prompt)
        return response.text or FAILED_DOCUMENT
    except Exception:
        logger.exception("Gemini API error while drafting '%s'", doc_type)
        return ERROR_DOCUMENT


def analyze_incident(description: str) -> IncidentAnalysis:
    """Suggest a severity and immediate actions for an incident description."""
    model = _get_model()
    if model is None:
        return IncidentAnalysis(severity=IncidentSeverity.MEDIUM, analysis=MISSING_KEY_ANALYSIS)

    prompt = f"""
    Analyse the following security incident description in the context of the Brazilian LGPD.
    Description: "{description}"

    Determine the likely severity (low, medium, high or critical) and give a short justification
    together with the recommended immediate actions, written in {config.CONTENT_LANGUAGE}.

    Return a valid JSON object with the keys "severity" (one of: low, medium, high, critical)
    and "analysis" (string).
    """

    try:
        response = model.generate_content(prompt, generation_config=_JSON_CONFIG)
        data = _parse_json(response.text)
    except Exception:
        logger.exception("Gemini API error while analysing an incident")
        return IncidentAnalysis(severity=IncidentSeverity.MEDIUM, analysis=ERROR_ANALYSIS)

    try:
        severity = IncidentSeverity(str(data.get("severity", "")).lower())
    except ValueError:
        logger.warning("Model returned unknown severity %r, defaulting to medium", data.get("severity"))
        severity = IncidentSeverity.MEDIUM
    return IncidentAnalysis(severity=severity, analysis=str(data.get("analysis") or FAILED_ANALYSIS))


def generate_awareness_post(topic: str, category: AwarenessCategory) -> AwarenessDraft:
    """Draft a short training article with a multiple-choice quiz."""
    model = _get_model()
    if model is None:
        return AwarenessDraft(title=ERROR_POST_TITLE, content=MISSING_KEY_DOCUMENT, quiz=None)

    category_label = AwarenessCategory(category).value
    prompt = f"""
    Act as a specialist in privacy culture and the Brazilian LGPD.

    Task: create a short training module for an internal corporate newsletter.
    Category: "{category_label}"
    Topic: "{topic}"

    Content requirements: practical and educational, accessible but professional language,
    rich Markdown (bold, lists), written in {config.CONTENT_LANGUAGE}.

    Include one multiple-choice question that tests what the text teaches.

    Return a JSON object:
    {{
      "title": "short, creative title with an emoji",
      "content": "article text in Markdown",
      "quiz": {{
        "question": "the question",
        "options": ["option 1", "option 2", "option 3", "option 4"],
        "correctAnswerIndex": 0,
        "explanation": "why this answer is correct"
      }}
    }}
    """

    try:
        response = model.generate_content(prompt, generation_config=_JSON_CONFIG)
        data = _parse_json(response.text)
    except Exception:
        logger.exception("Gemini API error while drafting an awareness post")
        return AwarenessDraft(title=ERROR_POST_TITLE, content=ERROR_POST_CONTENT, quiz=None)

    quiz = None
    raw_quiz = data.get("quiz")
    if isinstance(raw_quiz, dict):
        try:
            quiz = Quiz.from_dict(raw_quiz)
        except (KeyError, TypeError, ValueError):
            logger.warning("Discarding malformed quiz returned by the model")
    elif raw_quiz:
        logger.warning("Discarding quiz of type %s returned by the model", type(raw_quiz).__name__)
    return AwarenessDraft(
        title=str(data.get("title") or topic),
        content=str(data.get("content") or ""),
        quiz=quiz,
    )

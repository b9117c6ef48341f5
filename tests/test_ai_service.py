import json
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from guardian import ai_service
from guardian.awareness import AwarenessCategory
from guardian.config import config
from guardian.incidents import IncidentSeverity


@pytest.fixture
def fake_genai(monkeypatch):
    fake = MagicMock()
    monkeypatch.setattr(ai_service, "genai", fake)
    return fake


def _reply(fake, payload):
    text = payload if isinstance(payload, str) else json.dumps(payload)
    fake.GenerativeModel.return_value.generate_content.return_value = SimpleNamespace(text=text)


def test_missing_key_returns_fallbacks_without_calling_api(fake_genai):
    assert ai_service.generate_legal_document("Privacy Policy", "Acme", "Retail", ["Name"]) == ai_service.MISSING_KEY_DOCUMENT
    analysis = ai_service.analyze_incident("laptop lost")
    assert analysis.severity == IncidentSeverity.MEDIUM
    assert analysis.analysis == ai_service.MISSING_KEY_ANALYSIS
    draft = ai_service.generate_awareness_post("Phishing", AwarenessCategory.SECURITY)
    assert draft.title == ai_service.ERROR_POST_TITLE
    assert draft.quiz is None
    fake_genai.configure.assert_not_called()


def test_placeholder_key_counts_as_missing(monkeypatch, fake_genai):
    monkeypatch.setattr(config, "GEMINI_API_KEY", "undefined")
    assert ai_service.generate_legal_document("DPIA", "Acme", "Retail", []) == ai_service.MISSING_KEY_DOCUMENT


def test_generate_legal_document(monkeypatch, fake_genai):
    monkeypatch.setattr(config, "GEMINI_API_KEY", "test-key")
    _reply(fake_genai, "## Privacy Policy")
    text = ai_service.generate_legal_document("Privacy Policy", "Acme", "Retail", ["Name", "CPF"])
    assert text == "## Privacy Policy"
    fake_genai.configure.assert_called_once_with(api_key="test-key")
    prompt = fake_genai.GenerativeModel.return_value.generate_content.call_args[0][0]
    assert "Acme" in prompt and "Name, CPF" in prompt


def test_generate_legal_document_api_error(monkeypatch, fake_genai):
    monkeypatch.setattr(config, "GEMINI_API_KEY", "test-key")
    fake_genai.GenerativeModel.return_value.generate_content.side_effect = RuntimeError("quota")
    assert ai_service.generate_legal_document("DPIA", "Acme", "Retail", []) == ai_service.ERROR_DOCUMENT


def test_analyze_incident_parses_json(monkeypatch, fake_genai):
    monkeypatch.setattr(config, "GEMINI_API_KEY", "test-key")
    _reply(fake_genai, {"severity": "Critical", "analysis": "Notify ANPD."})
    analysis = ai_service.analyze_incident("database dump leaked")
    assert analysis.severity == IncidentSeverity.CRITICAL
    assert analysis.analysis == "Notify ANPD."


def test_analyze_incident_unknown_severity_defaults_to_medium(monkeypatch, fake_genai):
    monkeypatch.setattr(config, "GEMINI_API_KEY", "test-key")
    _reply(fake_genai, {"severity": "catastrophic", "analysis": "x"})
    assert ai_service.analyze_incident("x").severity == IncidentSeverity.MEDIUM


def test_analyze_incident_bad_json(monkeypatch, fake_genai):
    monkeypatch.setattr(config, "GEMINI_API_KEY", "test-key")
    _reply(fake_genai, "not json")
    analysis = ai_service.analyze_incident("x")
    assert analysis.analysis == ai_service.ERROR_ANALYSIS


def test_awareness_post_with_quiz(monkeypatch, fake_genai):
    monkeypatch.setattr(config, "GEMINI_API_KEY", "test-key")
    _reply(fake_genai, {
        "title": "🎣 Phishing",
        "content": "Be careful.",
        "quiz": {"question": "Q?", "options": ["a", "b", "c", "d"], "correctAnswerIndex": 1, "explanation": "b"},
    })
    draft = ai_service.generate_awareness_post("Phishing", AwarenessCategory.SECURITY)
    assert draft.title == "🎣 Phishing"
    assert draft.quiz.correct_answer_index == 1


def test_awareness_post_malformed_quiz_is_dropped(monkeypatch, fake_genai):
    monkeypatch.setattr(config, "GEMINI_API_KEY", "test-key")
    _reply(fake_genai, {"title": "T", "content": "C", "quiz": {"question": "Q?", "options": ["a"]}})
    draft = ai_service.generate_awareness_post("Topic", AwarenessCategory.GOVERNANCE)
    assert draft.content == "C"
    assert draft.quiz is None


def test_awareness_post_non_object_quiz_is_dropped(monkeypatch, fake_genai):
    monkeypatch.setattr(config, "GEMINI_API_KEY", "test-key")
    _reply(fake_genai, {"title": "T", "content": "C", "quiz": ["a", "b"]})
    draft = ai_service.generate_awareness_post("Topic", AwarenessCategory.GOVERNANCE)
    assert draft.title == "T"
    assert draft.quiz is None

    _reply(fake_genai, {"title": 42, "content": ["not", "text"], "quiz": "Which one?"})
    draft = ai_service.generate_awareness_post("Topic", AwarenessCategory.GOVERNANCE)
    assert draft.title == "42"
    assert isinstance(draft.content, str)
    assert draft.quiz is None

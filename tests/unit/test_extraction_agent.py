"""
Unit tests for the ParameterExtractionAgent.

The LLM is replaced by LangChain's FakeListChatModel or a MagicMock, so no
credentials are required.
"""
from __future__ import annotations

import json
from unittest.mock import MagicMock

import pytest
from langchain_core.language_models.fake_chat_models import FakeListChatModel

from agents.extraction_agent import (
    ParameterExtractionAgent,
    empty_extraction,
    mark_project_mentions,
    parse_extraction_response,
)
from extraction.validator import DEMOTED_CONFIDENCE
from extraction.vocabulary import PROJECT_ENGINEERING
from schemas.fields import IssueField, Provenance

GOOD_RESPONSE = {
    "title": {"value": "Login fails on Safari", "confidence": 0.9},
    "type": {"value": "bug", "confidence": 0.95},
    "project": {"value": "engineering", "confidence": 0.8},
    "priority": {"value": None, "confidence": 0.7},
    "description": {"value": "  ", "confidence": 0.4},
}


def _agent(*responses: str) -> ParameterExtractionAgent:
    return ParameterExtractionAgent(llm=FakeListChatModel(responses=list(responses)))


# ── parse_extraction_response ────────────────────────────────────────────────


def test_parse_plain_json():
    parsed = parse_extraction_response(json.dumps(GOOD_RESPONSE))
    assert parsed[IssueField.TITLE].value == "Login fails on Safari"
    assert parsed[IssueField.TYPE].value == "bug"
    assert parsed[IssueField.TYPE].provenance == Provenance.MODEL_INFERRED


def test_parse_strips_code_fences_and_chatter():
    raw = "Here you go:\n```json\n" + json.dumps(GOOD_RESPONSE) + "\n```"
    parsed = parse_extraction_response(raw)
    assert parsed[IssueField.PROJECT].value == "engineering"


def test_parse_blank_or_null_values_are_absent():
    parsed = parse_extraction_response(GOOD_RESPONSE)
    assert parsed[IssueField.PRIORITY].is_absent
    assert parsed[IssueField.PRIORITY].confidence == 0.0
    assert parsed[IssueField.DESCRIPTION].is_absent


def test_parse_tolerates_missing_and_malformed_parameters():
    parsed = parse_extraction_response({"title": "not an object", "type": {"value": "Task", "confidence": "lots"}})
    assert parsed[IssueField.TITLE].is_absent
    assert parsed[IssueField.TYPE].confidence == 0.0
    assert parsed[IssueField.PROJECT].is_absent


@pytest.mark.parametrize("raw", ["no json here", "{not: valid}", "[1, 2, 3]"])
def test_parse_rejects_unusable_output(raw):
    with pytest.raises(ValueError):
        parse_extraction_response(raw)


def test_empty_extraction_covers_every_field():
    assert all(v.is_absent for v in empty_extraction().values())
    assert set(empty_extraction()) == set(IssueField)


# ── Prompt ───────────────────────────────────────────────────────────────────


def test_mark_project_mentions():
    assert mark_project_mentions("Create a bug in engineering about login") == (
        "Create a bug in [PROJECT:FV Engineering] about login"
    )
    assert mark_project_mentions("The demo crashed") == "The demo crashed"


def test_build_messages_includes_utterance_and_vocabulary():
    system, human = _agent("{}").build_messages("Create a task for the demo product")
    assert "[PROJECT:FV Demo Product]" in human.content
    assert "FV Engineering" in human.content
    assert "Highest" in human.content
    assert system.content


# ── extract_all ──────────────────────────────────────────────────────────────


def test_extract_all_validates_model_output():
    response = dict(GOOD_RESPONSE, project={"value": "Mars", "confidence": 0.9})
    extracted = _agent(json.dumps(response)).extract_all("Create a bug about Safari login")

    assert extracted[IssueField.TYPE].value == "Bug"
    assert extracted[IssueField.TITLE].confidence == 0.9
    assert extracted[IssueField.PROJECT].valid is False
    assert extracted[IssueField.PROJECT].confidence == DEMOTED_CONFIDENCE


def test_extract_all_canonicalizes_project():
    extracted = _agent(json.dumps(GOOD_RESPONSE)).extract_all("Create a bug in engineering")
    assert extracted[IssueField.PROJECT].value == PROJECT_ENGINEERING


def test_extract_all_malformed_response_is_all_absent():
    extracted = _agent("I'm sorry, I can't help with that.").extract_all("Create a bug")
    assert extracted == empty_extraction()


def test_extract_all_llm_failure_is_all_absent():
    llm = MagicMock()
    llm.invoke.side_effect = RuntimeError("throttled")
    extracted = ParameterExtractionAgent(llm=llm).extract_all("Create a bug")
    assert extracted == empty_extraction()
    llm.invoke.assert_called_once()

"""Unit tests for rule-based extraction and intent detection."""

from __future__ import annotations

import pytest

from extraction.deterministic import extract, extract_description, extract_title, scan_utterance
from extraction.intent import (
    Confirmation,
    classify_confirmation,
    detects_issue_creation_intent,
    detects_search_intent,
    extract_search_query,
    is_cancellation,
)
from extraction.vocabulary import PROJECT_DEMO_PRODUCT, PROJECT_ENGINEERING
from schemas.fields import IssueField


# ── Follow-up answers ────────────────────────────────────────────────────────


def test_title_prefers_quoted_text():
    assert extract_title('call it "Broken login" please') == "Broken login"


def test_title_takes_whole_answer():
    assert extract_title("  Checkout times out  ") == "Checkout times out"


@pytest.mark.parametrize("answer", ["", "bug", "fix!"])
def test_title_too_short(answer):
    assert extract_title(answer) is None


@pytest.mark.parametrize("answer", ["skip", "Skip.", "none", "No description"])
def test_description_skip_is_empty_string(answer):
    assert extract_description(answer) == ""


def test_description_blank_is_none():
    assert extract_description("   ") is None


@pytest.mark.parametrize(
    "field, answer, expected",
    [
        (IssueField.PROJECT, "eng", PROJECT_ENGINEERING),
        (IssueField.PROJECT, "put it in the demo product one", PROJECT_DEMO_PRODUCT),
        (IssueField.TYPE, "it's a story", "Story"),
        (IssueField.PRIORITY, "make it very low", "Lowest"),
        (IssueField.PRIORITY, "HIGH", "High"),
    ],
)
def test_extract_enum_answers(field, answer, expected):
    assert extract(field, answer) == expected


def test_extract_enum_needs_whole_words():
    # "engine" must not match the "eng" alias
    assert extract(IssueField.PROJECT, "the engine room") is None
    assert extract(IssueField.TYPE, "debugging") is None


# ── First pass ───────────────────────────────────────────────────────────────


def test_scan_utterance_finds_explicit_values():
    found = scan_utterance('Create a high priority bug in the engineering project titled "Login loop"')
    assert found == {
        IssueField.TITLE: "Login loop",
        IssueField.PROJECT: PROJECT_ENGINEERING,
        IssueField.TYPE: "Bug",
        IssueField.PRIORITY: "High",
    }


def test_scan_utterance_generic_noun_is_not_a_type():
    assert IssueField.TYPE not in scan_utterance("create an issue about billing")


def test_scan_utterance_nothing_explicit():
    assert scan_utterance("I need to create a new ticket") == {}


# ── Intent ───────────────────────────────────────────────────────────────────


@pytest.mark.parametrize(
    "utterance, expected",
    [
        ("Create a bug in engineering", True),
        ("I want to report a problem", True),
        ("new task: update docs", True),
        ("create something nice", False),
        ("what is a bug?", False),
        ("recreate the tissue", False),
        ("find the open issue about login", False),
        ("file under the story about onboarding", False),
    ],
)
def test_detects_issue_creation_intent(utterance, expected):
    assert detects_issue_creation_intent(utterance) is expected


def test_search_intent_and_query():
    assert detects_search_intent("search for tickets about payments")
    assert not detects_search_intent("search the web")
    assert extract_search_query("find issues similar to login timeout") == "login timeout"


@pytest.mark.parametrize(
    "utterance, expected",
    [
        ("cancel", True),
        ("Stop!", True),
        ("please abort this", True),
        ("the job does not stop after an error", False),
        ("", False),
    ],
)
def test_is_cancellation(utterance, expected):
    assert is_cancellation(utterance) is expected


@pytest.mark.parametrize(
    "utterance, expected",
    [
        ("yes", Confirmation.CONFIRM),
        ("Yep, create it", Confirmation.CONFIRM),
        ("no", Confirmation.DECLINE),
        ("no, don't create it", Confirmation.DECLINE),
        ("nope", Confirmation.DECLINE),
        ("do not create it", Confirmation.DECLINE),
        ("don't create it", Confirmation.DECLINE),
        ("please don\u2019t create this", Confirmation.DECLINE),
        ("dont create", Confirmation.DECLINE),
        ("let me think", None),
    ],
)
def test_classify_confirmation(utterance, expected):
    assert classify_confirmation(utterance) == expected

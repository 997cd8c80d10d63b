"""Unit tests for Pydantic schemas."""

from __future__ import annotations

import math

import pytest
from pydantic import TypeAdapter, ValidationError

from schemas.fields import ExtractedValue, IssueField, Provenance
from schemas.slot_state import ConversationMode, SlotState
from schemas.ticket import CreationResult, IssueRecord, SimilarIssue
from schemas.turn import AskQuestion, Cancelled, Created, TurnResult


def test_extracted_value_defaults():
    v = ExtractedValue()
    assert v.is_absent
    assert v.confidence == 0.0
    assert v.provenance == Provenance.MODEL_INFERRED
    assert v.valid is True


@pytest.mark.parametrize("raw, expected", [(1.4, 1.0), (-0.2, 0.0), ("0.75", 0.75), ("high", 0.0), (None, 0.0), (math.nan, 0.0)])
def test_extracted_value_confidence_is_clamped(raw, expected):
    assert ExtractedValue(value="x", confidence=raw).confidence == expected


def test_absent_value_forces_zero_confidence():
    assert ExtractedValue(value=None, confidence=0.9).confidence == 0.0


def test_is_accepted_threshold_is_inclusive():
    assert ExtractedValue(value="Bug", confidence=0.6).is_accepted(0.6)
    assert not ExtractedValue(value="Bug", confidence=0.59).is_accepted(0.6)


def test_empty_string_is_a_known_value():
    v = ExtractedValue(value="", confidence=1.0, provenance=Provenance.DETERMINISTIC_FOLLOWUP)
    assert not v.is_absent
    assert v.is_accepted(0.6)


def test_issue_record_is_frozen():
    record = IssueRecord(project="FV Product", issue_type="Task", title="Update docs", priority="Low")
    assert record.description == ""
    with pytest.raises(ValidationError):
        record.title = "Something else"


def test_creation_result_minimal():
    r = CreationResult(success=False, error="Project not found")
    assert r.issue_id is None
    assert r.url is None


def test_slot_state_starts_idle():
    state = SlotState()
    assert state.mode == ConversationMode.IDLE
    assert state.current_field is None
    assert not state.is_active
    assert state.get(IssueField.TITLE).is_absent


def test_slot_state_sessions_are_distinct():
    assert SlotState().session_id != SlotState().session_id


def test_slot_state_reset_keeps_session():
    state = SlotState(mode=ConversationMode.COLLECTING)
    state.values[IssueField.TITLE] = ExtractedValue(value="Crash", confidence=1.0)
    state.pending_fields = [IssueField.DESCRIPTION]
    state.similar_issues = [SimilarIssue(id="ENG-1")]
    state.reprompt_count = 2
    session_id = state.session_id

    state.reset()

    assert state.mode == ConversationMode.IDLE
    assert state.values == {}
    assert state.pending_fields == []
    assert state.similar_issues == []
    assert state.reprompt_count == 0
    assert state.session_id == session_id


def test_slot_state_to_record():
    state = SlotState()
    state.values = {
        IssueField.PROJECT: ExtractedValue(value="FV Engineering", confidence=1.0),
        IssueField.TYPE: ExtractedValue(value="Bug", confidence=1.0),
        IssueField.TITLE: ExtractedValue(value="Crash on save", confidence=0.9),
        IssueField.PRIORITY: ExtractedValue(value="High", confidence=1.0),
    }
    record = state.to_record()
    assert record == IssueRecord(
        project="FV Engineering", issue_type="Bug", title="Crash on save", description="", priority="High"
    )


def test_conflicting_fields_ignores_defaults():
    state = SlotState(pending_fields=[IssueField.TYPE, IssueField.TITLE])
    state.values[IssueField.TYPE] = ExtractedValue(value="Bug", confidence=1.0, provenance=Provenance.DEFAULTED)
    state.values[IssueField.TITLE] = ExtractedValue(value="Crash on save", confidence=0.9)
    assert state.conflicting_fields(0.6) == [IssueField.TITLE]


def test_turn_result_discriminates_on_kind():
    adapter = TypeAdapter(TurnResult)
    ask = adapter.validate_python({"kind": "ask_question", "field": "title", "question": "Title?"})
    assert isinstance(ask, AskQuestion)
    assert ask.field == IssueField.TITLE

    cancelled = adapter.validate_python({"kind": "cancelled", "reason": "deadlock", "message": "Stopped."})
    assert isinstance(cancelled, Cancelled)


def test_created_serializes_kind():
    record = IssueRecord(project="FV Product", issue_type="Story", title="Dark mode", priority="Medium")
    data = Created(issue_id="PROD-9", record=record, message="done").model_dump(mode="json")
    assert data["kind"] == "created"
    assert data["record"]["issue_type"] == "Story"

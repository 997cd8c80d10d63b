"""Unit tests for extraction validation."""

from __future__ import annotations

from extraction.validator import DEMOTED_CONFIDENCE, validate, validate_all, validate_extracted
from extraction.vocabulary import PROJECT_ENGINEERING
from schemas.fields import ExtractedValue, IssueField, Provenance


def test_enum_value_is_canonicalized():
    v = validate(IssueField.PROJECT, "Engineering", 0.8)
    assert v.value == PROJECT_ENGINEERING
    assert v.confidence == 0.8
    assert v.valid is True


def test_unmappable_enum_is_demoted():
    v = validate(IssueField.TYPE, "Incident", 0.95)
    assert v.value == "Incident"
    assert v.confidence == DEMOTED_CONFIDENCE
    assert v.valid is False
    assert not v.is_accepted(0.6)


def test_demotion_keeps_lower_confidence():
    v = validate(IssueField.PRIORITY, "whenever", 0.1)
    assert v.confidence == 0.1


def test_free_text_passes_through():
    v = validate(IssueField.DESCRIPTION, "Steps: open the app", 0.7)
    assert v.value == "Steps: open the app"
    assert v.valid is True


def test_confidence_is_clamped():
    assert validate(IssueField.TITLE, "Crash on start", 1.7).confidence == 1.0
    assert validate(IssueField.TITLE, "Crash on start", -3).confidence == 0.0


def test_absent_value_has_zero_confidence():
    v = validate(IssueField.TYPE, None, 0.9)
    assert v.is_absent
    assert v.confidence == 0.0


def test_provenance_is_preserved():
    v = validate(IssueField.TYPE, "bug", 1.0, Provenance.USER_CONFIRMED)
    assert v.provenance == Provenance.USER_CONFIRMED


def test_validate_extracted_is_idempotent():
    once = validate(IssueField.PROJECT, "mars", 0.9)
    twice = validate_extracted(IssueField.PROJECT, once)
    assert twice == once


def test_validate_all_fills_missing_fields():
    result = validate_all({IssueField.TYPE: ExtractedValue(value="task", confidence=0.9)})
    assert set(result) == set(IssueField)
    assert result[IssueField.TYPE].value == "Task"
    assert result[IssueField.TITLE].is_absent

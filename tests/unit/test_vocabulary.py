"""Unit tests for the enumeration vocabulary."""

from __future__ import annotations

import pytest

from extraction.vocabulary import (
    ALIASES,
    CANONICAL_VALUES,
    PROJECT_DEMO_ISSUES,
    PROJECT_DEMO_PRODUCT,
    PROJECT_ENGINEERING,
    PROJECT_PRODUCT,
    canonicalize,
    describe_choices,
    is_valid_enum_value,
    keywords,
    normalize_key,
)
from schemas.fields import ENUM_FIELDS, IssueField


@pytest.mark.parametrize(
    "field, raw, expected",
    [
        (IssueField.PROJECT, "eng", PROJECT_ENGINEERING),
        (IssueField.PROJECT, "  Engineering ", PROJECT_ENGINEERING),
        (IssueField.PROJECT, "demo", PROJECT_DEMO_ISSUES),
        (IssueField.PROJECT, "DPD", PROJECT_DEMO_PRODUCT),
        (IssueField.PROJECT, "prod", PROJECT_PRODUCT),
        (IssueField.TYPE, "bug", "Bug"),
        (IssueField.TYPE, "EPIC", "Epic"),
        (IssueField.PRIORITY, "urgent", "High"),
        (IssueField.PRIORITY, "very   low", "Lowest"),
        (IssueField.PRIORITY, "blocker", "Highest"),
    ],
)
def test_canonicalize_aliases(field, raw, expected):
    assert canonicalize(field, raw) == expected


@pytest.mark.parametrize("raw", ["", "   ", "mars", "bugs please"])
def test_canonicalize_unknown_is_none(raw):
    assert canonicalize(IssueField.TYPE, raw) is None


def test_canonicalize_none_is_none():
    assert canonicalize(IssueField.PROJECT, None) is None


def test_canonicalize_free_text_passes_through():
    assert canonicalize(IssueField.TITLE, "  Keep My Spacing ") == "  Keep My Spacing "


def test_canonicalize_is_idempotent():
    for field in ENUM_FIELDS:
        samples = list(ALIASES[field]) + list(CANONICAL_VALUES[field]) + ["nonsense"]
        for raw in samples:
            once = canonicalize(field, raw)
            assert canonicalize(field, once) == once


def test_every_alias_maps_to_a_canonical_value():
    for field in ENUM_FIELDS:
        for alias, canonical in ALIASES[field].items():
            assert alias == normalize_key(alias)
            assert is_valid_enum_value(field, canonical)


def test_is_valid_enum_value():
    assert is_valid_enum_value(IssueField.PROJECT, PROJECT_ENGINEERING)
    assert not is_valid_enum_value(IssueField.PROJECT, "eng")
    assert not is_valid_enum_value(IssueField.TITLE, "anything")


def test_keywords_longest_first():
    lengths = [len(alias) for alias, _ in keywords(IssueField.PROJECT)]
    assert lengths == sorted(lengths, reverse=True)


def test_describe_choices():
    assert describe_choices(IssueField.TYPE) == "Bug, Task, Story, or Epic"

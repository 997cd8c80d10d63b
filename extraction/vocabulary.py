"""
Closed vocabulary for the enumeration fields (type, priority, project).

Every alias key is stored lower-cased with single spaces; canonical names are
their own aliases, which keeps canonicalize() idempotent.
"""

from __future__ import annotations

import re
from typing import Optional

from schemas.fields import ENUM_FIELDS, IssueField, IssueType, Priority

# ── Projects ──────────────────────────────────────────────────────────────────

PROJECT_DEMO_ISSUES = "FV Demo (Issues)"
PROJECT_DEMO_PRODUCT = "FV Demo (Product)"
PROJECT_ENGINEERING = "FV Engineering"
PROJECT_PRODUCT = "FV Product"

PROJECTS: tuple[str, ...] = (
    PROJECT_DEMO_ISSUES,
    PROJECT_DEMO_PRODUCT,
    PROJECT_ENGINEERING,
    PROJECT_PRODUCT,
)

PROJECT_ALIASES: dict[str, str] = {
    # FV Demo (Issues)
    "fv demo (issues)": PROJECT_DEMO_ISSUES,
    "fv demo issues": PROJECT_DEMO_ISSUES,
    "demo issues": PROJECT_DEMO_ISSUES,
    "fv demo": PROJECT_DEMO_ISSUES,
    "fvdemo": PROJECT_DEMO_ISSUES,
    "demo": PROJECT_DEMO_ISSUES,
    "dpi": PROJECT_DEMO_ISSUES,
    # FV Demo (Product)
    "fv demo (product)": PROJECT_DEMO_PRODUCT,
    "fv demo product": PROJECT_DEMO_PRODUCT,
    "demo product": PROJECT_DEMO_PRODUCT,
    "product demo": PROJECT_DEMO_PRODUCT,
    "dpd": PROJECT_DEMO_PRODUCT,
    # FV Engineering
    "fv engineering": PROJECT_ENGINEERING,
    "fanvoice engineering": PROJECT_ENGINEERING,
    "fv eng": PROJECT_ENGINEERING,
    "engineering": PROJECT_ENGINEERING,
    "eng": PROJECT_ENGINEERING,
    # FV Product
    "fv product": PROJECT_PRODUCT,
    "fanvoice product": PROJECT_PRODUCT,
    "product": PROJECT_PRODUCT,
    "prod": PROJECT_PRODUCT,
}

# ── Issue types & priorities ──────────────────────────────────────────────────

ISSUE_TYPES: tuple[str, ...] = tuple(t.value for t in IssueType)
PRIORITIES: tuple[str, ...] = tuple(p.value for p in Priority)

TYPE_ALIASES: dict[str, str] = {t.lower(): t for t in ISSUE_TYPES}

PRIORITY_ALIASES: dict[str, str] = {
    "lowest": Priority.LOWEST.value,
    "very low": Priority.LOWEST.value,
    "trivial": Priority.LOWEST.value,
    "low": Priority.LOW.value,
    "minor": Priority.LOW.value,
    "medium": Priority.MEDIUM.value,
    "normal": Priority.MEDIUM.value,
    "standard": Priority.MEDIUM.value,
    "high": Priority.HIGH.value,
    "important": Priority.HIGH.value,
    "urgent": Priority.HIGH.value,
    "major": Priority.HIGH.value,
    "highest": Priority.HIGHEST.value,
    "critical": Priority.HIGHEST.value,
    "blocker": Priority.HIGHEST.value,
    "severe": Priority.HIGHEST.value,
}

CANONICAL_VALUES: dict[IssueField, tuple[str, ...]] = {
    IssueField.TYPE: ISSUE_TYPES,
    IssueField.PRIORITY: PRIORITIES,
    IssueField.PROJECT: PROJECTS,
}

ALIASES: dict[IssueField, dict[str, str]] = {
    IssueField.TYPE: TYPE_ALIASES,
    IssueField.PRIORITY: PRIORITY_ALIASES,
    IssueField.PROJECT: PROJECT_ALIASES,
}

# Safe defaults applied when the model is not confident about an enumeration field
DEFAULT_VALUES: dict[IssueField, str] = {
    IssueField.TYPE: IssueType.BUG.value,
    IssueField.PROJECT: PROJECT_DEMO_ISSUES,
    IssueField.PRIORITY: Priority.MEDIUM.value,
}

_WS = re.compile(r"\s+")


def normalize_key(raw: str) -> str:
    return _WS.sub(" ", raw.strip().lower())


def canonicalize(field: IssueField, raw: Optional[str]) -> Optional[str]:
    """
    Map raw text to the canonical value of an enumeration field.

    Exact alias lookup only (trimmed, case-insensitive). Free-text fields are
    returned unchanged. None when nothing matches.
    """
    if raw is None:
        return None
    if field not in ENUM_FIELDS:
        return raw
    key = normalize_key(raw)
    if not key:
        return None
    canonical = ALIASES[field].get(key)
    if canonical is not None:
        return canonical
    for value in CANONICAL_VALUES[field]:
        if normalize_key(value) == key:
            return value
    return None


def is_valid_enum_value(field: IssueField, value: Optional[str]) -> bool:
    if field not in ENUM_FIELDS or value is None:
        return False
    return value in CANONICAL_VALUES[field]


def keywords(field: IssueField) -> list[tuple[str, str]]:
    """(alias, canonical) pairs for an enumeration field, longest alias first."""
    pairs = dict(ALIASES[field])
    for value in CANONICAL_VALUES[field]:
        pairs.setdefault(normalize_key(value), value)
    return sorted(pairs.items(), key=lambda kv: (-len(kv[0]), kv[0]))


def describe_choices(field: IssueField) -> str:
    """Human-readable list of the legal values, e.g. 'Bug, Task, Story, or Epic'."""
    values = list(CANONICAL_VALUES[field])
    return ", ".join(values[:-1]) + f", or {values[-1]}"

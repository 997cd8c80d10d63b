"""
Rule-based field recognition over a single utterance.

Two entry points:
  - extract(field, utterance): interprets the answer to a targeted follow-up
  - scan_utterance(utterance): the quick first pass over the request that
    started issue creation, taking only values the user stated explicitly
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Optional

from extraction.vocabulary import canonicalize, keywords, normalize_key
from schemas.fields import ENUM_FIELDS, IssueField

MIN_TITLE_LENGTH = 5
SKIP_DESCRIPTION_ANSWERS = frozenset({"skip", "none", "no description"})

_QUOTED = re.compile(r"\"([^\"]+)\"|“([^”]+)”")

_PROJECT_PATTERNS = [
    re.compile(r"\b(?:in|for|to)\s+(?:the\s+)?([a-z][\w ()]*?)(?:\s+project\b|[,.!?]|\s+(?:about|called|titled|named|with|that|where|because)\b|$)", re.IGNORECASE),
    re.compile(r"\b([a-z][\w]*)\s+project\b", re.IGNORECASE),
]
_TYPE_PATTERNS = [
    re.compile(r"\bcreate\s+(?:a\s+|an\s+)?(?:new\s+)?(\w+)", re.IGNORECASE),
    re.compile(r"\bnew\s+(\w+)", re.IGNORECASE),
    re.compile(r"\b(?:report|log|file)\s+(?:a\s+|an\s+)?(\w+)", re.IGNORECASE),
]
_PRIORITY_PATTERNS = [
    re.compile(r"\b(very\s+low|\w+)\s+priority\b", re.IGNORECASE),
    re.compile(r"\bpriority\s+(?:is\s+|of\s+|should\s+be\s+)?(very\s+low|\w+)", re.IGNORECASE),
    re.compile(r"\b(urgent|critical|important)\b", re.IGNORECASE),
]
_GENERIC_NOUNS = frozenset({"issue", "ticket"})


@lru_cache(maxsize=None)
def _keyword_patterns(field: IssueField) -> list[tuple[re.Pattern, str]]:
    patterns = []
    for alias, canonical in keywords(field):
        escaped = r"\s+".join(re.escape(part) for part in alias.split(" "))
        patterns.append((re.compile(rf"(?<![\w]){escaped}(?![\w])", re.IGNORECASE), canonical))
    return patterns


def _match_keyword(field: IssueField, utterance: str) -> Optional[str]:
    for pattern, canonical in _keyword_patterns(field):
        if pattern.search(utterance):
            return canonical
    return None


def quoted_text(utterance: str) -> Optional[str]:
    match = _QUOTED.search(utterance)
    if not match:
        return None
    text = (match.group(1) or match.group(2) or "").strip()
    return text or None


def extract_title(utterance: str) -> Optional[str]:
    quoted = quoted_text(utterance)
    if quoted:
        return quoted
    text = utterance.strip()
    if len(text) > MIN_TITLE_LENGTH:
        return text
    return None


def extract_description(utterance: str) -> Optional[str]:
    """Empty string for an explicit skip, None when nothing was said."""
    text = utterance.strip()
    if normalize_key(text).rstrip(".!") in SKIP_DESCRIPTION_ANSWERS:
        return ""
    return text or None


def extract(field: IssueField, utterance: str) -> Optional[str]:
    """Recognize a value for one targeted field. None means no usable answer."""
    if field == IssueField.TITLE:
        return extract_title(utterance)
    if field == IssueField.DESCRIPTION:
        return extract_description(utterance)
    if field in ENUM_FIELDS:
        return _match_keyword(field, utterance)
    return None


# ── First pass over the triggering utterance ──────────────────────────────────

def _scan_project(utterance: str) -> Optional[str]:
    for pattern in _PROJECT_PATTERNS:
        for match in pattern.finditer(utterance):
            candidate = match.group(1).strip()
            project = canonicalize(IssueField.PROJECT, candidate) or _match_keyword(IssueField.PROJECT, candidate)
            if project:
                return project
    return None


def _scan_type(utterance: str) -> Optional[str]:
    for pattern in _TYPE_PATTERNS:
        match = pattern.search(utterance)
        if match:
            word = match.group(1).lower()
            if word in _GENERIC_NOUNS:
                # "create an issue" says nothing about the type
                return None
            issue_type = canonicalize(IssueField.TYPE, word)
            if issue_type:
                return issue_type
    # "create a high priority bug": the type word is not right after the verb
    return _match_keyword(IssueField.TYPE, utterance)


def _scan_priority(utterance: str) -> Optional[str]:
    for pattern in _PRIORITY_PATTERNS:
        match = pattern.search(utterance)
        if match:
            priority = canonicalize(IssueField.PRIORITY, match.group(1))
            if priority:
                return priority
    return None


def scan_utterance(utterance: str) -> dict[IssueField, str]:
    """Values the user stated unprompted in the request itself."""
    found: dict[IssueField, str] = {}

    title = quoted_text(utterance)
    if title:
        found[IssueField.TITLE] = title

    project = _scan_project(utterance)
    if project:
        found[IssueField.PROJECT] = project

    issue_type = _scan_type(utterance)
    if issue_type:
        found[IssueField.TYPE] = issue_type

    priority = _scan_priority(utterance)
    if priority:
        found[IssueField.PRIORITY] = priority

    return found

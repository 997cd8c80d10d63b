from __future__ import annotations

import re
from enum import Enum
from typing import Optional

_WORD = re.compile(r"[a-z0-9']+")

CREATION_VERBS = frozenset({"create", "new", "make", "add", "report", "log", "submit"})
ISSUE_NOUNS = frozenset({"issue", "ticket", "bug", "task", "story", "epic", "problem"})
SEARCH_VERBS = frozenset({"search", "find", "look"})
SEARCH_NOUNS = frozenset({"issue", "issues", "ticket", "tickets"})
CANCEL_WORDS = frozenset({"cancel", "stop", "abort"})
AFFIRMATIVE_WORDS = frozenset({"yes", "y", "yeah", "yep", "confirm", "create"})
NEGATIVE_WORDS = frozenset({"no", "n", "nope", "nah", "not", "don't", "dont", "never", "cancel"})

# Longer utterances are answers that happen to mention a cancel word
MAX_CANCEL_WORDS = 4

_SEARCH_STRIP = re.compile(r"\b(?:search|find|look|for|issues?|tickets?|similar|to)\b", re.IGNORECASE)


class Confirmation(str, Enum):
    CONFIRM = "confirm"
    DECLINE = "decline"


def words(utterance: str) -> list[str]:
    return _WORD.findall(utterance.lower().replace("\u2019", "'"))


def detects_issue_creation_intent(utterance: str) -> bool:
    tokens = set(words(utterance))
    return bool(tokens & CREATION_VERBS) and bool(tokens & ISSUE_NOUNS)


def detects_search_intent(utterance: str) -> bool:
    tokens = set(words(utterance))
    return bool(tokens & SEARCH_VERBS) and bool(tokens & SEARCH_NOUNS)


def extract_search_query(utterance: str) -> str:
    return " ".join(_SEARCH_STRIP.sub(" ", utterance).split())


def is_cancellation(utterance: str) -> bool:
    tokens = words(utterance)
    return 0 < len(tokens) <= MAX_CANCEL_WORDS and any(t in CANCEL_WORDS for t in tokens)


def classify_confirmation(utterance: str) -> Optional[Confirmation]:
    """Any negation wins over affirmatives, so "please don't create it" declines."""
    tokens = set(words(utterance))
    if tokens & NEGATIVE_WORDS:
        return Confirmation.DECLINE
    if tokens & AFFIRMATIVE_WORDS:
        return Confirmation.CONFIRM
    return None

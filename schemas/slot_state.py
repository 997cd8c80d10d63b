from __future__ import annotations

import uuid
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from schemas.fields import ExtractedValue, IssueField, Provenance
from schemas.ticket import IssueRecord, SimilarIssue


class ConversationMode(str, Enum):
    IDLE = "idle"
    COLLECTING = "collecting"
    CONFIRMING = "confirming"
    TERMINAL_CREATE = "terminal-created"
    TERMINAL_CANCEL = "terminal-cancelled"


TERMINAL_MODES = frozenset({ConversationMode.TERMINAL_CREATE, ConversationMode.TERMINAL_CANCEL})


class SlotState(BaseModel):
    """
    The evolving issue record for one session.

    Owned by a single ConversationEngine caller and mutated once per turn.
    A field in pending_fields never also holds a confidently known,
    non-defaulted value.
    """

    session_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    mode: ConversationMode = ConversationMode.IDLE

    # ── Slots ────────────────────────────────────────────────────────────────
    values: dict[IssueField, ExtractedValue] = Field(default_factory=dict)
    pending_fields: list[IssueField] = Field(default_factory=list)
    # Fields already put to the user; re-asks omit the extraction hint
    asked_fields: set[IssueField] = Field(default_factory=set)

    # ── Turn bookkeeping ──────────────────────────────────────────────────────
    reprompt_count: int = 0
    similar_issues: list[SimilarIssue] = Field(default_factory=list)

    @property
    def current_field(self) -> Optional[IssueField]:
        return self.pending_fields[0] if self.pending_fields else None

    @property
    def is_active(self) -> bool:
        return self.mode in (ConversationMode.COLLECTING, ConversationMode.CONFIRMING)

    def get(self, field: IssueField) -> ExtractedValue:
        return self.values.get(field) or ExtractedValue.absent()

    def value_of(self, field: IssueField) -> Optional[str]:
        return self.get(field).value

    def conflicting_fields(self, threshold: float) -> list[IssueField]:
        """Pending fields that are also confidently known. Always empty in a consistent state."""
        return [
            f for f in self.pending_fields
            if self.get(f).is_accepted(threshold)
            and self.get(f).provenance != Provenance.DEFAULTED
        ]

    def to_record(self) -> IssueRecord:
        return IssueRecord(
            project=self.value_of(IssueField.PROJECT) or "",
            issue_type=self.value_of(IssueField.TYPE) or "",
            title=self.value_of(IssueField.TITLE) or "",
            description=self.value_of(IssueField.DESCRIPTION) or "",
            priority=self.value_of(IssueField.PRIORITY) or "",
        )

    def reset(self) -> None:
        """Return to IDLE, discarding every collected value."""
        self.mode = ConversationMode.IDLE
        self.values = {}
        self.pending_fields = []
        self.asked_fields = set()
        self.reprompt_count = 0
        self.similar_issues = []

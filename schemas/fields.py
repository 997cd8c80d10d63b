from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class IssueField(str, Enum):
    TITLE = "title"
    TYPE = "type"
    PROJECT = "project"
    PRIORITY = "priority"
    DESCRIPTION = "description"


FREE_TEXT_FIELDS = frozenset({IssueField.TITLE, IssueField.DESCRIPTION})
ENUM_FIELDS = frozenset({IssueField.TYPE, IssueField.PROJECT, IssueField.PRIORITY})


class IssueType(str, Enum):
    BUG = "Bug"
    TASK = "Task"
    STORY = "Story"
    EPIC = "Epic"


class Priority(str, Enum):
    LOWEST = "Lowest"
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    HIGHEST = "Highest"


class Provenance(str, Enum):
    MODEL_INFERRED = "model-inferred"
    USER_CONFIRMED = "user-confirmed"
    DETERMINISTIC_FOLLOWUP = "deterministic-followup"
    DEFAULTED = "defaulted"


class ExtractedValue(BaseModel):
    value: Optional[str] = None
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    provenance: Provenance = Provenance.MODEL_INFERRED
    valid: bool = Field(
        default=True,
        description="False when an enumeration value could not be canonicalized",
    )

    @field_validator("confidence", mode="before")
    @classmethod
    def _clamp_confidence(cls, v: object) -> float:
        try:
            c = float(v)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return 0.0
        if c != c:  # NaN
            return 0.0
        return max(0.0, min(1.0, c))

    @model_validator(mode="after")
    def _absent_has_no_confidence(self) -> "ExtractedValue":
        if self.value is None and self.confidence != 0.0:
            self.confidence = 0.0
        return self

    @classmethod
    def absent(cls, provenance: Provenance = Provenance.MODEL_INFERRED) -> "ExtractedValue":
        return cls(value=None, confidence=0.0, provenance=provenance)

    @property
    def is_absent(self) -> bool:
        return self.value is None

    def is_accepted(self, threshold: float) -> bool:
        """True when the value counts as known at the given threshold."""
        return self.value is not None and self.confidence >= threshold

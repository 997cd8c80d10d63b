from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class IssueRecord(BaseModel):
    """The finished record handed to the creation backend."""

    model_config = ConfigDict(frozen=True)

    project: str
    issue_type: str = Field(..., description="Bug | Task | Story | Epic")
    title: str
    description: str = ""
    priority: str = Field(..., description="Lowest | Low | Medium | High | Highest")


class CreationResult(BaseModel):
    success: bool
    issue_id: Optional[str] = Field(default=None, description="Jira issue key, e.g. ENG-123")
    url: Optional[str] = None
    error: Optional[str] = None
    raw_response: Optional[str] = Field(
        default=None,
        description="Raw backend response text, kept for audit",
    )


class SimilarIssue(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    summary: str = ""

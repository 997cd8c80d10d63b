from __future__ import annotations

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field

from schemas.fields import IssueField
from schemas.ticket import IssueRecord, SimilarIssue


class AskQuestion(BaseModel):
    kind: Literal["ask_question"] = "ask_question"
    field: IssueField
    question: str
    reprompt: bool = False


class ShowSummaryAndConfirm(BaseModel):
    kind: Literal["show_summary_and_confirm"] = "show_summary_and_confirm"
    record: IssueRecord
    summary: str
    prompt: str
    similar_issues: list[SimilarIssue] = Field(default_factory=list)
    reprompt: bool = False


class Created(BaseModel):
    kind: Literal["created"] = "created"
    issue_id: str
    url: Optional[str] = None
    record: IssueRecord
    message: str


class CreationFailed(BaseModel):
    kind: Literal["creation_failed"] = "creation_failed"
    error: str
    record: IssueRecord
    message: str


class Cancelled(BaseModel):
    kind: Literal["cancelled"] = "cancelled"
    reason: Literal["user", "deadlock"] = "user"
    message: str


class RegularChat(BaseModel):
    kind: Literal["regular_chat"] = "regular_chat"
    utterance: str


class SearchResults(BaseModel):
    kind: Literal["search_results"] = "search_results"
    query: str
    issues: list[SimilarIssue] = Field(default_factory=list)
    message: str


TurnResult = Annotated[
    Union[
        AskQuestion,
        ShowSummaryAndConfirm,
        Created,
        CreationFailed,
        Cancelled,
        RegularChat,
        SearchResults,
    ],
    Field(discriminator="kind"),
]

"""
Slot-filling conversation engine.

One call to ConversationEngine.process() handles one user utterance against
an explicitly passed SlotState and returns the next-turn decision:

  IDLE        --creation intent--> COLLECTING (question) | CONFIRMING (summary)
  COLLECTING  --valid answer-->    COLLECTING (next question) | CONFIRMING
  COLLECTING  --invalid answer-->  COLLECTING (same question, re-asked)
  CONFIRMING  --yes-->             TERMINAL_CREATE (record handed to the backend)
  CONFIRMING  --no-->              TERMINAL_CANCEL
  any active  --cancel word-->     TERMINAL_CANCEL

Terminal modes last one turn; the state is reset to IDLE before the next
utterance is handled. Creation failures reset to IDLE immediately.
"""

from __future__ import annotations

from typing import Callable, Optional

from app_logging.activity_logger import ActivityLogger
from config.settings import settings
from extraction.deterministic import MIN_TITLE_LENGTH, extract, scan_utterance
from extraction.intent import (
    Confirmation,
    classify_confirmation,
    detects_issue_creation_intent,
    detects_search_intent,
    extract_search_query,
    is_cancellation,
)
from extraction.validator import validate_all
from extraction.vocabulary import DEFAULT_VALUES, describe_choices
from schemas.fields import ExtractedValue, IssueField, Provenance
from schemas.slot_state import TERMINAL_MODES, ConversationMode, SlotState
from schemas.ticket import CreationResult, IssueRecord, SimilarIssue
from schemas.turn import (
    AskQuestion,
    Cancelled,
    Created,
    CreationFailed,
    RegularChat,
    SearchResults,
    ShowSummaryAndConfirm,
    TurnResult,
)

# Question order when several fields are missing. Under the default policy only
# title and description can be pending, so the effective order is title first:
# the title drives the duplicate search shown with the summary.
FIELD_ORDER: tuple[IssueField, ...] = (
    IssueField.PROJECT,
    IssueField.TYPE,
    IssueField.TITLE,
    IssueField.DESCRIPTION,
    IssueField.PRIORITY,
)
ENUM_ORDER: tuple[IssueField, ...] = (IssueField.TYPE, IssueField.PROJECT, IssueField.PRIORITY)

QUESTIONS: dict[IssueField, str] = {
    IssueField.PROJECT: f"Which project should this issue be created in? Please choose from: {describe_choices(IssueField.PROJECT)}.",
    IssueField.TYPE: f"What type of issue would you like to create? Please choose from: {describe_choices(IssueField.TYPE)}.",
    IssueField.TITLE: "What should be the title (summary) of this issue? Please provide a brief, descriptive title.",
    IssueField.DESCRIPTION: (
        "Please provide a description for this issue. Include any relevant details, steps to "
        "reproduce (for bugs), or requirements (for features). You can also say 'skip' if you "
        "don't want to add a description."
    ),
    IssueField.PRIORITY: f"What priority should this issue have? Please choose from: {describe_choices(IssueField.PRIORITY)}.",
}
REPROMPT_SUFFIX = "Please provide a valid response."
TITLE_REPROMPT_HINT = f"The title needs more than {MIN_TITLE_LENGTH} characters."

CONFIRM_PROMPT = "Please review the issue details above. Would you like me to create this issue? (yes/no)"
CONFIRM_REPROMPT = "Please confirm by saying 'yes' to create the issue, or 'no' to cancel."

CANCELLED_MESSAGE = (
    "No problem! Issue creation has been cancelled. "
    "Let me know if you need help with anything else."
)
DEADLOCK_MESSAGE = (
    "I still couldn't get a usable answer, so I've stopped creating this issue. "
    "Start again whenever you're ready."
)

MIN_SEARCH_QUERY_LENGTH = 3
SEARCH_TOO_SHORT_MESSAGE = "Please provide a more specific search term."

CreateTicketFn = Callable[[IssueRecord], CreationResult]
SearchSimilarFn = Callable[[str, Optional[str]], list[SimilarIssue]]
SearchIssuesFn = Callable[[str], list[SimilarIssue]]


def build_context_phrase(state: SlotState, threshold: float) -> str:
    """Context for the first question, e.g. "I'll create a bug in FV Engineering project." Empty when nothing is known."""
    parts: list[str] = []

    issue_type = state.get(IssueField.TYPE)
    parts.append(issue_type.value.lower() if issue_type.is_accepted(threshold) else "issue")

    title = state.get(IssueField.TITLE)
    if title.is_accepted(threshold) and title.value:
        parts.append(f'titled "{title.value}"')

    project = state.get(IssueField.PROJECT)
    if project.is_accepted(threshold):
        parts.append(f"in {project.value} project")

    priority = state.get(IssueField.PRIORITY)
    if priority.is_accepted(threshold):
        parts.append(f"with {priority.value.lower()} priority")

    if len(parts) == 1:
        return ""
    article = "an" if parts[0][0] in "aeiou" else "a"
    return f"I'll create {article} {' '.join(parts)}."


def format_summary(state: SlotState) -> str:
    def line(label: str, field: IssueField) -> str:
        extracted = state.get(field)
        value = extracted.value or ""
        if field == IssueField.DESCRIPTION:
            value = (value[:100] + "...") if len(value) > 100 else (value or "(none)")
        marker = " (default)" if extracted.provenance == Provenance.DEFAULTED else ""
        return f"  {label:<12} {value}{marker}"

    return "\n".join(
        [
            "Issue Summary:",
            line("Project:", IssueField.PROJECT),
            line("Type:", IssueField.TYPE),
            line("Title:", IssueField.TITLE),
            line("Priority:", IssueField.PRIORITY),
            line("Description:", IssueField.DESCRIPTION),
        ]
    )


class ConversationEngine:
    """Decides, turn by turn, what to ask next until an issue record is complete."""

    def __init__(
        self,
        extractor,
        create_ticket: CreateTicketFn,
        search_similar: Optional[SearchSimilarFn] = None,
        search_issues: Optional[SearchIssuesFn] = None,
        *,
        confidence_threshold: Optional[float] = None,
        max_reprompts: Optional[int] = None,
        default_enum_fields: Optional[bool] = None,
    ) -> None:
        self.extractor = extractor
        self._create_ticket = create_ticket
        self._search_similar = search_similar
        self._search_issues = search_issues
        self.threshold = settings.confidence_threshold if confidence_threshold is None else confidence_threshold
        self.max_reprompts = settings.max_reprompts if max_reprompts is None else max_reprompts
        self.default_enum_fields = (
            settings.default_enum_fields if default_enum_fields is None else default_enum_fields
        )
        self.logger = ActivityLogger("conversation_engine")

    def new_state(self) -> SlotState:
        return SlotState()

    # ── Turn entry point ──────────────────────────────────────────────────────

    def process(self, utterance: str, state: SlotState) -> TurnResult:
        if state.mode in TERMINAL_MODES:
            state.reset()

        if state.mode == ConversationMode.IDLE:
            return self._handle_idle(utterance, state)

        if is_cancellation(utterance):
            return self._cancel(state, reason="user")

        if state.mode == ConversationMode.COLLECTING:
            return self._handle_answer(utterance, state)
        return self._handle_confirmation(utterance, state)

    # ── IDLE ──────────────────────────────────────────────────────────────────

    def _handle_idle(self, utterance: str, state: SlotState) -> TurnResult:
        text = utterance.strip()
        if not text:
            return RegularChat(utterance=utterance)

        # "find the open issue about login" mentions an issue noun too; an
        # explicit search verb wins whenever a search backend is wired in.
        if self._search_issues is not None and detects_search_intent(text):
            return self._search(text, state)

        if detects_issue_creation_intent(text):
            return self._start_collection(text, state)

        return RegularChat(utterance=utterance)

    def _search(self, text: str, state: SlotState) -> SearchResults:
        query = extract_search_query(text)
        if len(query) < MIN_SEARCH_QUERY_LENGTH:
            self.logger.info("search_query_too_short", session_id=state.session_id, query=query)
            return SearchResults(query=query, issues=[], message=SEARCH_TOO_SHORT_MESSAGE)

        issues = self._safe_search(lambda: self._search_issues(query), state)
        message = (
            f"Found {len(issues)} issue(s) matching \"{query}\"."
            if issues
            else f"No issues found matching \"{query}\"."
        )
        return SearchResults(query=query, issues=issues, message=message)

    def _start_collection(self, text: str, state: SlotState) -> TurnResult:
        state.reset()
        state.mode = ConversationMode.COLLECTING
        self.logger.info("issue_creation_started", session_id=state.session_id)

        values = validate_all(self._extract(text, state))

        # Values the user stated outright. A quoted title always beats the
        # model's guess; other explicit values only fill unconfident slots.
        for field, value in scan_utterance(text).items():
            if field == IssueField.TITLE or not values[field].is_accepted(self.threshold):
                values[field] = ExtractedValue(value=value, confidence=1.0, provenance=Provenance.USER_CONFIRMED)

        if self.default_enum_fields:
            for field in ENUM_ORDER:
                if not values[field].is_accepted(self.threshold):
                    self.logger.info(
                        "slot_defaulted",
                        session_id=state.session_id,
                        field=field.value,
                        discarded_value=values[field].value,
                        discarded_confidence=values[field].confidence,
                        default=DEFAULT_VALUES[field],
                    )
                    values[field] = ExtractedValue(
                        value=DEFAULT_VALUES[field], confidence=1.0, provenance=Provenance.DEFAULTED
                    )

        state.values = values
        state.pending_fields = [f for f in FIELD_ORDER if not values[f].is_accepted(self.threshold)]

        self.logger.info(
            "slots_seeded",
            session_id=state.session_id,
            known=[f.value for f in IssueField if f not in state.pending_fields],
            pending=[f.value for f in state.pending_fields],
        )

        if not state.pending_fields:
            return self._enter_confirming(state)
        return self._ask(state, with_context=True)

    def _extract(self, text: str, state: SlotState) -> dict[IssueField, ExtractedValue]:
        try:
            return self.extractor.extract_all(text, session_id=state.session_id)
        except Exception as exc:
            self.logger.error("extraction_failed", exc=exc, session_id=state.session_id)
            return {}

    # ── COLLECTING ────────────────────────────────────────────────────────────

    def _ask(self, state: SlotState, with_context: bool = False, reprompt: bool = False) -> AskQuestion:
        field = state.current_field
        first_ask = field not in state.asked_fields
        state.asked_fields.add(field)

        parts = []
        if with_context:
            context = build_context_phrase(state, self.threshold)
            if context:
                parts.append(context)
        parts.append(QUESTIONS[field])

        # The model's unconfident guess is offered once; a re-ask only repeats the question
        hint = state.get(field)
        if first_ask and hint.value and not hint.is_accepted(self.threshold):
            if hint.valid:
                parts.append(f'(I picked up "{hint.value}"; reply with it or something better.)')
            else:
                parts.append(f'(I couldn\'t match "{hint.value}" to a known value.)')

        if reprompt:
            if field == IssueField.TITLE:
                parts.append(TITLE_REPROMPT_HINT)
            parts.append(REPROMPT_SUFFIX)

        return AskQuestion(field=field, question=" ".join(parts), reprompt=reprompt)

    def _handle_answer(self, utterance: str, state: SlotState) -> TurnResult:
        field = state.current_field
        value = extract(field, utterance)

        if value is None:
            self.logger.info("answer_rejected", session_id=state.session_id, field=field.value)
            if self._count_reprompt(state):
                return self._cancel(state, reason="deadlock")
            return self._ask(state, reprompt=True)

        state.values[field] = ExtractedValue(
            value=value, confidence=1.0, provenance=Provenance.DETERMINISTIC_FOLLOWUP
        )
        state.pending_fields.pop(0)
        state.asked_fields.add(field)
        state.reprompt_count = 0
        self.logger.info(
            "slot_accepted",
            session_id=state.session_id,
            field=field.value,
            skipped=(value == ""),
        )

        if not state.pending_fields:
            return self._enter_confirming(state)
        return self._ask(state)

    def _count_reprompt(self, state: SlotState) -> bool:
        """Record one more invalid answer; True once the deadlock limit is passed."""
        state.reprompt_count += 1
        return state.reprompt_count > self.max_reprompts

    # ── CONFIRMING ────────────────────────────────────────────────────────────

    def _enter_confirming(self, state: SlotState) -> ShowSummaryAndConfirm:
        state.mode = ConversationMode.CONFIRMING
        state.reprompt_count = 0
        record = state.to_record()

        if self._search_similar is not None:
            state.similar_issues = self._safe_search(
                lambda: self._search_similar(record.title, record.description or None), state
            )

        return self._summary(state, record)

    def _summary(self, state: SlotState, record: IssueRecord, reprompt: bool = False) -> ShowSummaryAndConfirm:
        return ShowSummaryAndConfirm(
            record=record,
            summary=format_summary(state),
            prompt=CONFIRM_REPROMPT if reprompt else CONFIRM_PROMPT,
            similar_issues=list(state.similar_issues),
            reprompt=reprompt,
        )

    def _handle_confirmation(self, utterance: str, state: SlotState) -> TurnResult:
        decision = classify_confirmation(utterance)
        if decision == Confirmation.DECLINE:
            return self._cancel(state, reason="user")
        if decision == Confirmation.CONFIRM:
            return self._create(state)

        if self._count_reprompt(state):
            return self._cancel(state, reason="deadlock")
        return self._summary(state, state.to_record(), reprompt=True)

    def _create(self, state: SlotState) -> TurnResult:
        record = state.to_record()
        state.mode = ConversationMode.TERMINAL_CREATE
        self.logger.info("issue_creation_confirmed", session_id=state.session_id, title=record.title)

        try:
            result = self._create_ticket(record)
        except Exception as exc:
            self.logger.error("create_ticket_raised", exc=exc, session_id=state.session_id)
            result = CreationResult(success=False, error=str(exc))

        if result.success:
            issue_id = result.issue_id or "N/A"
            self.logger.info("issue_created", session_id=state.session_id, issue_id=issue_id)
            return Created(
                issue_id=issue_id,
                url=result.url,
                record=record,
                message=(
                    f"Perfect! I've successfully created your Jira issue with key {issue_id}. "
                    f"The issue \"{record.title}\" has been added to your {record.project} project. "
                    "Is there anything else you'd like me to help you with?"
                ),
            )

        error = result.error or "Unknown error"
        self.logger.warning("issue_creation_failed", session_id=state.session_id, error_message=error)
        state.reset()
        return CreationFailed(
            error=error,
            record=record,
            message=(
                f"I encountered an issue while creating your Jira ticket. The error was: {error}. "
                "Say so if you'd like to start over."
            ),
        )

    # ── Shared ────────────────────────────────────────────────────────────────

    def _cancel(self, state: SlotState, reason: str) -> Cancelled:
        self.logger.info(
            "issue_creation_cancelled",
            session_id=state.session_id,
            reason=reason,
            mode=state.mode.value,
        )
        state.reset()
        state.mode = ConversationMode.TERMINAL_CANCEL
        return Cancelled(
            reason=reason,
            message=DEADLOCK_MESSAGE if reason == "deadlock" else CANCELLED_MESSAGE,
        )

    def _safe_search(self, search: Callable[[], list[SimilarIssue]], state: SlotState) -> list[SimilarIssue]:
        try:
            return list(search())
        except Exception as exc:
            self.logger.warning(
                "issue_search_failed",
                session_id=state.session_id,
                error_type=type(exc).__name__,
                error_message=str(exc),
            )
            return []

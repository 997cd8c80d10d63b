from __future__ import annotations

from typing import Optional

from agents.chat_agent import ChatAgent
from agents.conversation_engine import ConversationEngine
from agents.extraction_agent import ParameterExtractionAgent
from agents.tracker_agent import JiraTrackerAgent
from app_logging.activity_logger import ActivityLogger
from config.logging_config import bind_session
from schemas.slot_state import SlotState
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

logger = ActivityLogger("supervisor")

MAX_LISTED_ISSUES = 5


def render_turn(result: TurnResult) -> str:
    """Reply text for the console."""
    if isinstance(result, AskQuestion):
        return result.question

    if isinstance(result, ShowSummaryAndConfirm):
        if result.reprompt:
            return result.prompt
        lines = [result.summary]
        if result.similar_issues:
            lines.append("")
            lines.append("Possibly related existing issues:")
            lines.extend(f"  - {i.id}: {i.summary}" for i in result.similar_issues[:MAX_LISTED_ISSUES])
        lines.append("")
        lines.append(result.prompt)
        return "\n".join(lines)

    if isinstance(result, Created):
        if result.url:
            return f"{result.message}\nLink: {result.url}"
        return result.message

    if isinstance(result, SearchResults):
        lines = [result.message]
        lines.extend(f"  {n}. {i.id}: {i.summary}" for n, i in enumerate(result.issues[:MAX_LISTED_ISSUES], 1))
        if len(result.issues) > MAX_LISTED_ISSUES:
            lines.append(f"  ... and {len(result.issues) - MAX_LISTED_ISSUES} more")
        return "\n".join(lines)

    if isinstance(result, (CreationFailed, Cancelled)):
        return result.message

    raise TypeError(f"render_turn cannot render {type(result).__name__}")


class IntakeSession:
    """
    One console session: owns the SlotState and wires the engine to its
    collaborators. Regular chat is answered by the ChatAgent.
    """

    def __init__(
        self,
        engine: Optional[ConversationEngine] = None,
        chat_agent: Optional[ChatAgent] = None,
    ) -> None:
        if engine is None:
            tracker = JiraTrackerAgent()
            engine = ConversationEngine(
                extractor=ParameterExtractionAgent(),
                create_ticket=tracker.create_ticket,
                search_similar=tracker.search_similar,
                search_issues=tracker.search_issues,
            )
        self.engine = engine
        self.chat_agent = chat_agent or ChatAgent()
        self.state: SlotState = engine.new_state()
        bind_session(self.state.session_id)
        logger.info("session_started", session_id=self.state.session_id)

    def handle(self, utterance: str) -> tuple[TurnResult, str]:
        """Process one utterance; returns the turn decision and the reply to show."""
        self.chat_agent.add_user_message(utterance)
        result = self.engine.process(utterance, self.state)

        if isinstance(result, RegularChat):
            reply = self.chat_agent.respond(session_id=self.state.session_id)
        else:
            reply = render_turn(result)
            self.chat_agent.add_assistant_message(reply)

        logger.debug(
            "turn_completed",
            session_id=self.state.session_id,
            kind=result.kind,
            mode=self.state.mode.value,
        )
        return result, reply

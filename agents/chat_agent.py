from __future__ import annotations

from typing import Optional

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from agents.base_agent import BaseAgent
from config.settings import settings
from prompts.chat_prompt import CHAT_SYSTEM

FALLBACK_REPLY = "Sorry, I encountered an error. Please try again."


class ChatAgent(BaseAgent):
    """Generic chat for utterances unrelated to issue creation."""

    llm_temperature = settings.chat_temperature
    llm_max_tokens = settings.chat_max_tokens

    def __init__(self, llm=None) -> None:
        super().__init__(llm)
        self.history: list[BaseMessage] = [SystemMessage(content=CHAT_SYSTEM)]

    def add_user_message(self, content: str) -> None:
        self.history.append(HumanMessage(content=content))

    def add_assistant_message(self, content: str) -> None:
        self.history.append(AIMessage(content=content))

    def respond(self, session_id: Optional[str] = None) -> str:
        """Answer the conversation so far; the latest user message must already be in history."""
        try:
            reply = self.invoke_llm(
                list(self.history),
                prompt_template_name="regular_chat",
                session_id=session_id,
            )
        except Exception as exc:
            self.logger.error("chat_response_failed", exc=exc, session_id=session_id)
            return FALLBACK_REPLY

        reply = str(reply).strip() or FALLBACK_REPLY
        self.add_assistant_message(reply)
        return reply

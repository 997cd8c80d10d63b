from __future__ import annotations

import asyncio
from typing import Any, Callable, Optional

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import BaseMessage

from llm.chat_model import get_llm
from llm.llm_logger import llm_logger
from app_logging.activity_logger import ActivityLogger


class BaseAgent:
    """
    Base class for the assistant's collaborators.

    Provides:
    - Lazily built LLM, shared through get_llm()
    - Logged LLM invocation via invoke_llm() (every call captured by llm_logger)
    - Activity event logging
    - Async-to-sync bridge for MCP calls made inside a synchronous turn
    """

    llm_temperature: Optional[float] = None
    llm_max_tokens: Optional[int] = None

    def __init__(self, llm: Optional[BaseChatModel] = None) -> None:
        self.agent_name = self.__class__.__name__
        self.logger = ActivityLogger(self.agent_name)
        self._llm: Optional[BaseChatModel] = llm

    # ── LLM ──────────────────────────────────────────────────────────────────

    @property
    def llm(self) -> BaseChatModel:
        if self._llm is None:
            self._llm = get_llm(self.llm_temperature, self.llm_max_tokens)
        return self._llm

    def invoke_llm(
        self,
        messages: list[BaseMessage],
        prompt_template_name: str,
        session_id: Optional[str] = None,
        parse_fn: Optional[Callable[[str], Any]] = None,
    ) -> Any:
        """
        Invoke the LLM and return the parsed output (raw text without parse_fn).

        Raises RuntimeError when the call itself failed and ValueError when
        parse_fn rejected the response, so callers decide how to degrade.
        Every invocation is logged to logs/llm_calls.jsonl.
        """
        parsed_output, record = llm_logger.invoke_and_log(
            llm=self.llm,
            messages=messages,
            component=self.agent_name,
            prompt_template_name=prompt_template_name,
            session_id=session_id,
            parse_fn=parse_fn,
        )

        self.logger.info(
            "llm_call_completed",
            session_id=session_id,
            call_id=record.call_id,
            latency_ms=round(record.latency_ms, 1),
            tokens=record.total_token_count,
            parsed_ok=record.parsed_successfully,
        )

        if record.error_occurred:
            raise RuntimeError(f"{record.error_type}: {record.error_message}")
        if not record.parsed_successfully:
            raise ValueError(record.parse_error or "unparsable LLM response")
        return parsed_output

    # ── Async bridge ──────────────────────────────────────────────────────────

    def run_async(self, coro) -> Any:
        """
        Run an async coroutine from a synchronous turn.
        Handles nested event loops (e.g. Jupyter / some test runners).
        """
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            # No running event loop, safe to use asyncio.run()
            return asyncio.run(coro)

        # Already inside a running event loop: delegate to a new thread
        import concurrent.futures
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            future = pool.submit(asyncio.run, coro)
            return future.result()

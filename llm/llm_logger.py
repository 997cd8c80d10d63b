from __future__ import annotations

import time
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Optional

from langchain_core.messages import HumanMessage, SystemMessage
from pydantic import BaseModel, Field

from config.settings import settings
from app_logging.activity_logger import ActivityLogger

_activity = ActivityLogger("llm_logger")


class LLMCallRecord(BaseModel):
    """One LLM invocation as written to logs/llm_calls.jsonl."""

    call_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    session_id: Optional[str] = None
    component: str

    # Request
    model_id: str
    prompt_template_name: str
    system_prompt: Optional[str] = None
    human_prompt: str = ""
    message_count: int = 0
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None

    # Response
    raw_response: str = ""
    stop_reason: Optional[str] = None
    prompt_token_count: Optional[int] = None
    completion_token_count: Optional[int] = None
    total_token_count: Optional[int] = None
    latency_ms: float = 0.0
    invoked_at: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )

    # Outcome
    parsed_successfully: bool = False
    parse_error: Optional[str] = None
    error_occurred: bool = False
    error_type: Optional[str] = None
    error_message: Optional[str] = None


def _prompt_texts(messages: list) -> tuple[Optional[str], str]:
    """(system prompt, latest human prompt) of a message list."""
    system_prompt: Optional[str] = None
    human_prompt = ""
    for m in messages:
        if isinstance(m, SystemMessage):
            system_prompt = str(m.content)
        elif isinstance(m, HumanMessage):
            human_prompt = str(m.content)
    return system_prompt, human_prompt


def _response_metadata(response: Any) -> dict[str, Any]:
    """Token usage and stop reason, whichever the provider reported."""
    fields: dict[str, Any] = {}

    usage = getattr(response, "usage_metadata", None)
    if usage:
        fields["prompt_token_count"] = usage.get("input_tokens")
        fields["completion_token_count"] = usage.get("output_tokens")
        fields["total_token_count"] = usage.get("total_tokens")

    metadata = getattr(response, "response_metadata", None)
    if metadata:
        # Bedrock reports stop_reason, OpenAI finish_reason
        fields["stop_reason"] = metadata.get("stop_reason") or metadata.get("finish_reason")

    return fields


def _llm_setting(llm: Any, name: str, kind: type) -> Any:
    """A numeric sampling setting of the chat model, None when it has none."""
    value = getattr(llm, name, None)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return kind(value)


class LLMLogger:
    """
    Records every LLM invocation as one JSON line.
    Usage:
        parsed, record = llm_logger.invoke_and_log(llm, messages, ...)
    """

    def __init__(self, log_path: Optional[str] = None) -> None:
        self._log_path = Path(log_path or settings.llm_log_path)
        self._log_path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def log_path(self) -> Path:
        return self._log_path

    def log_call(self, record: LLMCallRecord) -> str:
        """Append record to the JSONL file. Returns call_id."""
        try:
            with open(self._log_path, "a", encoding="utf-8") as f:
                f.write(record.model_dump_json() + "\n")
        except OSError as exc:
            _activity.warning(
                "llm_log_write_failed",
                session_id=record.session_id,
                call_id=record.call_id,
                error_message=str(exc),
            )
        return record.call_id

    def invoke_and_log(
        self,
        llm: Any,
        messages: list,
        component: str,
        prompt_template_name: str,
        session_id: Optional[str] = None,
        parse_fn: Optional[Callable[[str], Any]] = None,
    ) -> tuple[Any, LLMCallRecord]:
        """
        Invoke the LLM, parse the reply text and log the call.
        Returns (parsed_output_or_raw_text, record).

        Never raises: invocation and parse failures are reported on the
        record (error_occurred / parse_error) and the output is None.
        """
        system_prompt, human_prompt = _prompt_texts(messages)
        record = LLMCallRecord(
            session_id=session_id,
            component=component,
            model_id=settings.active_model_id,
            prompt_template_name=prompt_template_name,
            system_prompt=system_prompt,
            human_prompt=human_prompt,
            message_count=len(messages),
            temperature=_llm_setting(llm, "temperature", float),
            max_tokens=_llm_setting(llm, "max_tokens", int),
        )
        parsed_output: Any = None

        start = time.monotonic()
        try:
            response = llm.invoke(messages)
        except Exception as exc:
            record.error_occurred = True
            record.error_type = type(exc).__name__
            record.error_message = str(exc)
        else:
            record.raw_response = str(getattr(response, "content", response))
            for name, value in _response_metadata(response).items():
                setattr(record, name, value)
        record.latency_ms = (time.monotonic() - start) * 1000

        if not record.error_occurred:
            if parse_fn is None:
                parsed_output = record.raw_response
                record.parsed_successfully = True
            else:
                try:
                    parsed_output = parse_fn(record.raw_response)
                    record.parsed_successfully = True
                except Exception as pe:
                    record.parse_error = str(pe)

        self.log_call(record)
        return parsed_output, record


# Module-level singleton
llm_logger = LLMLogger()

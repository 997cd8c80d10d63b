from __future__ import annotations

import json
import re
from typing import Any, Optional

from langchain_core.messages import HumanMessage, SystemMessage

from agents.base_agent import BaseAgent
from extraction.validator import validate
from extraction.vocabulary import ISSUE_TYPES, PRIORITIES, PROJECT_ALIASES, PROJECTS
from prompts.extraction_prompt import EXTRACTION_HUMAN_TEMPLATE, EXTRACTION_SYSTEM
from schemas.fields import ExtractedValue, IssueField, Provenance

_CODE_FENCE = re.compile(r"```(?:json)?\s*", re.IGNORECASE)
_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")

# Marks "in/for/to <project>" so the model does not read the project out of the
# description. First matching rule only.
_PROJECT_MARKERS: list[tuple[re.Pattern, str]] = [
    (re.compile(rf"\b({prep})\s+(?:the\s+)?{name}\b", re.IGNORECASE), rf"\1 [PROJECT:{label}]")
    for prep in ("in", "for", "to")
    for name, label in (
        (r"fv\s+demo\s+product", "FV Demo Product"),
        (r"demo\s+product", "FV Demo Product"),
        (r"fv\s+product", "FV Product"),
        (r"fv\s+engineering", "FV Engineering"),
        (r"engineering", "FV Engineering"),
        (r"fv\s+demo\s+issues", "FV Demo Issues"),
        (r"demo\s+issues", "FV Demo Issues"),
        (r"demo", "FV Demo Issues"),
    )
]


def mark_project_mentions(utterance: str) -> str:
    for pattern, replacement in _PROJECT_MARKERS:
        if pattern.search(utterance):
            return pattern.sub(replacement, utterance, count=1)
    return utterance


def parse_extraction_response(raw: Any) -> dict[IssueField, ExtractedValue]:
    """
    Turn the model's untrusted output into per-field ExtractedValues.

    Accepts a dict or text (code fences and chatter around the JSON object are
    tolerated). Raises ValueError when no JSON object can be recovered.
    """
    if isinstance(raw, str):
        text = _CODE_FENCE.sub("", raw.strip()).replace("```", "")
        match = _JSON_OBJECT.search(text)
        if not match:
            raise ValueError("no JSON object in extraction response")
        try:
            data = json.loads(match.group(0))
        except json.JSONDecodeError as exc:
            raise ValueError(f"invalid JSON in extraction response: {exc}") from exc
    else:
        data = raw

    if not isinstance(data, dict):
        raise ValueError(f"extraction response is {type(data).__name__}, expected object")

    return {field: _parse_parameter(data.get(field.value)) for field in IssueField}


def _parse_parameter(param: Any) -> ExtractedValue:
    if not isinstance(param, dict):
        return ExtractedValue.absent()

    value = param.get("value")
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        value = str(value)
    if not isinstance(value, str) or not value.strip():
        value = None
    else:
        value = value.strip()

    return ExtractedValue(
        value=value,
        confidence=param.get("confidence", 0),
        provenance=Provenance.MODEL_INFERRED,
    )


def empty_extraction() -> dict[IssueField, ExtractedValue]:
    return {field: ExtractedValue.absent() for field in IssueField}


class ParameterExtractionAgent(BaseAgent):
    """Wraps the LLM extraction oracle: one call per issue-creation request."""

    def build_messages(self, utterance: str) -> list:
        human_prompt = EXTRACTION_HUMAN_TEMPLATE.format(
            utterance=mark_project_mentions(utterance),
            issue_types=", ".join(ISSUE_TYPES),
            projects=", ".join(f'"{p}"' for p in PROJECTS),
            project_aliases=", ".join(sorted(PROJECT_ALIASES)),
            priorities=", ".join(PRIORITIES),
        )
        return [
            SystemMessage(content=EXTRACTION_SYSTEM),
            HumanMessage(content=human_prompt),
        ]

    def extract_all(
        self, utterance: str, session_id: Optional[str] = None
    ) -> dict[IssueField, ExtractedValue]:
        """
        Best-effort guess for all five fields, each validated.

        Never raises: a failed or unparsable call yields all-absent values and
        the conversation falls back to asking for everything.
        """
        try:
            parsed = self.invoke_llm(
                self.build_messages(utterance),
                prompt_template_name="issue_parameter_extraction",
                session_id=session_id,
                parse_fn=parse_extraction_response,
            )
        except Exception as exc:
            self.logger.warning(
                "extraction_failed",
                session_id=session_id,
                error_type=type(exc).__name__,
                error_message=str(exc),
            )
            return empty_extraction()

        validated = {
            field: validate(field, extracted.value, extracted.confidence, extracted.provenance)
            for field, extracted in parsed.items()
        }

        self.logger.info(
            "extraction_completed",
            session_id=session_id,
            fields={
                field.value: {"value": v.value, "confidence": v.confidence, "valid": v.valid}
                for field, v in validated.items()
            },
        )
        return validated

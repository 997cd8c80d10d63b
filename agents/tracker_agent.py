from __future__ import annotations

import json
import re
from typing import Any, Optional

from agents.base_agent import BaseAgent
from config.settings import settings
from mcp_client.client_factory import find_tool, get_mcp_client
from schemas.ticket import CreationResult, IssueRecord, SimilarIssue

_ISSUE_KEY = re.compile(r"\b([A-Z][A-Z0-9]*-\d+)\b")
_URL = re.compile(r"(https?://[^\s\"']+)")
_SUCCESS_WORDS = ("created", "success")
_ERROR_WORDS = ("error", "failed", "unable")


def _tool_result_text(result: Any) -> str:
    """Collapse a LangChain MCP tool result into plain text.

    Tools with response_format='content_and_artifact' return a list of
    content blocks: [{"type": "text", "text": "<json string>"}, ...].
    """
    if isinstance(result, tuple):
        result = result[0]

    if isinstance(result, str):
        return result

    if isinstance(result, dict):
        return json.dumps(result)

    if isinstance(result, list):
        text_parts = []
        for block in result:
            if isinstance(block, dict) and block.get("type") == "text":
                text_parts.append(block.get("text", ""))
            elif hasattr(block, "text"):
                text_parts.append(block.text)
            elif isinstance(block, str):
                text_parts.append(block)
        return "\n".join(text_parts)

    return str(result)


def parse_created_issue_response(text: str) -> CreationResult:
    """Interpret the create-issue tool output (Zapier JSON, or free text as a fallback)."""
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, ValueError):
        return _parse_text_response(text)

    if not isinstance(data, dict):
        return _parse_text_response(text)

    execution = data.get("execution") if isinstance(data.get("execution"), dict) else None
    status = execution.get("status") if execution else None

    results = data.get("results")
    if isinstance(results, list) and results and isinstance(results[0], dict):
        issue = results[0]
        succeeded = status is None or status == "SUCCESS"
        return CreationResult(
            success=succeeded and bool(issue.get("key")),
            issue_id=issue.get("key"),
            url=data.get("issueUrl") or issue.get("self"),
            error=None if succeeded else f"Execution status: {status}",
            raw_response=text,
        )

    if execution is not None:
        succeeded = status == "SUCCESS"
        return CreationResult(
            success=succeeded,
            error=None if succeeded else f"Execution status: {status}",
            raw_response=text,
        )

    return _parse_text_response(text)


def _parse_text_response(text: str) -> CreationResult:
    lowered = text.lower()
    key_match = _ISSUE_KEY.search(text)
    url_match = _URL.search(text)

    is_success = key_match is not None or any(w in lowered for w in _SUCCESS_WORDS)
    is_error = any(w in lowered for w in _ERROR_WORDS) or '"status":"FAILED"' in text

    succeeded = is_success and not is_error
    return CreationResult(
        success=succeeded,
        issue_id=key_match.group(1) if key_match else None,
        url=url_match.group(1) if url_match else None,
        error=None if succeeded else (text.strip() or "Unknown error occurred"),
        raw_response=text,
    )


def parse_search_results(text: str) -> list[SimilarIssue]:
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, ValueError):
        data = None

    if isinstance(data, dict) and isinstance(data.get("results"), list):
        issues = []
        for item in data["results"]:
            if not isinstance(item, dict) or not item.get("key"):
                continue
            fields = item.get("fields") if isinstance(item.get("fields"), dict) else {}
            issues.append(SimilarIssue(id=item["key"], summary=fields.get("summary") or item.get("summary") or ""))
        return issues

    issues = []
    for line in text.splitlines():
        match = _ISSUE_KEY.search(line)
        if match:
            summary = line.replace(match.group(1), "").strip(" :-\t")
            issues.append(SimilarIssue(id=match.group(1), summary=summary))
    return issues


def similarity(a: str, b: str) -> float:
    """Jaccard similarity over lower-cased words."""
    words_a = set(a.lower().split())
    words_b = set(b.lower().split())
    union = words_a | words_b
    if not union:
        return 0.0
    return len(words_a & words_b) / len(union)


def build_similarity_query(title: str, description: Optional[str] = None) -> str:
    terms = [title]
    if description:
        terms.extend([w for w in description.split() if len(w) > 3][:3])
    return " ".join(terms)


async def _call_tool(tool_name: str, arguments: dict) -> str:
    async with get_mcp_client() as client:
        tools = await client.get_tools()
        tool = find_tool(tools, tool_name)
        if tool is None:
            raise RuntimeError(
                f"MCP tool {tool_name!r} not found. Available: {[t.name for t in tools]}"
            )
        result = await tool.ainvoke(arguments)
        return _tool_result_text(result)


class JiraTrackerAgent(BaseAgent):
    """Creates and searches Jira issues through Zapier's MCP tools."""

    def create_ticket(self, record: IssueRecord, session_id: Optional[str] = None) -> CreationResult:
        if settings.dry_run:
            self.logger.info("dry_run_skip_jira_create", session_id=session_id, title=record.title)
            return CreationResult(success=True, issue_id="DRY-RUN", raw_response="dry run")

        arguments = {
            "instructions": (
                "Create a new Jira issue with the following details:\n"
                f"- Project: {record.project}\n"
                f"- Summary: {record.title}\n"
                f"- Description: {record.description or 'No description provided'}\n"
                f"- Issue Type: {record.issue_type}\n"
                f"- Priority: {record.priority}"
            ),
            "project": record.project,
            "summary": record.title,
            "description": record.description,
            "issueType": record.issue_type,
            "priority": record.priority,
        }

        try:
            text = self.run_async(_call_tool(settings.jira_create_tool, arguments))
        except Exception as exc:
            self.logger.error("jira_create_failed", exc=exc, session_id=session_id)
            return CreationResult(success=False, error=str(exc))

        result = parse_created_issue_response(text)
        if result.success:
            self.logger.info("jira_issue_created", session_id=session_id, issue_id=result.issue_id, url=result.url)
        else:
            self.logger.warning("jira_create_rejected", session_id=session_id, error_message=result.error)
        return result

    def search_issues(self, query: str, session_id: Optional[str] = None) -> list[SimilarIssue]:
        arguments = {
            "instructions": f'Search for Jira issues related to: "{query}"',
            "summary": query,
        }
        try:
            text = self.run_async(_call_tool(settings.jira_search_tool, arguments))
        except Exception as exc:
            self.logger.error("jira_search_failed", exc=exc, session_id=session_id, query=query)
            return []

        issues = parse_search_results(text)
        self.logger.info("jira_search_completed", session_id=session_id, query=query, hits=len(issues))
        return issues

    def search_similar(
        self,
        title: str,
        description: Optional[str] = None,
        session_id: Optional[str] = None,
    ) -> list[SimilarIssue]:
        """Advisory duplicate check; any failure yields no hits."""
        candidates = self.search_issues(build_similarity_query(title, description), session_id=session_id)
        similar = [
            issue for issue in candidates
            if similarity(title, issue.summary) > settings.similarity_threshold
        ]
        return similar[: settings.max_similar_issues]

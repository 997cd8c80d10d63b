from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from langchain_mcp_adapters.client import MultiServerMCPClient

from config.settings import settings
from app_logging.activity_logger import ActivityLogger

logger = ActivityLogger("mcp_client_factory")


def _build_server_config() -> dict:
    """
    Build the server configuration dict for MultiServerMCPClient.

    Jira is reached through Zapier's hosted MCP server (streamable HTTP; the
    URL carries the Zapier credentials). The server exposes the Jira Software
    Cloud actions configured in the Zapier dashboard.
    """
    if not settings.zapier_mcp_url:
        raise ValueError(
            "ZAPIER_MCP_URL is not set. Add it to your .env file."
        )
    return {
        "zapier": {
            "url": settings.zapier_mcp_url,
            "transport": "streamable_http",
        },
    }


@asynccontextmanager
async def get_mcp_client() -> AsyncIterator[MultiServerMCPClient]:
    """
    Async context manager yielding a connected MultiServerMCPClient.

    Usage:
        async with get_mcp_client() as client:
            tools = await client.get_tools()
            create_tool = find_tool(tools, settings.jira_create_tool)
    """
    config = _build_server_config()
    logger.info("mcp_client_initializing", servers=list(config.keys()))

    client = MultiServerMCPClient(config)
    available_tools = await client.get_tools()
    logger.info(
        "mcp_client_ready",
        tool_count=len(available_tools),
        tool_names=[t.name for t in available_tools],
    )
    yield client
    logger.info("mcp_client_closed")


def find_tool(tools: list, name: str) -> Optional[object]:
    """Exact tool name first, then the first Jira tool whose name contains it."""
    exact = next((t for t in tools if t.name == name), None)
    if exact is not None:
        return exact
    return next((t for t in filter_jira_tools(tools) if name.lower() in t.name.lower()), None)


def filter_jira_tools(tools: list) -> list:
    """Return only Jira-related tools from the full tool list."""
    keywords = {"jira", "issue", "project"}
    return [t for t in tools if any(kw in t.name.lower() for kw in keywords)]

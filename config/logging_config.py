import logging
import sys
from typing import Optional

import structlog

from config.settings import settings

# Chatty client libraries; their request logs would drown the conversation
NOISY_LOGGERS = ("httpx", "httpcore", "openai", "botocore", "urllib3", "mcp")


def resolve_level(name: Optional[str] = None) -> int:
    return getattr(logging, (name or settings.log_level).upper(), logging.INFO)


def configure_logging(level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """
    Configure structlog output to stderr.

    log_format "json" renders one JSON object per event, "console" a
    key=value line. Both default to the LOG_LEVEL / LOG_FORMAT settings.
    """
    log_level = resolve_level(level)
    log_format = (log_format or settings.log_format).lower()

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=log_level,
    )
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

    renderer = (
        structlog.dev.ConsoleRenderer(colors=False)
        if log_format == "console"
        else structlog.processors.JSONRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def bind_session(session_id: str) -> None:
    """Attach the session id to every structlog event emitted in this context."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(session_id=session_id)

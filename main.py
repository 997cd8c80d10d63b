"""
Jira Intake Assistant: entry point

Usage:
    # Interactive chat (create / search Jira issues in conversation)
    python main.py --mode chat

    # Chat without creating anything in Jira
    python main.py --mode chat --dry-run

    # Show what the extractor makes of a single request
    python main.py --mode extract --text "Create a high priority bug in engineering"
"""

from __future__ import annotations

import argparse
import json
import os
import sys

WELCOME_MESSAGE = (
    "Welcome to the Jira AI Agent!\n"
    "I can help you create Jira issues and search existing ones.\n"
    'Type "exit" to quit, or start by telling me what you\'d like to do.\n'
)
GOODBYE_MESSAGE = "\nGoodbye! Thanks for using the Jira AI Agent."
EXIT_COMMAND = "exit"


def _configure() -> None:
    from config.logging_config import configure_logging
    configure_logging()


def run_chat(dry_run: bool) -> None:
    if dry_run:
        os.environ["DRY_RUN"] = "true"
    _configure()

    from agents.supervisor import IntakeSession
    from app_logging.activity_logger import ActivityLogger

    logger = ActivityLogger("main")
    session = IntakeSession()
    logger.info("chat_started", session_id=session.state.session_id, dry_run=dry_run)

    print(WELCOME_MESSAGE)
    while True:
        try:
            utterance = input("You: ")
        except (EOFError, KeyboardInterrupt):
            break

        if utterance.strip().lower() == EXIT_COMMAND:
            break
        if not utterance.strip():
            continue

        _, reply = session.handle(utterance)
        print(f"\nAgent: {reply}\n")

    print(GOODBYE_MESSAGE)
    logger.info("chat_stopped", session_id=session.state.session_id)


def run_extract(text: str) -> None:
    _configure()
    from agents.extraction_agent import ParameterExtractionAgent

    extracted = ParameterExtractionAgent().extract_all(text)
    print(json.dumps({f.value: v.model_dump(mode="json") for f, v in extracted.items()}, indent=2))


def main() -> None:
    parser = argparse.ArgumentParser(description="Jira Intake Assistant")
    parser.add_argument(
        "--mode",
        choices=["chat", "extract"],
        default="chat",
        help="Run mode",
    )
    parser.add_argument("--text", help="Request text (required for --mode extract)")
    parser.add_argument("--dry-run", action="store_true", help="Skip Jira issue creation")

    args = parser.parse_args()

    if args.mode == "chat":
        run_chat(args.dry_run)
    elif args.mode == "extract":
        if not args.text:
            print("ERROR: --text is required with --mode extract", file=sys.stderr)
            sys.exit(1)
        run_extract(args.text)


if __name__ == "__main__":
    main()

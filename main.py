from __future__ import annotations

import logging
import sys
from typing import Callable

from assistant.client import AssistantsClient
from config import ENABLE_DEBUG, LOG_LEVEL, ConfigError, load_settings
from orchestrator.pipeline import ReplyPipeline, ReplyResult

# ──────────────────────────────────────────────────────────────
# Logging
# ──────────────────────────────────────────────────────────────

_logger = logging.getLogger(__name__)


def _configure_logging() -> None:
    if logging.getLogger().handlers:
        return
    level = logging.DEBUG if ENABLE_DEBUG else getattr(logging, LOG_LEVEL, logging.WARNING)
    logging.basicConfig(level=level, format="%(levelname)s | %(message)s")


# ──────────────────────────────────────────────────────────────
# Interactive loop
# ──────────────────────────────────────────────────────────────

PROMPT = "Enter your question (or X to exit): "
RESPONSE_LABEL = "Response:"
EXIT_COMMAND = "X"


def render(result: ReplyResult) -> str:
    return result.text if result.ok else f"error: {result.detail}"


def run_repl(
        pipeline: ReplyPipeline,
        input_fn: Callable[[str], str] = input,
        output_fn: Callable[..., None] = print,
) -> None:
    """
    Prompt for questions until the user types ``X`` (any case) or closes stdin.

    Questions are handled one at a time. A failed query is printed as an
    error and the prompt comes back; Ctrl-C while waiting for a reply
    abandons only that question.
    """
    while True:
        try:
            question = input_fn(PROMPT)
        except EOFError:
            output_fn()
            return

        if question.upper() == EXIT_COMMAND:
            return
        if not question.strip():
            continue

        try:
            result = pipeline.ask(question)
        except KeyboardInterrupt:
            output_fn("\nQuestion abandoned.")
            continue

        output_fn(RESPONSE_LABEL, render(result))


def main() -> int:
    _configure_logging()
    try:
        settings = load_settings()
    except ConfigError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2

    try:
        with AssistantsClient(settings.api_key) as client:
            run_repl(ReplyPipeline(client, settings.assistant_id))
    except KeyboardInterrupt:
        print("\n✋  Session ended.")
    return 0


if __name__ == "__main__":
    sys.exit(main())

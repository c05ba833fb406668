from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from assistant.client import AssistantsClient
from config import ENABLE_DEBUG
from orchestrator.conversation import ConversationSession
from orchestrator.resolver import AssistantResolver
from orchestrator.runs import CancelToken, RunOrchestrator
from utils.citations import clean_reply
from utils.errors import AssistantError, ErrorKind, IncompleteRunError, classify
from utils.messages import extract_latest_assistant_text

_logger = logging.getLogger(__name__)
if ENABLE_DEBUG and not logging.getLogger().handlers:
    logging.basicConfig(level=logging.DEBUG, format="%(levelname)s | %(message)s")


@dataclass(frozen=True, slots=True)
class ReplyResult:
    """Outcome of one query: either *text* or an :class:`ErrorKind` with *detail*."""

    text: Optional[str] = None
    error: ErrorKind = ErrorKind.NONE
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.error is ErrorKind.NONE

    @classmethod
    def success(cls, text: str) -> "ReplyResult":
        return cls(text=text)

    @classmethod
    def failure(cls, exc: BaseException) -> "ReplyResult":
        return cls(error=classify(exc), detail=str(exc) or exc.__class__.__name__)


class ReplyPipeline:
    """
    Relays one user question to the assistant and returns its cleaned reply.

    Each call resolves the assistant, opens a brand-new thread, posts the
    question, waits for the run and extracts the newest assistant text, in
    that order. Threads are never reused, so the assistant has no memory of
    earlier questions in the same session.
    """

    def __init__(
            self,
            client: AssistantsClient,
            assistant_id: str,
            resolver: Optional[AssistantResolver] = None,
            session: Optional[ConversationSession] = None,
            orchestrator: Optional[RunOrchestrator] = None,
    ) -> None:
        self._client = client
        self.assistant_id = assistant_id
        self.resolver = resolver or AssistantResolver(client, cache=client.cfg.cache_assistant)
        self.session = session or ConversationSession(client)
        self.orchestrator = orchestrator or RunOrchestrator(client)

    # ──────────────────────────────────────────────────────────
    # public API
    # ──────────────────────────────────────────────────────────

    def get_reply(
            self,
            user_text: str,
            assistant_id: Optional[str] = None,
            timeout: Optional[float] = None,
            cancel: Optional[CancelToken] = None,
    ) -> str:
        """
        Return the assistant's sanitised answer to *user_text*.

        Every failure is raised as an :class:`AssistantError` subclass; a run
        that ends in any status but ``completed`` raises
        :class:`IncompleteRunError` and no extraction is attempted.
        """
        assistant = self.resolver.resolve(assistant_id or self.assistant_id)
        context = self.session.create_context()
        self.session.append_message(context, user_text)

        run = self.orchestrator.submit_and_await(context, assistant, timeout=timeout, cancel=cancel)
        if not run.completed:
            raise IncompleteRunError(run)

        reply = extract_latest_assistant_text(self._client, context)
        return clean_reply(reply)

    def ask(
            self,
            user_text: str,
            assistant_id: Optional[str] = None,
            timeout: Optional[float] = None,
            cancel: Optional[CancelToken] = None,
    ) -> ReplyResult:
        """Like :meth:`get_reply` but never raises for a failed query."""
        try:
            return ReplyResult.success(self.get_reply(user_text, assistant_id, timeout, cancel))
        except AssistantError as exc:
            _logger.error("Query failed [%s]: %s", exc.kind.value, exc)
            return ReplyResult.failure(exc)
        except Exception as exc:
            _logger.exception("Unexpected failure in ReplyPipeline.ask")
            return ReplyResult.failure(exc)

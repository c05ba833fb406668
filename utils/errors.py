"""
Error taxonomy for the assistant relay pipeline.

Every stage raises one of the exceptions below; :func:`classify` folds an
exception into an :class:`ErrorKind` so callers that prefer a result value
over ``try`` blocks can report failures uniformly.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from assistant.models import Run


class ErrorKind(str, Enum):
    """
    Categorisation of pipeline failures.

    Using :class:`str` ensures that equality checks remain reliable across hot
    reloads and serialisation boundaries.
    """

    NONE = "none"
    TRANSPORT = "transport"
    NOT_FOUND = "not_found"
    NO_REPLY = "no_reply"
    INCOMPLETE_RUN = "incomplete_run"
    TIMEOUT = "timeout"
    CANCELLED = "cancelled"
    UNEXPECTED = "unexpected"


# ──────────────────────────────────────────────────────────────
# Exceptions
# ──────────────────────────────────────────────────────────────


class AssistantError(Exception):
    """Base class for every failure raised by the pipeline."""

    kind: ErrorKind = ErrorKind.UNEXPECTED


class TransportError(AssistantError):
    """Network, authentication or protocol failure talking to the service."""

    kind = ErrorKind.TRANSPORT

    def __init__(self, operation: str, message: str, status_code: Optional[int] = None) -> None:
        self.operation = operation
        self.status_code = status_code
        suffix = f" (HTTP {status_code})" if status_code is not None else ""
        super().__init__(f"{operation} failed{suffix}: {message}")


class NotFoundError(AssistantError):
    """The configured assistant identity does not exist remotely."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, assistant_id: str) -> None:
        self.assistant_id = assistant_id
        super().__init__(f"assistant {assistant_id!r} was not found")


class NoAssistantReplyError(AssistantError):
    """The conversation holds no assistant-authored text to show."""

    kind = ErrorKind.NO_REPLY

    def __init__(self, thread_id: str, reason: str = "no assistant message found") -> None:
        self.thread_id = thread_id
        super().__init__(f"{reason} in thread {thread_id}")


class IncompleteRunError(AssistantError):
    """A run reached a terminal status other than ``completed``."""

    kind = ErrorKind.INCOMPLETE_RUN

    def __init__(self, run: "Run") -> None:
        self.run = run
        detail = f": {run.last_error}" if run.last_error else ""
        super().__init__(f"run {run.id} did not complete successfully (status={run.status.value}){detail}")


class RunTimeoutError(AssistantError, TimeoutError):
    """The run was still in flight when the caller's deadline passed."""

    kind = ErrorKind.TIMEOUT

    def __init__(self, run_id: str, timeout_seconds: float) -> None:
        self.run_id = run_id
        self.timeout_seconds = timeout_seconds
        super().__init__(f"run {run_id} still in flight after {timeout_seconds:g}s")


class RunCancelledError(AssistantError):
    """The caller abandoned the poll loop through its cancel token."""

    kind = ErrorKind.CANCELLED

    def __init__(self, run_id: str) -> None:
        self.run_id = run_id
        super().__init__(f"waiting for run {run_id} was cancelled")


# ──────────────────────────────────────────────────────────────
# Public classification API
# ──────────────────────────────────────────────────────────────


def classify(exc: BaseException) -> ErrorKind:
    """Return the :class:`ErrorKind` for *exc*; foreign exceptions are ``UNEXPECTED``."""
    if isinstance(exc, AssistantError):
        return exc.kind
    return ErrorKind.UNEXPECTED

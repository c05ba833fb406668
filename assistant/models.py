from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from config import env


# ──────────────────────────────────────────────────────────────
# Enumerations
# ──────────────────────────────────────────────────────────────


class MessageRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class RunStatus(str, Enum):
    """Lifecycle states reported by the service for a run."""

    QUEUED = "queued"
    IN_PROGRESS = "in_progress"
    CANCELLING = "cancelling"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"
    EXPIRED = "expired"
    REQUIRES_ACTION = "requires_action"
    INCOMPLETE = "incomplete"
    UNKNOWN = "unknown"

    @classmethod
    def _missing_(cls, value: object) -> "RunStatus":
        # A status added by the service later is treated as terminal.
        return cls.UNKNOWN

    @property
    def in_flight(self) -> bool:
        return self in _IN_FLIGHT


_IN_FLIGHT = frozenset({RunStatus.QUEUED, RunStatus.IN_PROGRESS, RunStatus.CANCELLING})


# ──────────────────────────────────────────────────────────────
# Remote objects
# ──────────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class AssistantReference:
    """Identity and metadata of the configured assistant."""

    id: str
    name: Optional[str] = None
    model: Optional[str] = None
    instructions: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "AssistantReference":
        return cls(
            id=data["id"],
            name=data.get("name"),
            model=data.get("model"),
            instructions=data.get("instructions"),
            metadata=data.get("metadata") or {},
        )


@dataclass(frozen=True, slots=True)
class ConversationContext:
    """A server-side thread holding one query's message history."""

    id: str
    created_at: Optional[int] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "ConversationContext":
        return cls(id=data["id"], created_at=data.get("created_at"))


@dataclass(frozen=True, slots=True)
class Message:
    """
    One role-tagged entry of a thread.

    *content* keeps the service's list of typed parts verbatim, e.g.
    ``[{"type": "text", "text": {"value": "...", "annotations": []}}]``.
    """

    id: str
    role: str
    content: List[Dict[str, Any]] = field(default_factory=list)
    thread_id: Optional[str] = None
    run_id: Optional[str] = None
    created_at: Optional[int] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Message":
        return cls(
            id=data["id"],
            role=data.get("role", ""),
            content=list(data.get("content") or []),
            thread_id=data.get("thread_id"),
            run_id=data.get("run_id"),
            created_at=data.get("created_at"),
        )


@dataclass(frozen=True, slots=True)
class Run:
    """
    Snapshot of an asynchronous run as last observed.

    *poll_after* is the delay in seconds the service asked clients to wait
    before polling again (``openai-poll-after-ms``), if it sent one.
    """

    id: str
    thread_id: str
    assistant_id: str
    status: RunStatus
    last_error: Optional[str] = None
    poll_after: Optional[float] = None

    @property
    def completed(self) -> bool:
        return self.status is RunStatus.COMPLETED

    @classmethod
    def from_api(cls, data: Dict[str, Any], poll_after: Optional[float] = None) -> "Run":
        error = data.get("last_error") or {}
        last_error = None
        if error:
            last_error = f"{error.get('code', 'error')}: {error.get('message', '')}".rstrip(": ")
        return cls(
            id=data["id"],
            thread_id=data["thread_id"],
            assistant_id=data.get("assistant_id", ""),
            status=RunStatus(data.get("status")),
            last_error=last_error,
            poll_after=poll_after,
        )


# ──────────────────────────────────────────────────────────────
# Typed configuration containers
# ──────────────────────────────────────────────────────────────


@dataclass(slots=True)
class ClientConfig:
    """
    Aggregates all runtime settings for the service client and run poller.

    Defaults are pulled from environment variables so they remain centrally
    configurable via *config.py*.
    """

    base_url: str = env("OPENAI_BASE_URL", "https://api.openai.com/v1")
    beta_header: str = env("OPENAI_BETA", "assistants=v2")
    http_timeout: float = env("HTTP_TIMEOUT", 30.0, cast=float)
    run_timeout: float = env("RUN_TIMEOUT", 300.0, cast=float)  # 0 → wait forever
    poll_interval: float = env("POLL_INTERVAL", 1.0, cast=float)
    poll_max_interval: float = env("POLL_MAX_INTERVAL", 8.0, cast=float)
    poll_backoff: float = env("POLL_BACKOFF", 1.5, cast=float)
    poll_error_retries: int = env("POLL_ERROR_RETRIES", 3, cast=int)
    cache_assistant: bool = env("CACHE_ASSISTANT", False, cast=bool)

"""Shared fixtures: an in-memory stand-in for the assistants service client."""

from typing import Any, Dict, List, Optional

import pytest

from assistant.models import (
    AssistantReference,
    ClientConfig,
    ConversationContext,
    Message,
    MessageRole,
    Run,
    RunStatus,
)
from utils.errors import NotFoundError


def text_message(msg_id: str, role: str, value: str) -> Message:
    return Message(
        id=msg_id,
        role=role,
        content=[{"type": "text", "text": {"value": value, "annotations": []}}],
    )


class FakeAssistantsClient:
    """
    Records every call in ``calls`` and replays scripted run statuses.

    ``statuses`` lists the status of the run at creation followed by the
    status returned by each ``retrieve_run``.
    """

    def __init__(
            self,
            assistants: Optional[Dict[str, AssistantReference]] = None,
            statuses: Optional[List[str]] = None,
            replies: Optional[List[Message]] = None,
    ) -> None:
        self.cfg = ClientConfig(
            run_timeout=0,
            poll_interval=0.0,
            poll_max_interval=0.0,
            poll_backoff=1.0,
            poll_error_retries=2,
            cache_assistant=False,
        )
        self.assistants = assistants if assistants is not None else {
            "asst_1": AssistantReference(id="asst_1", name="Helper", model="gpt-4o")
        }
        self.statuses = list(statuses or ["queued", "in_progress", "completed"])
        self.replies = replies if replies is not None else [text_message("msg_2", "assistant", "hello")]
        self.calls: List[str] = []
        self.completed = False
        self.threads: Dict[str, List[Message]] = {}

    def _status(self) -> RunStatus:
        status = self.statuses.pop(0) if len(self.statuses) > 1 else self.statuses[0]
        return RunStatus(status)

    def retrieve_assistant(self, assistant_id: str) -> AssistantReference:
        self.calls.append("retrieve_assistant")
        if assistant_id not in self.assistants:
            raise NotFoundError(assistant_id)
        return self.assistants[assistant_id]

    def create_thread(self) -> ConversationContext:
        self.calls.append("create_thread")
        thread_id = f"thread_{len(self.threads) + 1}"
        self.threads[thread_id] = []
        return ConversationContext(id=thread_id)

    def create_message(self, thread_id: str, text: str, role: MessageRole = MessageRole.USER) -> Message:
        self.calls.append("create_message")
        msg = text_message(f"msg_u{len(self.threads[thread_id])}", role.value, text)
        self.threads[thread_id].append(msg)
        return msg

    def _advance(self, thread_id: str, run_id: str) -> Run:
        status = self._status()
        if status is RunStatus.COMPLETED and not self.completed:
            self.completed = True
            self.threads[thread_id].extend(self.replies)
        return Run(id=run_id, thread_id=thread_id, assistant_id="asst_1", status=status)

    def create_run(self, thread_id: str, assistant_id: str) -> Run:
        self.calls.append("create_run")
        self.completed = False
        return self._advance(thread_id, "run_1")

    def retrieve_run(self, thread_id: str, run_id: str) -> Run:
        self.calls.append("retrieve_run")
        return self._advance(thread_id, run_id)

    def cancel_run(self, thread_id: str, run_id: str) -> Run:
        self.calls.append("cancel_run")
        return Run(id=run_id, thread_id=thread_id, assistant_id="asst_1", status=RunStatus.CANCELLING)

    def list_messages(self, thread_id: str, order: str = "desc") -> List[Message]:
        self.calls.append("list_messages")
        messages = list(self.threads[thread_id])
        return list(reversed(messages)) if order == "desc" else messages


@pytest.fixture
def fake_client() -> FakeAssistantsClient:
    return FakeAssistantsClient()


@pytest.fixture
def make_client():
    def _make(**kwargs: Any) -> FakeAssistantsClient:
        return FakeAssistantsClient(**kwargs)

    return _make

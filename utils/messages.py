from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, Iterable, Optional

from assistant.models import ConversationContext, Message, MessageRole
from utils.errors import NoAssistantReplyError

if TYPE_CHECKING:
    from assistant.client import AssistantsClient

_logger = logging.getLogger(__name__)

_WANTED_ROLE = MessageRole.ASSISTANT.value


# ──────────────────────────────────────────────────────────────
#  Internal helpers
# ──────────────────────────────────────────────────────────────


def _content_text(part: Dict[str, Any]) -> Optional[str]:
    if part.get("type") != "text":
        return None
    text = part.get("text")
    if isinstance(text, dict):
        return text.get("value")
    if isinstance(text, str):
        return text
    return None


def _latest_assistant(messages: Iterable[Message]) -> Optional[Message]:
    # Messages arrive newest first, so the first match is the latest reply.
    for msg in messages:
        if msg.role == _WANTED_ROLE:
            return msg
    return None


# ──────────────────────────────────────────────────────────────
#  Public extraction API
# ──────────────────────────────────────────────────────────────


def latest_assistant_text(messages: Iterable[Message], thread_id: str = "?") -> str:
    """
    Return the first text segment of the newest assistant message.

    *messages* must be ordered newest first. Raises
    :class:`NoAssistantReplyError` when no assistant message exists or the
    newest one carries no text part.
    """
    msg = _latest_assistant(messages)
    if msg is None:
        raise NoAssistantReplyError(thread_id)

    for part in msg.content:
        text = _content_text(part)
        if text is not None:
            return text

    kinds = ", ".join(str(part.get("type")) for part in msg.content) or "none"
    raise NoAssistantReplyError(thread_id, f"assistant message {msg.id} has no text content (parts: {kinds})")


def extract_latest_assistant_text(client: "AssistantsClient", context: ConversationContext) -> str:
    """List *context*'s messages newest first and extract the latest assistant text."""
    messages = client.list_messages(context.id, order="desc")
    _logger.debug("Thread %s holds %d message(s)", context.id, len(messages))
    return latest_assistant_text(messages, thread_id=context.id)

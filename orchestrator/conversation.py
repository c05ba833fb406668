import logging

from assistant.client import AssistantsClient
from assistant.models import ConversationContext, Message, MessageRole

_logger = logging.getLogger(__name__)


class ConversationSession:
    """Creates one fresh thread per query and posts the user's turn into it."""

    def __init__(self, client: AssistantsClient) -> None:
        self._client = client

    def create_context(self) -> ConversationContext:
        context = self._client.create_thread()
        _logger.debug("Created thread %s", context.id)
        return context

    def append_message(
            self,
            context: ConversationContext,
            text: str,
            role: MessageRole = MessageRole.USER,
    ) -> Message:
        # Blank input is filtered by the caller before it gets here.
        message = self._client.create_message(context.id, text, role=role)
        _logger.debug("Appended %s message %s to thread %s", role.value, message.id, context.id)
        return message

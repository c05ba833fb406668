"""
Assistant package exposing the HTTP client for the hosted assistants service
together with the data classes it returns.
"""
from .client import AssistantsClient
from .models import (
    AssistantReference,
    ClientConfig,
    ConversationContext,
    Message,
    MessageRole,
    Run,
    RunStatus,
)

__all__ = [
    "AssistantsClient",
    "AssistantReference",
    "ClientConfig",
    "ConversationContext",
    "Message",
    "MessageRole",
    "Run",
    "RunStatus",
]

"""
Unit tests for assistant reply extraction.
"""

import pytest

from assistant.models import ConversationContext, Message
from conftest import text_message
from utils.citations import sanitize
from utils.errors import ErrorKind, NoAssistantReplyError
from utils.messages import extract_latest_assistant_text, latest_assistant_text


class TestLatestAssistantText:
    """Tests for latest_assistant_text()."""

    def test_picks_assistant_over_user(self) -> None:
        newest_first = [
            text_message("m2", "assistant", "【0:1†source】hello"),
            text_message("m1", "user", "hi"),
        ]
        assert sanitize(latest_assistant_text(newest_first)) == "hello"

    def test_picks_most_recent_assistant(self) -> None:
        newest_first = [
            text_message("m4", "user", "again"),
            text_message("m3", "assistant", "second"),
            text_message("m2", "assistant", "first"),
            text_message("m1", "user", "hi"),
        ]
        assert latest_assistant_text(newest_first) == "second"

    def test_no_assistant_message_raises_typed_error(self) -> None:
        with pytest.raises(NoAssistantReplyError) as exc_info:
            latest_assistant_text([text_message("m1", "user", "hi")], thread_id="thread_9")
        assert exc_info.value.kind is ErrorKind.NO_REPLY
        assert "thread_9" in str(exc_info.value)

    def test_empty_history_raises_typed_error(self) -> None:
        with pytest.raises(NoAssistantReplyError):
            latest_assistant_text([])

    def test_skips_non_text_parts(self) -> None:
        msg = Message(
            id="m2",
            role="assistant",
            content=[
                {"type": "image_file", "image_file": {"file_id": "file-1"}},
                {"type": "text", "text": {"value": "caption", "annotations": []}},
            ],
        )
        assert latest_assistant_text([msg]) == "caption"

    def test_message_without_text_part_raises(self) -> None:
        msg = Message(id="m2", role="assistant", content=[{"type": "image_file", "image_file": {}}])
        with pytest.raises(NoAssistantReplyError, match="image_file"):
            latest_assistant_text([msg])

    def test_returns_first_text_segment_only(self) -> None:
        msg = Message(
            id="m2",
            role="assistant",
            content=[
                {"type": "text", "text": {"value": "one", "annotations": []}},
                {"type": "text", "text": {"value": "two", "annotations": []}},
            ],
        )
        assert latest_assistant_text([msg]) == "one"


class TestExtractLatestAssistantText:
    """Tests for extract_latest_assistant_text() against the fake client."""

    def test_lists_messages_newest_first(self, fake_client) -> None:
        context = fake_client.create_thread()
        fake_client.threads[context.id] = [
            text_message("m1", "user", "hi"),
            text_message("m2", "assistant", "old"),
            text_message("m3", "assistant", "new"),
        ]
        assert extract_latest_assistant_text(fake_client, context) == "new"
        assert fake_client.calls[-1] == "list_messages"

    def test_thread_id_is_reported(self, fake_client) -> None:
        context = ConversationContext(id="thread_x")
        fake_client.threads["thread_x"] = []
        with pytest.raises(NoAssistantReplyError, match="thread_x"):
            extract_latest_assistant_text(fake_client, context)

"""
Citation marker removal.

The assistant service annotates file-search answers inline with markers such
as ``【4:0†source】``. They mean nothing on a terminal, so :func:`sanitize`
drops them before the reply is printed.
"""

from __future__ import annotations

import re
from typing import Any

_CITATION_RE = re.compile(r"【[0-9]+:[0-9]+†source】")


def sanitize(text: str) -> str:
    """Return *text* with every citation marker removed; other characters are kept."""
    # Removing a marker can splice its neighbours into a new one, so repeat
    # until a pass removes nothing.
    count = 1
    while count:
        text, count = _CITATION_RE.subn("", text)
    return text


def clean_reply(payload: Any) -> Any:
    """Sanitise textual *payload*; any other payload kind passes through unchanged."""
    if isinstance(payload, str):
        return sanitize(payload)
    return payload

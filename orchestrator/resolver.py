import logging
import threading
from typing import Dict

from assistant.client import AssistantsClient
from assistant.models import AssistantReference

_logger = logging.getLogger(__name__)


class AssistantResolver:
    """
    Looks up the configured assistant before each query.

    By default every :meth:`resolve` call goes to the service, so an assistant
    deleted mid-session is noticed on the next question. With ``cache=True``
    the first successful lookup per id is kept for the life of the process.
    """

    def __init__(self, client: AssistantsClient, cache: bool = False) -> None:
        self._client = client
        self._cache_enabled = cache
        self._cache: Dict[str, AssistantReference] = {}
        self._lock = threading.Lock()

    # ──────────────────────────────────────────────────────────
    # internal helpers
    # ──────────────────────────────────────────────────────────

    def _fetch(self, assistant_id: str) -> AssistantReference:
        ref = self._client.retrieve_assistant(assistant_id)
        _logger.debug("Resolved assistant %s (name=%s, model=%s)", ref.id, ref.name, ref.model)
        return ref

    # ──────────────────────────────────────────────────────────
    # public API
    # ──────────────────────────────────────────────────────────

    def resolve(self, assistant_id: str) -> AssistantReference:
        """Return the assistant's metadata; raises ``NotFoundError`` or ``TransportError``."""
        if not self._cache_enabled:
            return self._fetch(assistant_id)

        ref = self._cache.get(assistant_id)
        if ref is None:
            with self._lock:
                ref = self._cache.get(assistant_id)
                if ref is None:  # double-checked locking
                    ref = self._fetch(assistant_id)
                    self._cache[assistant_id] = ref
        return ref

    def forget(self, assistant_id: str) -> None:
        """Drop a cached reference so the next :meth:`resolve` refetches it."""
        with self._lock:
            self._cache.pop(assistant_id, None)

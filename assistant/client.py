from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

import requests

from config import ENABLE_DEBUG
from utils.errors import NotFoundError, TransportError
from .models import (
    AssistantReference,
    ClientConfig,
    ConversationContext,
    Message,
    MessageRole,
    Run,
)

_logger = logging.getLogger(__name__)
if ENABLE_DEBUG and not logging.getLogger().handlers:
    logging.basicConfig(level=logging.DEBUG, format="%(levelname)s | %(message)s")

_POLL_AFTER_HEADER = "openai-poll-after-ms"


# ──────────────────────────────────────────────────────────────
#  Internal helpers
# ──────────────────────────────────────────────────────────────


def _error_message(resp: requests.Response) -> str:
    """Return the service's own error message, or a short body snippet."""
    try:
        data = resp.json()
    except ValueError:
        return resp.text[:300].replace("\n", " ") or resp.reason or "no body"
    if isinstance(data, dict) and isinstance(data.get("error"), dict):
        return str(data["error"].get("message") or data["error"])
    return str(data)[:300]


def _poll_after(resp: requests.Response) -> Optional[float]:
    raw = resp.headers.get(_POLL_AFTER_HEADER)
    if raw is None:
        return None
    try:
        return int(raw) / 1000.0
    except ValueError:
        return None


# ──────────────────────────────────────────────────────────────
#  Public client
# ──────────────────────────────────────────────────────────────


class AssistantsClient:
    """
    Thin wrapper around the hosted assistants REST API.

    One instance owns one :class:`requests.Session` carrying the content
    type, bearer credential and feature-version headers, so every call made
    through it satisfies the service's protocol requirements. All failures
    surface as :class:`TransportError` (or :class:`NotFoundError` for an
    unknown assistant); the credential never appears in logs or messages.
    """

    def __init__(self, api_key: str, config: Optional[ClientConfig] = None) -> None:
        self.cfg = config or ClientConfig()
        self._session = requests.Session()
        self._session.headers.update(
            {
                "Content-Type": "application/json",
                "Authorization": f"Bearer {api_key}",
                "OpenAI-Beta": self.cfg.beta_header,
            }
        )

    # —— life‑cycle ————————————————————————————————————————————

    def close(self) -> None:
        self._session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    # —— low-level ——————————————————————————————————————————

    def _url(self, path: str) -> str:
        return f"{self.cfg.base_url.rstrip('/')}/{path.lstrip('/')}"

    def _request(
            self,
            operation: str,
            method: str,
            path: str,
            *,
            payload: Optional[Dict[str, Any]] = None,
            params: Optional[Dict[str, Any]] = None,
    ) -> requests.Response:
        """
        Issue one call and return the successful response.

        Connection problems, non-2xx statuses and empty or non-JSON bodies
        are all converted to :class:`TransportError` tagged with *operation*.
        The HTTP status is kept on the error so callers can map a 404 to a
        more specific failure.
        """
        url = self._url(path)
        try:
            resp = self._session.request(
                method,
                url,
                json=payload,
                params=params,
                timeout=self.cfg.http_timeout,
            )
        except requests.exceptions.RequestException as exc:
            _logger.warning("%s: request to %s failed: %s", operation, url, exc.__class__.__name__)
            raise TransportError(operation, str(exc) or exc.__class__.__name__) from exc

        if ENABLE_DEBUG:
            _logger.debug(
                "%s %s – status %s – %.1f kB",
                method,
                url,
                resp.status_code,
                len(resp.content) / 1024.0,
            )

        if not resp.ok:
            message = _error_message(resp)
            _logger.warning("%s: HTTP %s from %s: %s", operation, resp.status_code, url, message)
            raise TransportError(operation, message, status_code=resp.status_code)

        if not resp.content or not resp.text.strip():
            raise TransportError(operation, "service returned empty body", status_code=resp.status_code)

        return resp

    def _json(self, operation: str, resp: requests.Response) -> Dict[str, Any]:
        try:
            data = resp.json()
        except ValueError as exc:
            raise TransportError(operation, "body not valid JSON", status_code=resp.status_code) from exc

        if not isinstance(data, dict):
            raise TransportError(operation, "unexpected JSON payload", status_code=resp.status_code)

        if ENABLE_DEBUG:
            _logger.debug("%s JSON:\n%s", operation, json.dumps(data, indent=2)[:1_000])

        return data

    # —— assistants ——————————————————————————————————————————

    def retrieve_assistant(self, assistant_id: str) -> AssistantReference:
        operation = "retrieve_assistant"
        try:
            resp = self._request(operation, "GET", f"assistants/{assistant_id}")
        except TransportError as exc:
            if exc.status_code == 404:
                raise NotFoundError(assistant_id) from exc
            raise
        data = self._json(operation, resp)
        try:
            return AssistantReference.from_api(data)
        except KeyError as exc:
            raise TransportError(operation, f"missing field {exc}") from exc

    # —— threads & messages ——————————————————————————————————

    def create_thread(self) -> ConversationContext:
        operation = "create_thread"
        data = self._json(operation, self._request(operation, "POST", "threads", payload={}))
        try:
            return ConversationContext.from_api(data)
        except KeyError as exc:
            raise TransportError(operation, f"missing field {exc}") from exc

    def create_message(self, thread_id: str, text: str, role: MessageRole = MessageRole.USER) -> Message:
        operation = "create_message"
        payload = {"role": role.value, "content": text}
        resp = self._request(operation, "POST", f"threads/{thread_id}/messages", payload=payload)
        data = self._json(operation, resp)
        try:
            return Message.from_api(data)
        except KeyError as exc:
            raise TransportError(operation, f"missing field {exc}") from exc

    def list_messages(self, thread_id: str, order: str = "desc") -> List[Message]:
        """Return the messages of *thread_id* in the requested creation *order*."""
        operation = "list_messages"
        resp = self._request(operation, "GET", f"threads/{thread_id}/messages", params={"order": order})
        data = self._json(operation, resp)
        try:
            return [Message.from_api(item) for item in data.get("data", [])]
        except KeyError as exc:
            raise TransportError(operation, f"missing field {exc}") from exc

    # —— runs ————————————————————————————————————————————————

    def _run(self, operation: str, resp: requests.Response) -> Run:
        data = self._json(operation, resp)
        try:
            return Run.from_api(data, poll_after=_poll_after(resp))
        except KeyError as exc:
            raise TransportError(operation, f"missing field {exc}") from exc

    def create_run(self, thread_id: str, assistant_id: str) -> Run:
        operation = "create_run"
        payload = {"assistant_id": assistant_id}
        return self._run(operation, self._request(operation, "POST", f"threads/{thread_id}/runs", payload=payload))

    def retrieve_run(self, thread_id: str, run_id: str) -> Run:
        operation = "retrieve_run"
        return self._run(operation, self._request(operation, "GET", f"threads/{thread_id}/runs/{run_id}"))

    def cancel_run(self, thread_id: str, run_id: str) -> Run:
        operation = "cancel_run"
        return self._run(operation, self._request(operation, "POST", f"threads/{thread_id}/runs/{run_id}/cancel"))

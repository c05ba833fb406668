from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Iterator, Optional

from assistant.client import AssistantsClient
from assistant.models import AssistantReference, ClientConfig, ConversationContext, Run
from config import ENABLE_DEBUG
from utils.errors import RunCancelledError, RunTimeoutError, TransportError

_MIN_POLL_AFTER = 0.1  # seconds; floor for the service's poll-after hint

_logger = logging.getLogger(__name__)
if ENABLE_DEBUG and not logging.getLogger().handlers:
    logging.basicConfig(level=logging.DEBUG, format="%(levelname)s | %(message)s")


# ──────────────────────────────────────────────────────────────
#  Poll schedule & cancellation
# ──────────────────────────────────────────────────────────────


@dataclass(slots=True)
class PollPolicy:
    """Bounded exponential schedule between two status checks of a run."""

    interval: float = 1.0
    max_interval: float = 8.0
    backoff: float = 1.5
    error_retries: int = 3

    @classmethod
    def from_config(cls, cfg: ClientConfig) -> "PollPolicy":
        return cls(
            interval=cfg.poll_interval,
            max_interval=cfg.poll_max_interval,
            backoff=cfg.poll_backoff,
            error_retries=cfg.poll_error_retries,
        )

    def delays(self) -> Iterator[float]:
        delay = min(self.interval, self.max_interval)
        while True:
            yield delay
            delay = min(delay * self.backoff, self.max_interval)


class CancelToken:
    """
    Lets another thread abandon a wait in :meth:`RunOrchestrator.submit_and_await`.

    The poll loop sleeps on the token, so :meth:`cancel` wakes it at once.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, seconds: float) -> bool:
        """Sleep up to *seconds*; return ``True`` if cancelled meanwhile."""
        return self._event.wait(seconds)


# ──────────────────────────────────────────────────────────────
#  Orchestrator
# ──────────────────────────────────────────────────────────────


class RunOrchestrator:
    """
    Starts a run on a thread and blocks until the service reports a terminal
    status.

    The returned :class:`Run` may be in any terminal state; deciding whether
    ``completed`` was reached is left to the caller.
    """

    def __init__(
            self,
            client: AssistantsClient,
            policy: Optional[PollPolicy] = None,
            timeout: Optional[float] = None,
            clock: Callable[[], float] = time.monotonic,
            sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._client = client
        self.policy = policy or PollPolicy.from_config(client.cfg)
        self.timeout = client.cfg.run_timeout if timeout is None else timeout
        self._clock = clock
        self._sleep = sleep

    # —— public API ——————————————————————————————————————————

    def submit_and_await(
            self,
            context: ConversationContext,
            assistant: AssistantReference,
            timeout: Optional[float] = None,
            cancel: Optional[CancelToken] = None,
    ) -> Run:
        """
        Create a run of *assistant* on *context* and wait for it to finish.

        *timeout* overrides the orchestrator default for this call; a value
        of ``0`` or less waits without a deadline. Raises
        :class:`RunTimeoutError` once the deadline passes and
        :class:`RunCancelledError` when *cancel* fires; in both cases the
        service is asked to cancel the run first.
        """
        run = self._client.create_run(context.id, assistant.id)
        _logger.debug("Started run %s on thread %s (status=%s)", run.id, context.id, run.status.value)
        return self._await(run, self.timeout if timeout is None else timeout, cancel)

    # —— internal helpers ————————————————————————————————————

    def _await(self, run: Run, timeout: float, cancel: Optional[CancelToken]) -> Run:
        deadline = self._clock() + timeout if timeout > 0 else None
        delays = self.policy.delays()
        failures = 0

        while run.status.in_flight:
            if cancel is not None and cancel.cancelled:
                self._abandon(run)
                raise RunCancelledError(run.id)

            delay = next(delays)
            if run.poll_after is not None:
                delay = max(min(run.poll_after, self.policy.max_interval), _MIN_POLL_AFTER)

            if deadline is not None:
                remaining = deadline - self._clock()
                if remaining <= 0:
                    self._abandon(run)
                    raise RunTimeoutError(run.id, timeout)
                delay = min(delay, remaining)

            if cancel is not None:
                if cancel.wait(delay):
                    self._abandon(run)
                    raise RunCancelledError(run.id)
            else:
                self._sleep(delay)

            try:
                run = self._client.retrieve_run(run.thread_id, run.id)
            except TransportError as exc:
                failures += 1
                if failures > self.policy.error_retries:
                    _logger.error("Giving up on run %s after %d failed polls", run.id, failures)
                    raise
                # Network / decoding issue ⇒ wait & retry
                _logger.warning("Polling run %s failed (%d/%d): %s",
                                run.id, failures, self.policy.error_retries, exc)
                continue

            failures = 0
            if ENABLE_DEBUG:
                _logger.debug("Run %s → status=%s", run.id, run.status.value)

        _logger.info("Run %s finished with status %s", run.id, run.status.value)
        return run

    def _abandon(self, run: Run) -> None:
        """Ask the service to stop *run*; a failure here is only logged."""
        try:
            self._client.cancel_run(run.thread_id, run.id)
        except TransportError as exc:
            _logger.warning("Could not cancel run %s: %s", run.id, exc)

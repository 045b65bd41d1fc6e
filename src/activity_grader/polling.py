"""Cancellable periodic refresh."""

import threading
from typing import Callable

from .utils.logging import get_logger

logger = get_logger(__name__)


class PollingTask:
    """Runs ``action`` every ``interval`` seconds until cancelled.

    The task also stops on its own once ``until()`` returns True, so a
    student waiting for a grade stops polling as soon as it arrives. Use
    as a context manager to guarantee teardown when the waiting session
    ends.
    """

    def __init__(
        self,
        action: Callable[[], None],
        interval: float = 20.0,
        until: Callable[[], bool] | None = None,
        name: str = "poll",
    ):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.action = action
        self.interval = interval
        self.until = until
        self.name = name
        self.runs = 0
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def active(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def cancelled(self) -> bool:
        return self._stop.is_set()

    def start(self) -> "PollingTask":
        if self.active:
            return self
        if self._condition_met():
            logger.debug(f"{self.name}: condition already met, not starting")
            self._stop.set()
            return self
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name=self.name, daemon=True)
        self._thread.start()
        return self

    def cancel(self, wait: bool = True) -> None:
        self._stop.set()
        thread = self._thread
        if wait and thread is not None and thread is not threading.current_thread():
            thread.join()
        self._thread = None

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the task stops; True if it stopped within timeout."""
        return self._stop.wait(timeout)

    def _condition_met(self) -> bool:
        return self.until is not None and self.until()

    def _loop(self) -> None:
        while not self._stop.wait(self.interval):
            try:
                self.action()
            except Exception as e:
                # one failed refresh should not end the wait
                logger.warning(f"{self.name}: refresh failed: {e}")
            self.runs += 1
            if self._condition_met():
                logger.debug(f"{self.name}: condition met after {self.runs} runs")
                self._stop.set()

    def __enter__(self) -> "PollingTask":
        return self.start()

    def __exit__(self, *args) -> None:
        self.cancel()

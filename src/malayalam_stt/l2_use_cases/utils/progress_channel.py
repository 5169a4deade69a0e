"""Progress channel — ordered, monotonic load-progress delivery to subscribers."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

log = logging.getLogger('mstt.progress')

ProgressCallback = Callable[[int], None]


class ProgressChannel:
    """Delivers integer percentages in [0, 100] to subscribers.

    Within one attempt (between ``reset()`` calls) delivered values strictly
    increase; repeated or lower values are dropped. Safe to emit from worker threads.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._subscribers: list[ProgressCallback] = []
        self._last = 0

    @property
    def last(self) -> int:
        return self._last

    def subscribe(self, callback: ProgressCallback) -> Callable[[], None]:
        """Register *callback*; returns a function that unsubscribes it."""
        with self._lock:
            self._subscribers.append(callback)

        def _unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return _unsubscribe

    def reset(self) -> None:
        """Start a new attempt at 0 and notify subscribers."""
        with self._lock:
            self._last = 0
            self._deliver(0)

    def emit(self, percent: float) -> None:
        value = min(max(int(percent), 0), 100)
        with self._lock:
            if value <= self._last:
                return
            self._last = value
            self._deliver(value)

    def _deliver(self, value: int) -> None:
        # Called with the lock held so concurrent emitters cannot reorder deliveries.
        for callback in list(self._subscribers):
            try:
                callback(value)
            except Exception:
                log.error('Progress subscriber failed', exc_info=True)

"""Ordered hand-off of network results to the control thread."""

import queue
import logging
from typing import Any, Callable

logger = logging.getLogger(__name__)


class Dispatcher:
    """Single-producer / single-consumer FIFO between the network worker and the control thread.

    The producer never blocks. The consumer calls ``drain()`` once per tick, so
    messages are handled on the control thread, in arrival order, never
    concurrently with the tick's own state changes.
    """

    def __init__(self):
        self._queue = queue.SimpleQueue()

    def enqueue(self, message: Any) -> None:
        self._queue.put(message)

    def drain(self, handler: Callable[[Any], None]) -> int:
        """Run ``handler`` on every queued message in FIFO order.

        Returns:
            Number of messages handled
        """
        handled = 0
        while True:
            try:
                message = self._queue.get_nowait()
            except queue.Empty:
                break
            handled += 1
            try:
                handler(message)
            except Exception as e:
                logger.error(f"Unhandled exception dispatching {type(message).__name__}: {e}",
                             exc_info=True)
        return handled

    def pending(self) -> int:
        """Approximate number of queued messages."""
        return self._queue.qsize()

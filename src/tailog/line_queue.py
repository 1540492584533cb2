"""Bounded queue carrying lines from the producer to the consumer."""

import logging
import threading
from collections import deque
from dataclasses import dataclass
from typing import Union

from .scanner import WINDOW_SIZE

logger = logging.getLogger(__name__)

# Configuration
QUEUE_CAPACITY = WINDOW_SIZE  # Keeps production and consumption in step


class QueueClosed(Exception):
    """Raised by put/get once the queue is cancelled, or by put after a terminal item."""


@dataclass(frozen=True)
class Line:
    """A line of the file."""

    text: str


@dataclass(frozen=True)
class EndOfStream:
    """The producer finished normally; nothing follows."""


@dataclass(frozen=True)
class Failure:
    """The producer failed; nothing follows."""

    message: str


Item = Union[Line, EndOfStream, Failure]

TERMINAL_ITEMS = (EndOfStream, Failure)


class LineQueue:
    """
    Bounded FIFO with blocking put/get and cancellation.

    A terminal item (EndOfStream or Failure) is always the last item put;
    any later put raises QueueClosed. cancel() wakes every blocked caller,
    and from then on both put and get raise QueueClosed.
    """

    def __init__(self, capacity: int = QUEUE_CAPACITY):
        if capacity <= 0:
            raise ValueError("Capacity must be positive")
        self.capacity = capacity
        self.high_water = 0  # Most items ever outstanding at once

        self._items = deque()
        self._lock = threading.Lock()
        self._not_empty = threading.Condition(self._lock)
        self._not_full = threading.Condition(self._lock)
        self._terminated = False
        self._cancelled = False

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def terminated(self) -> bool:
        """True once a terminal item has been put."""
        return self._terminated

    def put(self, item: Item) -> None:
        """Append an item, blocking while the queue is full."""
        with self._not_full:
            if self._terminated:
                raise QueueClosed(f"Cannot put {item!r} after the end of the stream")
            while len(self._items) >= self.capacity and not self._cancelled:
                self._not_full.wait()
            if self._cancelled:
                raise QueueClosed("Queue cancelled")

            self._items.append(item)
            if isinstance(item, TERMINAL_ITEMS):
                self._terminated = True
            self.high_water = max(self.high_water, len(self._items))
            self._not_empty.notify()

    def get(self) -> Item:
        """Remove and return the oldest item, blocking while the queue is empty."""
        with self._not_empty:
            while not self._items and not self._cancelled:
                self._not_empty.wait()
            if self._cancelled:
                raise QueueClosed("Queue cancelled")

            item = self._items.popleft()
            self._not_full.notify()
            return item

    def cancel(self) -> None:
        """Wake all blocked callers; later put/get calls raise QueueClosed."""
        with self._lock:
            if self._cancelled:
                return
            self._cancelled = True
            logger.debug(f"Queue cancelled with {len(self._items)} items outstanding")
            self._not_empty.notify_all()
            self._not_full.notify_all()

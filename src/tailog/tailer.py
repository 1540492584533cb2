"""FileTailer: lifecycle and observer registry around a TailPipeline."""

import logging
import threading
from enum import Enum
from typing import Optional

from .line_queue import QUEUE_CAPACITY
from .pipeline import TailPipeline
from .request import TailRequest
from .scanner import WINDOW_SIZE, BackwardChunkScanner

logger = logging.getLogger(__name__)


class TailerState(Enum):
    OFF = "off"
    RUNNING = "running"


class FileTailer:
    """
    Delivers the last lines of a file to registered observers.

    Example:
        tailer = FileTailer(TailRequest.builder("app.log").number_of_lines(15).build())
        tailer.add_observer(observer)
        tailer.turn_on()

    Activation is one-shot: the first turn_on() starts the workers, and later
    calls (including after turn_off()) do nothing.
    """

    def __init__(
        self,
        request: TailRequest,
        window_size: int = WINDOW_SIZE,
        capacity: int = QUEUE_CAPACITY,
        scanner: Optional[BackwardChunkScanner] = None,
    ):
        """
        Initialize a FileTailer.

        Args:
            request: What to tail
            window_size: Scanner window size in bytes
            capacity: Line queue capacity
            scanner: Scanner to use instead of the default
        """
        if request is None:
            raise ValueError("a request is mandatory")
        self.request = request
        self._observers = []
        self._pipeline = TailPipeline(request, self._observers, window_size, capacity, scanner)

        self._lock = threading.Lock()
        self._state = TailerState.OFF
        self._spent = False

    @property
    def state(self) -> TailerState:
        return self._state

    @property
    def pipeline(self) -> TailPipeline:
        return self._pipeline

    @property
    def observers(self) -> tuple:
        """Registered observers in delivery order."""
        return tuple(self._observers)

    def add_observer(self, observer) -> None:
        """
        Register an observer; delivery follows registration order.

        Raises:
            ValueError: If observer is None
        """
        if observer is None:
            raise ValueError("an observer is mandatory")
        self._observers.append(observer)

    def remove_observer(self, observer) -> None:
        """Not supported."""
        raise NotImplementedError("Removing observers is not supported")

    def turn_on(self) -> bool:
        """
        Start the producer and consumer; returns immediately.

        Returns:
            True if this call started the workers
        """
        with self._lock:
            if self._spent:
                logger.debug(f"turn_on ignored, tailer for {self.request.file} already used")
                return False
            self._spent = True
            self._state = TailerState.RUNNING
            logger.info("turning on")
            self._pipeline.start()
            return True

    def turn_off(self) -> None:
        """
        Stop both workers and release them; safe to call repeatedly and from
        inside an observer callback.
        """
        with self._lock:
            self._spent = True
            if self._state is TailerState.OFF and self._pipeline.queue.cancelled:
                return
            logger.info("turning off")
            self._pipeline.cancel()
            self._state = TailerState.OFF

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Block until both workers have finished.

        Args:
            timeout: Seconds to wait, or None to wait indefinitely

        Returns:
            True if the workers finished (or never started), False on timeout

        Raises:
            Exception: An observer exception that ended the consumer
        """
        logger.debug("joining")
        return self._pipeline.join(timeout)

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.turn_off()

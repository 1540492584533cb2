"""Producer/consumer workers that stream scanned lines to observers."""

import logging
import os
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from functools import partial
from typing import Iterable, List, Optional

from .line_queue import QUEUE_CAPACITY, EndOfStream, Failure, Line, LineQueue, QueueClosed
from .request import TailRequest
from .scanner import WINDOW_SIZE, BackwardChunkScanner, ScanError

logger = logging.getLogger(__name__)


class TailPipeline:
    """
    Runs one producer and one consumer over a bounded LineQueue.

    The producer scans the file and puts each line, then a terminal item.
    The consumer gets items in order and delivers them to the observers.
    Observer exceptions are not caught: they end the consumer and are kept
    on its future.
    """

    def __init__(
        self,
        request: TailRequest,
        observers: List,
        window_size: int = WINDOW_SIZE,
        capacity: int = QUEUE_CAPACITY,
        scanner: Optional[BackwardChunkScanner] = None,
    ):
        """
        Initialize a pipeline.

        Args:
            request: What to tail
            observers: Live observer list; read at delivery time, never modified here
            window_size: Scanner window size in bytes (ignored if scanner is given)
            capacity: Queue capacity
            scanner: Scanner to use instead of a default BackwardChunkScanner
        """
        self.request = request
        self.observers = observers
        self.scanner = scanner or BackwardChunkScanner(window_size, debug=request.debug)
        self.queue = LineQueue(capacity)

        self.producer: Optional[Future] = None
        self.consumer: Optional[Future] = None

        self._stopped = threading.Event()
        self._executor: Optional[ThreadPoolExecutor] = None

    def _trace(self, message: str) -> None:
        if self.request.debug:
            logger.debug(message)

    def start(self) -> None:
        """Schedule both workers."""
        self._executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="tailog")
        self.producer = self._executor.submit(self._produce)
        self.consumer = self._executor.submit(self._consume)
        self.producer.add_done_callback(partial(self._worker_done, "producer"))
        self.consumer.add_done_callback(partial(self._worker_done, "consumer"))
        logger.info(f"Started tail of {self.request.file} ({self.request.number_of_lines} lines)")

    def cancel(self) -> None:
        """Stop both workers and release the executor without waiting for them."""
        self._stopped.set()
        self.queue.cancel()
        if self._executor is not None:
            self._executor.shutdown(wait=False, cancel_futures=True)
            self._executor = None

    def join(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for both workers to finish.

        Returns:
            True if both finished, False on timeout

        Raises:
            Exception: The first exception that ended a worker
        """
        futures = [f for f in (self.producer, self.consumer) if f is not None]
        _, not_done = wait(futures, timeout)
        if not_done:
            return False
        for future in futures:
            if future.cancelled():
                continue
            error = future.exception()
            if error is not None:
                raise error
        return True

    def _worker_done(self, name: str, future: Future) -> None:
        if future.cancelled():
            logger.debug(f"{name} cancelled before it started")
            return
        error = future.exception()
        if error is not None:
            logger.error(f"{name} worker failed: {error!r}", exc_info=error)
        else:
            self._trace(f"{name} dying")

    def _put_lines(self, lines: Iterable[str]) -> None:
        for line in lines:
            self.queue.put(Line(line))
            self._trace(f"added -> {line}")

    def _produce(self) -> None:
        """Scan the file and queue its last lines followed by a terminal item."""
        count = self.request.number_of_lines
        try:
            if count == 0:
                self._trace("0 lines requested")
                self.queue.put(EndOfStream())
                return

            try:
                with open(self.request.file, "rb") as fileobj:
                    if fileobj.seek(0, os.SEEK_END) == 0:
                        self._trace("file is empty")
                        self.queue.put(EndOfStream())
                        return
                    self._trace(f"searching for last {count} lines")
                    lines = self.scanner.scan(fileobj, count, should_stop=self._stopped.is_set)
            except ScanError as e:
                logger.warning(f"Reading {self.request.file} failed after {len(e.partial)} lines: {e}")
                self._put_lines(e.partial)
                self.queue.put(Failure(str(e)))
                return
            except OSError as e:
                logger.warning(f"Cannot read {self.request.file}: {e}")
                self.queue.put(Failure(str(e)))
                return
            except QueueClosed:
                raise
            except Exception as e:
                logger.exception(f"Failed to read {self.request.file}: {e}")
                self.queue.put(Failure(str(e) or type(e).__name__))
                return

            if self._stopped.is_set():
                self._trace("stopped before queueing lines")
                return

            self._put_lines(lines)
            self.queue.put(EndOfStream())
            self._trace("sent end of stream")
        except QueueClosed:
            self._trace("producer cancelled")

    def _consume(self) -> None:
        """Deliver queued items to the observers until a terminal item arrives."""
        try:
            while True:
                item = self.queue.get()

                if isinstance(item, Line):
                    for observer in list(self.observers):
                        observer.on_new_line(item.text)
                elif isinstance(item, Failure):
                    for observer in list(self.observers):
                        observer.on_finish_with_exception(item.message)
                    return
                else:
                    for observer in list(self.observers):
                        observer.on_finish_normal()
                    return
        except QueueClosed:
            self._trace("consumer cancelled")
        except BaseException:
            # Release a producer blocked on a full queue
            self.queue.cancel()
            raise

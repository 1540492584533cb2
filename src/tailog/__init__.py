"""tailog - print the last lines of files without reading them whole."""

import logging
import sys

from .line_queue import EndOfStream, Failure, Line, LineQueue, QueueClosed
from .observer import ContentObserver
from .request import TailRequest, TailRequestBuilder
from .scanner import BackwardChunkScanner, ScanError, ScanWindow, tail_lines
from .tailer import FileTailer, TailerState

__version__ = "0.1.0"
__all__ = [
    "BackwardChunkScanner",
    "ContentObserver",
    "EndOfStream",
    "Failure",
    "FileTailer",
    "Line",
    "LineQueue",
    "QueueClosed",
    "ScanError",
    "ScanWindow",
    "TailRequest",
    "TailRequestBuilder",
    "TailerState",
    "configure_logging",
    "tail_lines",
]


def configure_logging(level=logging.INFO):
    """Configure logging for tailog."""
    # Create formatter
    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    # Create console handler
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    logger = logging.getLogger("tailog")
    logger.setLevel(level)
    # Remove existing handlers to avoid duplicates
    logger.handlers.clear()
    logger.addHandler(handler)

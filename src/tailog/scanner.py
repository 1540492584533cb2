"""Backward chunked scanning for the last lines of a file."""

import logging
import os
from collections import deque
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, Callable, Iterator, List, Optional, Union

logger = logging.getLogger(__name__)

# Configuration
WINDOW_SIZE = 1024  # Bytes read per backward step
LONG_LINE_WARNING = 1024  # Warn once a widened window reaches this many window sizes


class ScanError(OSError):
    """A read failed part way through a scan."""

    def __init__(self, message: str, partial: Optional[List[str]] = None):
        super().__init__(message)
        self.partial = list(partial or [])


@dataclass
class ScanWindow:
    """One backward step over the file."""

    start: int
    length: int
    lines: List[str] = field(default_factory=list)
    consumed: int = 0


def default_split_lines(text: str) -> List[str]:
    """Default line splitting on newlines."""
    # Handle different line endings
    lines = text.replace("\r\n", "\n").replace("\r", "\n").split("\n")
    # Don't lose empty lines
    if text.endswith("\n") or text.endswith("\r"):
        lines.pop()  # Remove last empty element from split
    return lines


def _starts_line(previous: bytes, data: bytes) -> bool:
    """Check whether data begins a line, given the byte just before it."""
    if previous == b"\n":
        return True
    # A lone \r ends a line, but \r\n split across the boundary does not
    return previous == b"\r" and not data.startswith(b"\n")


def _fragment_length(data: bytes) -> Optional[int]:
    """Length of the leading partial line, terminator included."""
    newline = data.find(b"\n")
    carriage = data.find(b"\r")
    if carriage != -1 and (newline == -1 or carriage < newline):
        if data[carriage + 1 : carriage + 2] == b"\n":
            return carriage + 2
        return carriage + 1
    if newline != -1:
        return newline + 1
    return None


def _read_exactly(fileobj: BinaryIO, size: int) -> bytes:
    """Read up to size bytes, retrying short reads until EOF."""
    chunks = []
    remaining = size
    while remaining > 0:
        chunk = fileobj.read(remaining)
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


class BackwardChunkScanner:
    """
    Finds the last lines of a file by reading fixed-size windows backwards from EOF.

    Each window ends where the previously scanned region begins. A window that
    starts in the middle of a line drops that leading fragment, so the next,
    earlier window ends exactly on the fragment's terminator and returns it
    whole. Fragments are cut on raw bytes before decoding, which keeps
    multi-byte UTF-8 characters intact across window boundaries.
    """

    def __init__(self, window_size: int = WINDOW_SIZE, debug: bool = False):
        """
        Initialize a scanner.

        Args:
            window_size: Bytes read per backward step
            debug: Emit per-window tracing at DEBUG level
        """
        if window_size <= 0:
            raise ValueError("Window size must be positive")
        self.window_size = window_size
        self.debug = debug

    def windows(self, fileobj: BinaryIO) -> Iterator[ScanWindow]:
        """
        Yield backward scan windows, nearest EOF first, until the start of the file.

        Args:
            fileobj: Seekable binary file object

        Yields:
            ScanWindow for each step; a window holding only a line fragment
            has no lines and consumes nothing
        """
        end = fileobj.seek(0, os.SEEK_END)
        span = self.window_size
        warned = False

        while end > 0:
            start = max(0, end - span)

            if start > 0:
                fileobj.seek(start - 1)
                data = _read_exactly(fileobj, end - start + 1)
                previous, data = data[:1], data[1:]
            else:
                fileobj.seek(0)
                data = _read_exactly(fileobj, end)
                previous = b""

            if not data:
                # File shrank underneath us
                logger.warning(f"Short read at offset {start:,}, stopping scan")
                break

            skip = 0
            if start > 0 and not _starts_line(previous, data):
                skip = _fragment_length(data)
                if skip is None or skip == len(data):
                    # Only part of one line so far, widen the window
                    if self.debug:
                        logger.debug(f"Fragment-only window [{start:,}, {end:,}), widening")
                    yield ScanWindow(start=start, length=len(data))
                    span *= 2
                    if not warned and span >= self.window_size * LONG_LINE_WARNING:
                        logger.warning(
                            f"Line ending at offset {end:,} is longer than {len(data):,} bytes, "
                            f"reading up to {span:,} bytes at once"
                        )
                        warned = True
                    continue

            body = data[skip:]
            window = ScanWindow(
                start=start,
                length=len(data),
                lines=default_split_lines(body.decode("utf-8", errors="replace")),
                consumed=len(body),
            )
            if self.debug:
                logger.debug(
                    f"Window [{start:,}, {end:,}) - {len(window.lines)} lines, "
                    f"dropped {skip} fragment bytes, consumed {window.consumed}"
                )
            yield window

            end -= window.consumed
            span = self.window_size

    def scan(
        self,
        fileobj: BinaryIO,
        count: int,
        should_stop: Optional[Callable[[], bool]] = None,
    ) -> List[str]:
        """
        Get the last lines of a file.

        Args:
            fileobj: Seekable binary file object
            count: Number of lines wanted
            should_stop: Polled between windows; a true result ends the scan early

        Returns:
            Up to count lines, oldest first (fewer if the file is shorter)

        Raises:
            ScanError: If reading fails; carries the lines found so far
        """
        if count <= 0:
            return []

        sink = deque()
        try:
            for window in self.windows(fileobj):
                needed = count - len(sink)
                if window.lines:
                    take = window.lines[-needed:] if needed < len(window.lines) else window.lines
                    sink.extendleft(reversed(take))
                if len(sink) >= count:
                    break
                if should_stop is not None and should_stop():
                    logger.debug("Scan stopped before completion")
                    break
        except OSError as e:
            raise ScanError(str(e), partial=list(sink)) from e

        return list(sink)


def tail_lines(path: Union[Path, str], count: int, window_size: int = WINDOW_SIZE) -> List[str]:
    """
    Read and return the last N lines of a file.

    Args:
        path: File to read
        count: Number of lines wanted
        window_size: Bytes read per backward step

    Returns:
        Up to count lines, oldest first
    """
    scanner = BackwardChunkScanner(window_size)
    with open(path, "rb") as fileobj:
        return scanner.scan(fileobj, count)

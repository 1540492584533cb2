"""Immutable tail request and its staged builder."""

from dataclasses import dataclass
from pathlib import Path
from typing import Union

# Configuration
DEFAULT_NUMBER_OF_LINES = 10


def _check_readable(path: Path) -> None:
    """Fail early if the file cannot be opened for reading."""
    with open(path, "rb"):
        pass


def _check_line_count(lines) -> None:
    if isinstance(lines, bool) or not isinstance(lines, int):
        raise TypeError(f"Number of lines must be an int, not {type(lines).__name__}")
    if lines < 0:
        raise ValueError(f"Number of lines must not be negative: {lines}")


@dataclass(frozen=True)
class TailRequest:
    """
    What to tail.

    Attributes:
        file: File to read; must exist and be readable when the request is made
        number_of_lines: How many lines from the end to deliver
        debug: Trace the scan and the workers at DEBUG level
        follow: Accepted for compatibility, not used
    """

    file: Path
    number_of_lines: int = DEFAULT_NUMBER_OF_LINES
    debug: bool = False
    follow: bool = False

    def __post_init__(self):
        if self.file is None:
            raise ValueError("file must not be None")
        object.__setattr__(self, "file", Path(self.file))
        _check_line_count(self.number_of_lines)
        _check_readable(self.file)

    @classmethod
    def builder(cls, file: Union[Path, str]) -> "TailRequestBuilder":
        """Start building a request for file."""
        return TailRequestBuilder(file)


class TailRequestBuilder:
    """
    Staged builder for TailRequest.

    Example:
        request = TailRequest.builder("app.log").number_of_lines(15).debug(True).build()
    """

    def __init__(self, file: Union[Path, str]):
        """
        Args:
            file: File to tail

        Raises:
            ValueError: If file is None
            FileNotFoundError: If file does not exist (other OSErrors if unreadable)
        """
        if file is None:
            raise ValueError("file must not be None")
        self._file = Path(file)
        _check_readable(self._file)
        self._number_of_lines = DEFAULT_NUMBER_OF_LINES
        self._debug = False
        self._follow = False

    def number_of_lines(self, lines: int) -> "TailRequestBuilder":
        _check_line_count(lines)
        self._number_of_lines = lines
        return self

    def debug(self, debug: bool = True) -> "TailRequestBuilder":
        self._debug = debug
        return self

    def follow(self, follow: bool = True) -> "TailRequestBuilder":
        """Currently not used by the tailer."""
        self._follow = follow
        return self

    def build(self) -> TailRequest:
        return TailRequest(
            file=self._file,
            number_of_lines=self._number_of_lines,
            debug=self._debug,
            follow=self._follow,
        )

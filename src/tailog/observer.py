"""Observer contract for receiving lines from a FileTailer."""

from abc import ABC, abstractmethod


class ContentObserver(ABC):
    """
    Receives the lines found by a FileTailer.

    Callbacks run on the tailer's consumer worker, one at a time, in the order
    observers were registered. Exactly one of the two finish callbacks is
    delivered per activation, after every line. Observers are expected to call
    FileTailer.turn_off() when they receive it.
    """

    @abstractmethod
    def on_new_line(self, line: str) -> None:
        """Handle a line; possibly empty, never None and without its terminator."""

    @abstractmethod
    def on_finish_normal(self) -> None:
        """All lines have been delivered."""

    @abstractmethod
    def on_finish_with_exception(self, message: str) -> None:
        """Reading failed; lines read before the failure have been delivered."""

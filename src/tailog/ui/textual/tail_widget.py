import logging
import threading
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from textual.geometry import Size
from textual.message import Message
from textual.scroll_view import ScrollView
from textual.strip import Strip
from rich.segment import Segment
from wcwidth import wcswidth

from ...observer import ContentObserver
from ...request import DEFAULT_NUMBER_OF_LINES, TailRequest
from ...tailer import FileTailer

# Configure logger
logger = logging.getLogger(__name__)


@lru_cache(maxsize=100000)
def default_get_width(line: str) -> int:
    """Fast line width calculation with ASCII fast path and caching."""
    # Fast path for ASCII (99% of log lines)
    if line.isascii():
        return len(line)
    # Slow path for Unicode
    width = wcswidth(line)
    return max(0, width if width is not None else len(line))


class TailWidget(ScrollView):
    """A scrollable widget showing the last lines of a file."""

    class LinesAppended(Message):
        """Posted when new lines have arrived from the tailer."""

        def __init__(self, total_lines: int) -> None:
            super().__init__()
            self.total_lines = total_lines

    class TailFinished(Message):
        """Posted once the tailer has delivered everything (error is None on success)."""

        def __init__(self, error: Optional[str]) -> None:
            super().__init__()
            self.error = error

    DEFAULT_CSS = """
    TailWidget {
        padding: 0;
        margin: 0;
        border: none;
        overflow-y: scroll;
        width: 100%;
        height: 100%;
    }
    """

    can_focus = True

    def __init__(self, path, number_of_lines: int = DEFAULT_NUMBER_OF_LINES, **kwargs):
        super().__init__(**kwargs)
        self.path = Path(path)
        self.number_of_lines = number_of_lines
        self.tailer: Optional[FileTailer] = None

        # Written by the tailer's consumer thread, read on the app thread
        self.buffer: List[str] = []
        self.max_line_width = 0
        self.tail_finished = False
        self.tail_error: Optional[str] = None
        self._lock = threading.Lock()

    def on_mount(self):
        """Start tailing when mounted."""
        logger.info(f"TailWidget on_mount, tailing {self.number_of_lines} lines of {self.path}")
        try:
            request = TailRequest.builder(self.path).number_of_lines(self.number_of_lines).build()
        except OSError as e:
            logger.warning(f"Cannot open {self.path}: {e}")
            self.tail_error = e.strerror or str(e)
            self.tail_finished = True
            self.post_message(self.TailFinished(self.tail_error))
            return

        self.tailer = FileTailer(request)
        self.tailer.add_observer(self)
        self.tailer.turn_on()

    def on_unmount(self):
        """Called when widget is unmounted - stop the tailer."""
        if self.tailer is not None:
            self.tailer.turn_off()

    # Observer callbacks, called on the tailer's consumer thread

    def on_new_line(self, line: str) -> None:
        with self._lock:
            self.buffer.append(line)
            self.max_line_width = max(self.max_line_width, default_get_width(line))
            total = len(self.buffer)
        if self.is_mounted:
            self.post_message(self.LinesAppended(total))

    def on_finish_normal(self) -> None:
        self._finish(None)

    def on_finish_with_exception(self, message: str) -> None:
        self._finish(message)

    def _finish(self, error: Optional[str]) -> None:
        self.tail_error = error
        self.tail_finished = True
        if self.tailer is not None:
            self.tailer.turn_off()
        if self.is_mounted:
            self.post_message(self.TailFinished(error))

    # App thread

    def on_tail_widget_lines_appended(self, event: LinesAppended) -> None:
        self._sync_virtual_size()

    def on_tail_widget_tail_finished(self, event: TailFinished) -> None:
        self._sync_virtual_size()

    def _sync_virtual_size(self) -> None:
        with self._lock:
            size = Size(self.max_line_width, len(self.buffer))
        self.virtual_size = size
        self.refresh()

    def render_line(self, y: int) -> Strip:
        """Render a single line of the tail."""
        scroll_x, scroll_y = self.scroll_offset
        line_index = scroll_y + y

        with self._lock:
            line_text = self.buffer[line_index] if line_index < len(self.buffer) else None

        if line_text is None:
            return Strip.blank(self.size.width)
        return Strip([Segment(line_text)]).crop(scroll_x, scroll_x + self.size.width)


# Lines arrive through the observer contract without subclassing the ABC
ContentObserver.register(TailWidget)

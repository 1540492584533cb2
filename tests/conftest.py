"""Shared fixtures for tailog tests."""

import threading

import pytest

from tailog import ContentObserver


class RecordingObserver(ContentObserver):
    """Records every callback; optionally turns the tailer off when finished."""

    def __init__(self, tailer=None, name="observer", log=None):
        self.tailer = tailer
        self.name = name
        self.events = [] if log is None else log
        self.done = threading.Event()

    def on_new_line(self, line):
        self.events.append((self.name, "line", line))

    def on_finish_normal(self):
        self.events.append((self.name, "finish", None))
        self._done()

    def on_finish_with_exception(self, message):
        self.events.append((self.name, "error", message))
        self._done()

    def _done(self):
        if self.tailer is not None:
            self.tailer.turn_off()
        self.done.set()

    @property
    def lines(self):
        return [value for _, kind, value in self.events if kind == "line"]

    @property
    def kinds(self):
        return [kind for _, kind, _ in self.events]


@pytest.fixture
def recorder():
    """The RecordingObserver class."""
    return RecordingObserver


@pytest.fixture
def make_file(tmp_path):
    """Create a file from str or bytes content and return its path."""

    def _make_file(content, name="test.log"):
        path = tmp_path / name
        if isinstance(content, str):
            content = content.encode("utf-8")
        path.write_bytes(content)
        return path

    return _make_file


@pytest.fixture
def numbered_file(make_file):
    """A file with 100 numbered lines."""
    return make_file("".join(f"line {i}\n" for i in range(1, 101)), name="numbered.log")

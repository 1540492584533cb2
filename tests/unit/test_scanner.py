"""Tests for BackwardChunkScanner."""

import io
import logging

import pytest

from tailog.scanner import (
    WINDOW_SIZE,
    BackwardChunkScanner,
    ScanError,
    ScanWindow,
    default_split_lines,
    tail_lines,
)


class FailingReader(io.BytesIO):
    """BytesIO whose read() raises after a number of successful calls."""

    def __init__(self, data, fail_on_call):
        super().__init__(data)
        self.calls = 0
        self.fail_on_call = fail_on_call

    def read(self, size=-1):
        self.calls += 1
        if self.calls >= self.fail_on_call:
            raise OSError("Input/output error")
        return super().read(size)


def test_default_window_size():
    """The window is 1KiB unless configured."""
    assert WINDOW_SIZE == 1024
    assert BackwardChunkScanner().window_size == WINDOW_SIZE


def test_invalid_window_size():
    """Window size must be positive."""
    with pytest.raises(ValueError):
        BackwardChunkScanner(0)
    with pytest.raises(ValueError):
        BackwardChunkScanner(-1)


def test_split_lines_handles_all_terminators():
    """\\n, \\r\\n and \\r all end lines; a trailing terminator adds nothing."""
    assert default_split_lines("a\nb\r\nc\rd\n") == ["a", "b", "c", "d"]
    assert default_split_lines("a\nb") == ["a", "b"]
    assert default_split_lines("a\r") == ["a"]
    assert default_split_lines("\n") == [""]


def test_fewer_lines_than_requested(make_file):
    """A 3-line file with N=10 returns all 3 lines."""
    path = make_file("a\nb\nc\n")
    assert tail_lines(path, 10) == ["a", "b", "c"]


def test_last_five_of_hundred(numbered_file):
    """A 100-line file with N=5 returns lines 96-100."""
    assert tail_lines(numbered_file, 5) == [f"line {i}" for i in range(96, 101)]


@pytest.mark.parametrize("window_size", [1, 2, 7, 64, 1024])
def test_window_size_does_not_change_result(numbered_file, window_size):
    """Any window size finds the same lines, with no loss or duplication."""
    assert tail_lines(numbered_file, 5, window_size) == [f"line {i}" for i in range(96, 101)]
    assert tail_lines(numbered_file, 1000, window_size) == [f"line {i}" for i in range(1, 101)]


def test_zero_lines(numbered_file):
    """N=0 returns nothing."""
    assert tail_lines(numbered_file, 0) == []


def test_empty_file(make_file):
    """An empty file returns nothing."""
    path = make_file(b"")
    assert tail_lines(path, 10) == []
    with open(path, "rb") as f:
        assert list(BackwardChunkScanner().windows(f)) == []


def test_no_trailing_newline(make_file):
    """The last line counts even without a terminator."""
    path = make_file("a\nb\nc")
    assert tail_lines(path, 2) == ["b", "c"]
    assert tail_lines(path, 2, window_size=2) == ["b", "c"]


def test_empty_lines_preserved(make_file):
    """Blank lines are lines."""
    path = make_file("a\n\n\nb\n")
    assert tail_lines(path, 3) == ["", "", "b"]
    assert tail_lines(path, 3, window_size=2) == ["", "", "b"]
    assert tail_lines(path, 10, window_size=2) == ["a", "", "", "b"]


def test_crlf_split_across_windows(make_file):
    """\\r\\n terminators are handled even when a window starts between \\r and \\n."""
    path = make_file(b"one\r\ntwo\r\nthree\r\n")
    for window_size in range(1, 20):
        assert tail_lines(path, 10, window_size) == ["one", "two", "three"], window_size


def test_lone_carriage_returns(make_file):
    """Old Mac-style \\r line endings."""
    path = make_file(b"one\rtwo\rthree")
    assert tail_lines(path, 10, window_size=3) == ["one", "two", "three"]


def test_line_longer_than_window(make_file):
    """A line longer than the window comes back whole."""
    long_line = "x" * 50
    path = make_file(f"short\n{long_line}\nend\n")
    assert tail_lines(path, 2, window_size=8) == [long_line, "end"]
    assert tail_lines(path, 3, window_size=8) == ["short", long_line, "end"]


def test_file_that_is_one_long_line(make_file):
    """A single line with no terminator, many windows long."""
    path = make_file("y" * 100)
    assert tail_lines(path, 5, window_size=3) == ["y" * 100]


def test_very_long_line_logs_a_warning(make_file, caplog):
    """Widening far past the window size is reported once."""
    caplog.set_level(logging.WARNING, logger="tailog")
    path = make_file("x" * 3000 + "\n")

    assert tail_lines(path, 1, window_size=1) == ["x" * 3000]

    warnings = [r for r in caplog.records if "is longer than" in r.getMessage()]
    assert len(warnings) == 1
    assert warnings[0].levelno == logging.WARNING


def test_ordinary_lines_log_no_warning(numbered_file, caplog):
    """Lines shorter than the widening limit stay quiet."""
    caplog.set_level(logging.WARNING, logger="tailog")
    assert tail_lines(numbered_file, 5, window_size=1) == [f"line {i}" for i in range(96, 101)]
    assert not caplog.records


def test_multibyte_characters_across_windows(make_file):
    """UTF-8 sequences split by a window start are not mangled."""
    lines = ["héllo wörld", "日本語のテキスト", "emoji 🚀 📊", "plain"]
    path = make_file("\n".join(lines) + "\n")
    for window_size in range(1, 12):
        assert tail_lines(path, 10, window_size) == lines, window_size


def test_invalid_utf8_is_replaced(make_file):
    """Undecodable bytes become U+FFFD instead of failing the scan."""
    path = make_file(b"ok\n\xff\xfe\n")
    assert tail_lines(path, 2) == ["ok", "��"]


def test_window_starting_on_line_start_keeps_first_line(make_file):
    """A window that begins exactly at a line start does not drop that line."""
    path = make_file(b"aaa\nbbb\n")
    with open(path, "rb") as f:
        windows = list(BackwardChunkScanner(4).windows(f))

    assert windows == [
        ScanWindow(start=4, length=4, lines=["bbb"], consumed=4),
        ScanWindow(start=0, length=4, lines=["aaa"], consumed=4),
    ]
    assert tail_lines(path, 2, window_size=4) == ["aaa", "bbb"]


def test_windows_drop_leading_fragment(make_file):
    """A window starting mid-line drops the fragment and does not count it as consumed."""
    path = make_file(b"abc\ndef\n")
    with open(path, "rb") as f:
        windows = list(BackwardChunkScanner(5).windows(f))

    assert windows == [
        ScanWindow(start=3, length=5, lines=["def"], consumed=4),
        ScanWindow(start=0, length=4, lines=["abc"], consumed=4),
    ]


def test_fragment_only_window_widens(make_file):
    """A window holding only part of a line consumes nothing and the next one is wider."""
    path = make_file(b"abcdefgh\n")
    with open(path, "rb") as f:
        windows = list(BackwardChunkScanner(4).windows(f))

    assert windows[0] == ScanWindow(start=5, length=4, lines=[], consumed=0)
    assert windows[1] == ScanWindow(start=1, length=8, lines=[], consumed=0)
    assert windows[-1] == ScanWindow(start=0, length=9, lines=["abcdefgh"], consumed=9)


def test_scan_stops_after_enough_lines():
    """Scanning stops reading once N lines are found."""
    data = b"".join(f"{i:03}\n".encode() for i in range(500))
    reader = FailingReader(data, fail_on_call=3)
    # Two 4-byte windows hold the last two lines; a third read would fail
    assert BackwardChunkScanner(4).scan(reader, 2) == ["498", "499"]


def test_read_error_carries_partial_lines():
    """A failing read raises ScanError with the lines found so far."""
    reader = FailingReader(b"aa\nbb\ncc\ndd\n", fail_on_call=3)

    with pytest.raises(ScanError) as exc_info:
        BackwardChunkScanner(3).scan(reader, 4)

    assert exc_info.value.partial == ["cc", "dd"]
    assert str(exc_info.value) == "Input/output error"
    assert isinstance(exc_info.value, OSError)
    assert isinstance(exc_info.value.__cause__, OSError)


def test_should_stop_ends_scan_early():
    """should_stop is polled between windows."""
    reader = io.BytesIO(b"aa\nbb\ncc\ndd\n")
    assert BackwardChunkScanner(3).scan(reader, 4, should_stop=lambda: True) == ["dd"]


def test_scan_works_on_any_seekable_binary_file():
    """BytesIO is as good as a real file."""
    reader = io.BytesIO(b"first\nsecond\nthird\n")
    assert BackwardChunkScanner().scan(reader, 2) == ["second", "third"]


def test_missing_file():
    """tail_lines propagates the open error."""
    with pytest.raises(FileNotFoundError):
        tail_lines("/nonexistent/file.log", 10)

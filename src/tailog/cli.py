"""
cli.py: Print the last N lines of each file.

Mimics Unix 'tail' without follow mode:
  tailog <file>...          - Show last 10 lines of each file
  tailog -n 20 <file>       - Show last 20 lines
  tailog -q <file> <file>   - No "==> file <==" headers
"""

import argparse
import logging
import sys
import threading
from typing import Optional, TextIO

from . import __version__, configure_logging
from .observer import ContentObserver
from .request import DEFAULT_NUMBER_OF_LINES, TailRequest
from .tailer import FileTailer

PROG = "tailog"
COPYRIGHT = "Copyright (C) 2011 Gavin Bong"


def line_count(value: str) -> int:
    """argparse type for -n; negative counts mean the same as positive ones."""
    try:
        return abs(int(value))
    except ValueError:
        raise argparse.ArgumentTypeError("invalid number of lines")


class PrintObserver(ContentObserver):
    """Writes lines to a stream and turns the tailer off when it finishes."""

    def __init__(self, tailer: FileTailer, stream: TextIO):
        self.tailer = tailer
        self.stream = stream
        self.finished = threading.Event()
        self.error: Optional[str] = None

    def on_new_line(self, line: str) -> None:
        self.stream.write(line + "\n")

    def on_finish_normal(self) -> None:
        self._finish(None)

    def on_finish_with_exception(self, message: str) -> None:
        self._finish(message)

    def _finish(self, error: Optional[str]) -> None:
        self.error = error
        try:
            self.stream.flush()
        finally:
            self.tailer.turn_off()
            self.finished.set()


def open_request(filename: str, number_of_lines: int, debug: bool) -> Optional[TailRequest]:
    """Build a request, reporting files that cannot be opened."""
    try:
        return TailRequest.builder(filename).number_of_lines(number_of_lines).debug(debug).build()
    except OSError as e:
        reason = e.strerror or str(e)
        print(f"{PROG}: cannot open '{filename}' for reading: {reason}", file=sys.stderr)
        return None


def tail_file(request: TailRequest, stream: TextIO) -> int:
    """
    Print the tail of one file, blocking until it is done.

    Returns:
        Exit status for this file (0 or 1)
    """
    tailer = FileTailer(request)
    observer = PrintObserver(tailer, stream)
    tailer.add_observer(observer)
    tailer.turn_on()
    tailer.wait()

    if not observer.finished.is_set():
        print(f"{PROG}: '{request.file}': stopped before the end", file=sys.stderr)
        return 1
    if observer.error is not None:
        print(f"{PROG}: error reading '{request.file}': {observer.error}", file=sys.stderr)
        return 1
    return 0


def main(args_list=None):
    if args_list is None:
        args_list = sys.argv[1:]

    parser = argparse.ArgumentParser(
        prog=PROG,
        description=(
            "Print the last 10 lines of each FILE to standard output.\n"
            "With more than one FILE, precede each with a header giving the file name."
        ),
        usage=f"{PROG} [options]... [FILE]...",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("files", nargs="*", metavar="FILE", help="Files to read.")
    parser.add_argument(
        "-n",
        "--lines",
        type=line_count,
        default=DEFAULT_NUMBER_OF_LINES,
        metavar="K",
        help="output the last K lines, instead of the last 10",
    )
    parser.add_argument("-d", "--debug", action="store_true", help="enable debugging statements")
    parser.add_argument(
        "-q",
        "--quiet",
        "--silent",
        dest="quiet",
        action="store_true",
        help="never output headers giving file names",
    )
    parser.add_argument("--version", action="version", version=f"{PROG} {__version__}\n{COPYRIGHT}")

    args = parser.parse_args(args_list)

    configure_logging(logging.DEBUG if args.debug else logging.ERROR)
    logger = logging.getLogger(__name__)

    if not args.files:
        print(f"{PROG}: reading from standard input is not supported", file=sys.stderr)
        return 1

    stream = sys.stdout
    show_headers = len(args.files) > 1 and not args.quiet
    exit_status = 0
    printed_any = False

    for filename in args.files:
        logger.debug(f"Processing file [{filename}]")
        request = open_request(filename, args.lines, args.debug)
        if request is None:
            exit_status |= 1
            continue

        if show_headers:
            separator = "\n" if printed_any else ""
            stream.write(f"{separator}==> {filename} <==\n")
        printed_any = True

        result = tail_file(request, stream)
        logger.debug(f"Received exit status: {result}")
        exit_status |= result

    stream.flush()
    return exit_status


def run():
    sys.exit(main())


if __name__ == "__main__":
    run()

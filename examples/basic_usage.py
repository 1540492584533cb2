#!/usr/bin/env python3
"""
Basic usage example for tailog.

This example demonstrates:
- Reading the last lines synchronously with tail_lines()
- Building a TailRequest
- Streaming lines to an observer with FileTailer
- Turning the tailer off from the terminal callback
"""

import tempfile
import threading
from pathlib import Path

from tailog import ContentObserver, FileTailer, TailRequest, tail_lines


class PrintingObserver(ContentObserver):
    """Prints each line and signals when the tail is complete."""

    def __init__(self, tailer: FileTailer):
        self.tailer = tailer
        self.done = threading.Event()

    def on_new_line(self, line: str) -> None:
        print(f"  > {line}")

    def on_finish_normal(self) -> None:
        print("  (finished)")
        self.tailer.turn_off()
        self.done.set()

    def on_finish_with_exception(self, message: str) -> None:
        print(f"  (failed: {message})")
        self.tailer.turn_off()
        self.done.set()


def main():
    # Create a sample log file
    with tempfile.NamedTemporaryFile(mode="w", suffix=".log", delete=False) as f:
        for i in range(1, 1001):
            f.write(f"Log entry {i}: something happened\n")
        f.write("Here's a line with some unicode: 🚀 📊 🎉\n")
        log_path = f.name

    print(f"Created sample log at: {log_path}")

    try:
        print("\n=== tail_lines() ===")
        for line in tail_lines(log_path, 3):
            print(f"  > {line}")

        print("\n=== FileTailer with an observer ===")
        request = TailRequest.builder(log_path).number_of_lines(5).build()
        tailer = FileTailer(request)
        observer = PrintingObserver(tailer)
        tailer.add_observer(observer)
        tailer.turn_on()
        observer.done.wait()

        print("\n=== Small windows and a tiny queue ===")
        request = TailRequest(Path(log_path), number_of_lines=3)
        tailer = FileTailer(request, window_size=16, capacity=2)
        observer = PrintingObserver(tailer)
        tailer.add_observer(observer)
        tailer.turn_on()
        observer.done.wait()

    finally:
        # Clean up
        Path(log_path).unlink()
        print(f"\nCleaned up {log_path}")


if __name__ == "__main__":
    main()
    print("\nExample complete!")

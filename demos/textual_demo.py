#!/usr/bin/env python3
import logging
import sys
from pathlib import Path

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.widgets import Footer, Header

from tailog.ui.textual import TailWidget


class TailDemo(App):
    CSS = """
    #main_container {
        align: center middle;
        background: transparent;
    }

    #tail_display {
        width: 100%;
        height: 100%;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
    ]

    def __init__(self, path: Path, number_of_lines: int = 100) -> None:
        super().__init__()
        self.path = path
        self.number_of_lines = number_of_lines
        self.title = f"tailog - {path}"

        # Setup logging
        log_file = Path("./logs/textual_demo.log")
        log_file.parent.mkdir(exist_ok=True)

        logging.basicConfig(
            filename=log_file,
            level=logging.INFO,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            filemode="a",
        )
        self.logger = logging.getLogger(__name__)
        self.logger.info("Textual tail demo app started")

    def compose(self) -> ComposeResult:
        yield Header()
        with Container(id="main_container"):
            yield TailWidget(self.path, number_of_lines=self.number_of_lines, id="tail_display")
        yield Footer()

    def on_tail_widget_lines_appended(self, event: TailWidget.LinesAppended) -> None:
        self.sub_title = f"{event.total_lines} lines"

    def on_tail_widget_tail_finished(self, event: TailWidget.TailFinished) -> None:
        if event.error is None:
            self.logger.info("Tail finished")
        else:
            self.logger.warning(f"Tail failed: {event.error}")
            self.sub_title = f"error: {event.error}"


def run_demo() -> None:
    if len(sys.argv) < 2:
        print("Usage: python textual_demo.py <file> [lines]")
        sys.exit(1)
    lines = int(sys.argv[2]) if len(sys.argv) > 2 else 100
    TailDemo(Path(sys.argv[1]), lines).run()


if __name__ == "__main__":
    run_demo()

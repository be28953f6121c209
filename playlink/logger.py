"""Rich console output for the operator log."""

from datetime import datetime
from typing import Optional

from rich.console import Console
from rich.text import Text

_LEVEL_STYLES = {
    "DEBUG": "dim",
    "INFO": "green",
    "WARN": "yellow",
    "ERROR": "red",
}


class PlaylinkLogger:
    """Timestamped, level-coloured operator log on a Rich console."""

    def __init__(self, console: Optional[Console] = None, verbose: bool = False):
        """Initialize logger.

        Args:
            console: Rich Console instance (stderr if not given)
            verbose: Show debug messages
        """
        self.console = console or Console(stderr=True)
        self.verbose = verbose

    def _emit(self, level: str, message: str) -> None:
        # Messages are appended as plain text so that brackets in remote
        # responses and chat prefixes are never parsed as Rich markup.
        text = Text()
        text.append(f"[{datetime.now().strftime('%Y-%m-%d %H:%M:%S')}] ", style="dim")
        text.append(f"{level:<5}", style=_LEVEL_STYLES[level])
        text.append(" ")
        text.append(message)
        self.console.print(text)

    def debug(self, message: str) -> None:
        """Dim debug message, only shown when verbose."""
        if self.verbose:
            self._emit("DEBUG", message)

    def info(self, message: str) -> None:
        """Green info message."""
        self._emit("INFO", message)

    def warning(self, message: str) -> None:
        """Yellow warning message."""
        self._emit("WARN", message)

    def error(self, message: str) -> None:
        """Red error message."""
        self._emit("ERROR", message)

"""One-shot user notifications printed to the console."""
import logging

from rich.console import Console

logger = logging.getLogger(__name__)

STYLES = {"error": "red", "warning": "yellow", "info": "green"}


class Notifier:
    def __init__(self, console: Console | None = None):
        self.console = console or Console()
        self.history: list[tuple[str, str]] = []

    def notify(self, level: str, message: str) -> None:
        self.history.append((level, message))
        style = STYLES.get(level, "white")
        self.console.print(f"[{style}]{message}[/{style}]")

    def error(self, error: Exception | str) -> None:
        logger.info("user notified of error: %s", error)
        self.notify("error", str(error))

    def warning(self, message: str) -> None:
        self.notify("warning", message)

    def info(self, message: str) -> None:
        self.notify("info", message)

    @property
    def last(self) -> tuple[str, str] | None:
        return self.history[-1] if self.history else None

"""User notifications and logging setup."""

import logging
from dataclasses import dataclass
from typing import Literal

from rich.console import Console
from rich.logging import RichHandler

Level = Literal["success", "error", "info"]

_STYLES: dict[str, tuple[str, str]] = {
    "success": ("green", "✓"),
    "error": ("red", "✗"),
    "info": ("cyan", "•"),
}


@dataclass(frozen=True)
class Notification:
    """Message for the user with a severity."""

    message: str
    level: Level = "info"

    def render(self) -> str:
        """Format as rich markup."""
        color, symbol = _STYLES[self.level]
        return f"[{color}]{symbol}[/{color}] {self.message}"


def notify(console: Console, message: str, level: Level = "info") -> Notification:
    """Print a notification and return it."""
    notification = Notification(message=message, level=level)
    console.print(notification.render())
    return notification


def configure_logging(verbose: bool = False) -> None:
    """Route log records through rich. Debug output only when verbose."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )

"""Toast notifications and destructive-action confirmation."""

from __future__ import annotations

from typing import Literal, Protocol

from rich.console import Console
from rich.markup import escape

from arrmeta import logger

Severity = Literal["success", "warning", "error"]

SEVERITY_STYLES: dict[Severity, tuple[str, str]] = {
    "success": ("green", "OK"),
    "warning": ("yellow", "WARNING"),
    "error": ("red", "ERROR"),
}


class Notifier(Protocol):
    def notify(self, message: str, severity: Severity) -> None:
        ...


class Confirmer(Protocol):
    """Yes/no gate awaited before any destructive request."""

    async def confirm(self, message: str) -> bool:
        ...


class ConsoleNotifier:
    """Print transient toast lines to a rich console."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def notify(self, message: str, severity: Severity) -> None:
        style, label = SEVERITY_STYLES.get(severity, ("cyan", severity.upper()))
        self.console.print(f"[{style}][{label}][/{style}] {escape(message)}")
        logger.debug(f"toast ({severity}): {message}")

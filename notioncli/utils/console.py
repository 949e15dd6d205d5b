"""Console output helpers for plain, JSON and colored status messages."""

from __future__ import annotations

import json
from typing import Any

from rich.console import Console


class ConsoleOutput:
    """Route command output to stdout and errors to stderr.

    ``quiet`` silences everything except errors; ``json_output`` forces
    structured data to be printed as indented JSON.
    """

    def __init__(
        self,
        *,
        json_output: bool = False,
        quiet: bool = False,
        console: Console | None = None,
        error_console: Console | None = None,
    ) -> None:
        self.json_output = json_output
        self.quiet = quiet
        self.console = console or Console()
        self.error_console = error_console or Console(stderr=True)

    def output(self, data: Any) -> None:
        if self.quiet:
            return
        if isinstance(data, str) and not self.json_output:
            self._print(self.console, data)
            return
        self._print(self.console, json.dumps(data, indent=2, ensure_ascii=False))

    def success(self, message: str) -> None:
        if self.quiet:
            return
        self._print(self.console, f"✓ {message}", style="green")

    def info(self, message: str) -> None:
        if self.quiet:
            return
        self._print(self.console, f"ℹ {message}", style="blue")

    def warning(self, message: str) -> None:
        if self.quiet:
            return
        self._print(self.error_console, f"⚠ {message}", style="yellow")

    def error(self, message: str) -> None:
        self._print(self.error_console, f"Error: {message}", style="red")

    @staticmethod
    def _print(console: Console, text: str, style: str | None = None) -> None:
        console.print(
            text,
            style=style,
            markup=False,
            emoji=False,
            highlight=False,
            soft_wrap=True,
        )


__all__ = ["ConsoleOutput"]

"""Console output abstraction.

Services print through ``ConsoleProtocol`` so the pipeline can be driven
against a real terminal (``RichConsole``) or captured in tests
(``MockConsole``). Messages are plain text; styling is chosen by the
console implementation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Protocol

__all__ = [
    "ConsoleProtocol",
    "MockConsole",
    "OutputRecord",
    "RichConsole",
    "Style",
]


class Style(Enum):
    """Text styles for console output."""

    DEFAULT = auto()
    SUCCESS = auto()
    ERROR = auto()
    WARNING = auto()
    INFO = auto()
    DIM = auto()
    BOLD = auto()
    HEADER = auto()
    HIGHLIGHT = auto()  # Yellow, for copy-pastable commands and labels
    BANNER_OK = auto()  # Black on green
    BANNER_FAIL = auto()  # Black on red

    def __str__(self) -> str:
        return self.name.lower()


class ConsoleProtocol(Protocol):
    """Interface for styled console output."""

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        """Print a full line."""
        ...

    def write(self, message: str, style: Style = Style.DEFAULT) -> None:
        """Print without a trailing newline (progress lines finished later)."""
        ...

    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def info(self, message: str) -> None: ...

    def header(self, message: str) -> None: ...

    def banner(self, message: str, *, ok: bool) -> None:
        """Print a short, high-contrast status banner (``Release Complete``)."""
        ...

    def newline(self) -> None: ...


class RichConsole:
    """Production console backed by Rich."""

    def __init__(self) -> None:
        from rich.console import Console

        self._console = Console(highlight=False, soft_wrap=True)
        self._style_map = {
            Style.DEFAULT: "",
            Style.SUCCESS: "green",
            Style.ERROR: "red bold",
            Style.WARNING: "yellow",
            Style.INFO: "cyan",
            Style.DIM: "dim",
            Style.BOLD: "bold",
            Style.HEADER: "blue bold",
            Style.HIGHLIGHT: "yellow",
            Style.BANNER_OK: "black on green",
            Style.BANNER_FAIL: "black on red",
        }

    def _emit(self, message: str, style: Style, *, end: str) -> None:
        from rich.markup import escape

        rich_style = self._style_map.get(style, "")
        if rich_style:
            self._console.print(escape(message), style=rich_style, end=end)
        else:
            self._console.print(escape(message), end=end)

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self._emit(message, style, end="\n")

    def write(self, message: str, style: Style = Style.DEFAULT) -> None:
        self._emit(message, style, end="")

    def success(self, message: str) -> None:
        from rich.markup import escape

        self._console.print(f"[green]OK[/green] {escape(message)}")

    def error(self, message: str) -> None:
        from rich.markup import escape

        self._console.print(f"[red bold]error:[/red bold] {escape(message)}")

    def warning(self, message: str) -> None:
        from rich.markup import escape

        self._console.print(f"[yellow]warning:[/yellow] {escape(message)}")

    def info(self, message: str) -> None:
        from rich.markup import escape

        self._console.print(f"[cyan]info:[/cyan] {escape(message)}")

    def header(self, message: str) -> None:
        self._console.print()
        self._emit(message, Style.HEADER, end="\n")

    def banner(self, message: str, *, ok: bool) -> None:
        self._emit(f" {message} ", Style.BANNER_OK if ok else Style.BANNER_FAIL, end="\n")

    def newline(self) -> None:
        self._console.print()


@dataclass
class OutputRecord:
    """A single output line captured by MockConsole."""

    message: str
    style: Style


def _empty_outputs() -> list[OutputRecord]:
    return []


@dataclass
class MockConsole:
    """Console that captures output for tests.

    ``write`` fragments are joined with the next full line, so a progress
    line such as ``Checking ... `` + ``✅`` is recorded as one message.
    """

    outputs: list[OutputRecord] = field(default_factory=_empty_outputs)
    pending: str = ""

    def _record(self, message: str, style: Style) -> None:
        self.outputs.append(OutputRecord(self.pending + message, style))
        self.pending = ""

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self._record(message, style)

    def write(self, message: str, style: Style = Style.DEFAULT) -> None:
        self.pending += message

    def success(self, message: str) -> None:
        self._record(f"OK {message}", Style.SUCCESS)

    def error(self, message: str) -> None:
        self._record(f"error: {message}", Style.ERROR)

    def warning(self, message: str) -> None:
        self._record(f"warning: {message}", Style.WARNING)

    def info(self, message: str) -> None:
        self._record(f"info: {message}", Style.INFO)

    def header(self, message: str) -> None:
        self._record(message, Style.HEADER)

    def banner(self, message: str, *, ok: bool) -> None:
        self._record(message, Style.BANNER_OK if ok else Style.BANNER_FAIL)

    def newline(self) -> None:
        self._record("", Style.DEFAULT)

    # Test helpers

    def clear(self) -> None:
        self.outputs.clear()
        self.pending = ""

    @property
    def messages(self) -> list[str]:
        return [o.message for o in self.outputs]

    @property
    def text(self) -> str:
        """All output as one newline-separated string."""
        return "\n".join(self.messages + ([self.pending] if self.pending else []))

    def has_error(self) -> bool:
        return any(o.style in (Style.ERROR, Style.BANNER_FAIL) for o in self.outputs)

    def find(self, substring: str) -> list[OutputRecord]:
        return [o for o in self.outputs if substring in o.message]

    def banners(self) -> list[tuple[str, bool]]:
        """Return printed banners as (message, ok) pairs."""
        return [
            (o.message, o.style == Style.BANNER_OK)
            for o in self.outputs
            if o.style in (Style.BANNER_OK, Style.BANNER_FAIL)
        ]

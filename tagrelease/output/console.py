"""Console output abstraction.

Services report progress through ``ConsoleProtocol`` and never print
directly. Three backends exist:

- ``RichConsole`` for terminals,
- ``ActionsConsole`` for GitHub Actions runners, where warnings and errors
  become workflow commands (``::warning::``) and show up as annotations,
- ``MockConsole`` for tests.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Protocol

__all__ = [
    "ActionsConsole",
    "ConsoleProtocol",
    "MockConsole",
    "OutputRecord",
    "RichConsole",
    "Style",
    "escape_command_data",
    "select_console",
]


class Style(Enum):
    """Text styles for console output."""

    DEFAULT = auto()
    SUCCESS = auto()
    ERROR = auto()
    WARNING = auto()
    INFO = auto()
    DIM = auto()
    HEADER = auto()

    def __str__(self) -> str:
        return self.name.lower()


class ConsoleProtocol(Protocol):
    """Protocol for console output."""

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        """Print a message with optional styling."""
        ...

    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def info(self, message: str) -> None: ...

    def header(self, message: str) -> None:
        """Print a section header."""
        ...


class RichConsole:
    """Console implementation using Rich."""

    def __init__(self) -> None:
        from rich.console import Console

        self._console = Console()
        self._style_map = {
            Style.DEFAULT: "",
            Style.SUCCESS: "green",
            Style.ERROR: "red bold",
            Style.WARNING: "yellow",
            Style.INFO: "cyan",
            Style.DIM: "dim",
            Style.HEADER: "blue bold",
        }

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        rich_style = self._style_map.get(style, "")
        if rich_style:
            self._console.print(message, style=rich_style, markup=False)
        else:
            self._console.print(message, markup=False)

    def success(self, message: str) -> None:
        self._console.print(f"[green]OK[/green] {_escape_markup(message)}")

    def error(self, message: str) -> None:
        self._console.print(f"[red bold]error:[/red bold] {_escape_markup(message)}")

    def warning(self, message: str) -> None:
        self._console.print(f"[yellow]warning:[/yellow] {_escape_markup(message)}")

    def info(self, message: str) -> None:
        self._console.print(f"[cyan]info:[/cyan] {_escape_markup(message)}")

    def header(self, message: str) -> None:
        self._console.print(f"\n[blue bold]{_escape_markup(message)}[/blue bold]")


def _escape_markup(message: str) -> str:
    from rich.markup import escape

    return escape(message)


def escape_command_data(message: str) -> str:
    """Escape a workflow command payload (``%``, CR and LF are reserved)."""
    return message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


class ActionsConsole:
    """Console for GitHub Actions runners.

    Info lines are written as-is; warnings and errors use workflow commands
    so the runner turns them into annotations.
    """

    def __init__(self) -> None:
        from rich.console import Console

        # Workflow commands must reach the log verbatim.
        self._console = Console(highlight=False, markup=False, emoji=False, soft_wrap=True)
        self._in_group = False

    def _line(self, text: str) -> None:
        self._console.print(text)

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        match style:
            case Style.ERROR:
                self.error(message)
            case Style.WARNING:
                self.warning(message)
            case Style.HEADER:
                self.header(message)
            case _:
                self._line(message)

    def success(self, message: str) -> None:
        self._line(message)

    def error(self, message: str) -> None:
        self._line(f"::error::{escape_command_data(message)}")

    def warning(self, message: str) -> None:
        self._line(f"::warning::{escape_command_data(message)}")

    def info(self, message: str) -> None:
        self._line(message)

    def header(self, message: str) -> None:
        if self._in_group:
            self._line("::endgroup::")
        self._line(f"::group::{escape_command_data(message)}")
        self._in_group = True

    def close(self) -> None:
        """Close the currently open log group, if any."""
        if self._in_group:
            self._line("::endgroup::")
            self._in_group = False


def select_console(env: Mapping[str, str]) -> RichConsole | ActionsConsole:
    """Pick the Actions backend on runners, Rich everywhere else."""
    if env.get("GITHUB_ACTIONS", "").strip().lower() == "true":
        return ActionsConsole()
    return RichConsole()


@dataclass
class OutputRecord:
    """A single output record for MockConsole."""

    message: str
    style: Style


def _empty_outputs() -> list[OutputRecord]:
    return []


@dataclass
class MockConsole:
    """Console implementation that captures output for testing."""

    outputs: list[OutputRecord] = field(default_factory=_empty_outputs)

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self.outputs.append(OutputRecord(message, style))

    def success(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"OK {message}", Style.SUCCESS))

    def error(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"error: {message}", Style.ERROR))

    def warning(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"warning: {message}", Style.WARNING))

    def info(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"info: {message}", Style.INFO))

    def header(self, message: str) -> None:
        self.outputs.append(OutputRecord(message, Style.HEADER))

    # Test helpers

    @property
    def messages(self) -> list[str]:
        return [o.message for o in self.outputs]

    @property
    def text(self) -> str:
        return "\n".join(self.messages)

    def has_error(self) -> bool:
        return any(o.style == Style.ERROR for o in self.outputs)

    def has_warning(self) -> bool:
        return any(o.style == Style.WARNING for o in self.outputs)

    def find(self, substring: str) -> list[OutputRecord]:
        """Find all outputs containing a substring."""
        return [o for o in self.outputs if substring in o.message]

    def count(self, style: Style) -> int:
        return sum(1 for o in self.outputs if o.style == style)

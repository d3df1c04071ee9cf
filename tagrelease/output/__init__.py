"""Output abstraction layer."""

from .console import (
    ActionsConsole,
    ConsoleProtocol,
    MockConsole,
    RichConsole,
    Style,
    select_console,
)

__all__ = [
    "ActionsConsole",
    "ConsoleProtocol",
    "MockConsole",
    "RichConsole",
    "Style",
    "select_console",
]

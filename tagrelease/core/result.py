"""Result type for explicit error handling.

Every step of a release run returns either ``Ok(value)`` or ``Err(error)``
instead of raising, so the orchestrator can decide which failures are fatal
and which are only worth a warning.

Usage:
    match load_template(path):
        case Ok(text):
            body = render_body(text, variables)
        case Err(error):
            console.error(error.message)
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Ok[T]:
    """Successful result.

    Attributes:
        value: The success value.
    """

    value: T

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err[E]:
    """Failed result.

    Attributes:
        error: The error value.
    """

    error: E

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


type Result[T, E] = Ok[T] | Err[E]

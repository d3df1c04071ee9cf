"""Release body rendering.

Templates are plain mustache (variables, sections, inverted sections); there
are no custom helpers and no partials. Undefined variables and JSON ``null``
render as empty strings. Booleans and numbers render the way JSON writes them
(``true``, ``1``), not as Python reprs.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path

import chevron

from tagrelease.core.result import Err, Ok, Result
from tagrelease.core.structured import StrDict, as_str_dict
from tagrelease.release.errors import ReleaseError


def load_template(path: Path) -> Result[str, ReleaseError]:
    try:
        return Ok(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as e:
        return Err(
            ReleaseError(
                kind="template_unreadable",
                message=str(e),
                hint=str(path),
            )
        )


def parse_variables(raw: str) -> Result[StrDict, ReleaseError]:
    """Parse the ``variables`` input: a JSON object, empty meaning ``{}``."""
    if not raw.strip():
        return Ok({})
    try:
        obj: object = json.loads(raw)
    except json.JSONDecodeError as e:
        return Err(ReleaseError(kind="invalid_variables", message=f"invalid variables JSON: {e}"))

    data = as_str_dict(obj)
    if data is None:
        return Err(
            ReleaseError(
                kind="invalid_variables",
                message="variables must be a JSON object",
                hint=raw[:80],
            )
        )
    return Ok(data)


def build_context(
    variables: Mapping[str, object],
    environment: Mapping[str, str] | None = None,
) -> StrDict:
    """Merge environment variables under the explicit ones."""
    context: StrDict = dict(environment or {})
    context.update(variables)
    return context


class _JsonBool:
    """A boolean that keeps its truthiness in sections but prints as JSON."""

    __slots__ = ("value",)

    # chevron drops falsy values to "" unless this is set
    _CHEVRON_return_scope_when_falsy = True

    def __init__(self, value: bool) -> None:
        self.value = value

    def __bool__(self) -> bool:
        return self.value

    def __str__(self) -> str:
        return "true" if self.value else "false"


def _json_scalars(obj: object) -> object:
    if isinstance(obj, bool):
        return _JsonBool(obj)
    if isinstance(obj, float) and obj.is_integer():
        return int(obj)
    if isinstance(obj, dict):
        return {k: _json_scalars(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_json_scalars(v) for v in obj]
    return obj


def render_body(template: str, variables: Mapping[str, object]) -> str:
    # partials_path=None keeps {{> name}} from reading files off disk
    return chevron.render(
        template,
        _json_scalars(dict(variables)),
        partials_path=None,
        partials_dict={},
    )

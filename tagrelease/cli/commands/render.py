from __future__ import annotations

import os
from pathlib import Path

import typer

from tagrelease.core.errors import ErrorCode
from tagrelease.core.result import Err
from tagrelease.release.errors import release_error_code
from tagrelease.release.template import build_context, load_template, parse_variables, render_body


def render(
    template: Path = typer.Argument(..., help="Mustache template file"),
    variables: str = typer.Option("{}", "--variables", help="JSON object with template variables"),
    variables_from_env: bool = typer.Option(
        False, "--variables-from-env", help="Expose the process environment to the template"
    ),
) -> None:
    """Render a release body locally (no API calls)."""
    text = load_template(template)
    if isinstance(text, Err):
        typer.echo(f"error: {text.error.message}", err=True)
        raise typer.Exit(code=int(release_error_code(text.error.kind)))

    parsed = parse_variables(variables)
    if isinstance(parsed, Err):
        typer.echo(f"error: {parsed.error.message}", err=True)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    environment = dict(os.environ) if variables_from_env else None
    typer.echo(render_body(text.value, build_context(parsed.value, environment)), nl=False)

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

import typer

from tagrelease.core.config import RunConfig, load_run_config
from tagrelease.core.errors import ErrorCode
from tagrelease.core.result import Err
from tagrelease.git.repository import Repository
from tagrelease.github.http import HttpClient, RealHttpClient
from tagrelease.output.console import ConsoleProtocol, select_console


@dataclass(frozen=True, slots=True)
class CLIContext:
    config: RunConfig
    console: ConsoleProtocol
    http: HttpClient
    repo: Repository


def build_context(
    overrides: Mapping[str, object | None],
    env: Mapping[str, str] | None = None,
) -> CLIContext:
    environ: Mapping[str, str] = os.environ if env is None else env
    console = select_console(environ)

    config_result = load_run_config(environ, overrides)
    if isinstance(config_result, Err):
        console.error(config_result.error.message)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    config = config_result.value
    return CLIContext(
        config=config,
        console=console,
        http=RealHttpClient(config.token),
        repo=Repository(config.workspace),
    )

"""Step outputs for downstream workflow steps.

On a runner, outputs are appended to the file named by ``GITHUB_OUTPUT``;
multi-line values use a heredoc with a delimiter that cannot occur in the
value. Without an output file they are printed as ``key=value`` lines.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from pathlib import Path

from tagrelease.core.result import Err, Ok, Result
from tagrelease.output.console import ConsoleProtocol
from tagrelease.release.errors import ReleaseError
from tagrelease.release.model import ReleaseResult


def release_outputs(release: ReleaseResult) -> dict[str, str]:
    return {"id": str(release.id), "url": release.html_url}


def _delimiter(value: str) -> str:
    delimiter = f"ghadelimiter_{uuid.uuid4().hex}"
    while delimiter in value:
        delimiter = f"ghadelimiter_{uuid.uuid4().hex}"
    return delimiter


def format_output(key: str, value: str) -> str:
    if "\n" not in value and "\r" not in value:
        return f"{key}={value}\n"
    delimiter = _delimiter(value)
    return f"{key}<<{delimiter}\n{value}\n{delimiter}\n"


def write_outputs(
    outputs: Mapping[str, str],
    *,
    output_file: Path | None,
    console: ConsoleProtocol,
) -> Result[None, ReleaseError]:
    if output_file is None:
        for key, value in outputs.items():
            console.print(f"{key}={value}")
        return Ok(None)

    try:
        with output_file.open("a", encoding="utf-8") as out:
            for key, value in outputs.items():
                out.write(format_output(key, value))
    except OSError as e:
        return Err(
            ReleaseError(
                kind="outputs_failed",
                message=f"failed to write step outputs: {e}",
                hint=str(output_file),
            )
        )
    return Ok(None)

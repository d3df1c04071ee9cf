from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from tagrelease.core.errors import ErrorCode

ReleaseErrorKind = Literal[
    "tag_query_failed",
    "template_unreadable",
    "invalid_variables",
    "release_failed",
    "artifacts_failed",
    "outputs_failed",
]


@dataclass(frozen=True, slots=True)
class ReleaseError:
    kind: ReleaseErrorKind
    message: str
    hint: str | None = None


def release_error_code(kind: ReleaseErrorKind) -> ErrorCode:
    if kind == "tag_query_failed":
        return ErrorCode.ENV_ERROR
    if kind in {"template_unreadable", "outputs_failed"}:
        return ErrorCode.IO_ERROR
    if kind in {"release_failed", "artifacts_failed"}:
        return ErrorCode.NETWORK_ERROR
    return ErrorCode.USER_ERROR

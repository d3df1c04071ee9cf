from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal


@dataclass(frozen=True, slots=True)
class ReleaseRequest:
    """What the create-release call sends. Built once per run."""

    tag: str
    title: str
    body: str
    draft: bool
    prerelease: bool
    target_commit: str

    def as_payload(self) -> dict[str, object]:
        return {
            "tag_name": self.tag,
            "name": self.title,
            "body": self.body,
            "draft": self.draft,
            "prerelease": self.prerelease,
            "target_commitish": self.target_commit,
        }


@dataclass(frozen=True, slots=True)
class ReleaseResult:
    id: int
    html_url: str
    # RFC 6570 template, e.g. ".../assets{?name,label}"
    upload_url: str
    name: str | None = None


@dataclass(frozen=True, slots=True)
class ArtifactDescriptor:
    """An artifact staged by an earlier pipeline step, materialized locally."""

    name: str
    local_path: Path


@dataclass(frozen=True, slots=True)
class RunArtifact:
    """An artifact as listed by the Actions API (not yet downloaded)."""

    id: int
    name: str
    size_bytes: int
    expired: bool
    archive_download_url: str


@dataclass(frozen=True, slots=True)
class AssetCandidate:
    artifact_name: str
    file_name: str
    file_path: Path
    size_bytes: int
    mime_type: str


@dataclass(frozen=True, slots=True)
class AssetUpload:
    """Outcome of one best-effort upload."""

    candidate: AssetCandidate
    ok: bool
    error: str | None = None
    download_url: str | None = None


@dataclass(frozen=True, slots=True)
class Tagged:
    tag: str


@dataclass(frozen=True, slots=True)
class Untagged:
    reason: str


TagResolution = Tagged | Untagged

RunStatus = Literal["released", "untagged", "dry_run"]


@dataclass(frozen=True, slots=True)
class RunOutcome:
    status: RunStatus
    tag: str | None = None
    release: ReleaseResult | None = None
    uploads: tuple[AssetUpload, ...] = ()

    @property
    def uploaded(self) -> tuple[AssetUpload, ...]:
        return tuple(u for u in self.uploads if u.ok)

    @property
    def failed(self) -> tuple[AssetUpload, ...]:
        return tuple(u for u in self.uploads if not u.ok)

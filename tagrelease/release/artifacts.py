"""Artifact collection.

Artifacts staged by earlier pipeline steps are materialized as one local
directory per artifact. Nothing is filtered here; asset selection happens in
``tagrelease.release.assets``.

Two sources:
- ``LocalArtifactStore``: a directory already populated by
  ``actions/download-artifact`` (one subdirectory per artifact).
- ``RunArtifactStore``: lists the run's artifacts through the Actions API,
  downloads each zip and extracts it.
"""

from __future__ import annotations

import shutil
import stat
import zipfile
from pathlib import Path, PurePosixPath
from typing import Protocol

from tagrelease.core.result import Err, Ok, Result
from tagrelease.github.http import HttpClient
from tagrelease.output.console import ConsoleProtocol
from tagrelease.release.errors import ReleaseError
from tagrelease.release.gh import list_run_artifacts
from tagrelease.release.model import ArtifactDescriptor


class ArtifactStore(Protocol):
    def collect(self, console: ConsoleProtocol) -> Result[list[ArtifactDescriptor], ReleaseError]:
        """Materialize every staged artifact locally."""
        ...


class LocalArtifactStore:
    """Artifacts already on disk: each subdirectory of ``root`` is one artifact."""

    def __init__(self, root: Path) -> None:
        self.root = root

    def collect(self, console: ConsoleProtocol) -> Result[list[ArtifactDescriptor], ReleaseError]:
        if not self.root.exists():
            console.info(f"No artifacts staged at {self.root}")
            return Ok([])
        if not self.root.is_dir():
            return Err(
                ReleaseError(
                    kind="artifacts_failed",
                    message=f"artifacts path is not a directory: {self.root}",
                )
            )

        try:
            entries = sorted(self.root.iterdir(), key=lambda p: p.name)
        except OSError as e:
            return Err(ReleaseError(kind="artifacts_failed", message=f"cannot list artifacts: {e}"))

        return Ok([ArtifactDescriptor(name=p.name, local_path=p) for p in entries if p.is_dir()])


class RunArtifactStore:
    """Artifacts of a workflow run, downloaded through the Actions API."""

    def __init__(
        self,
        http: HttpClient,
        *,
        api_url: str,
        repository: str,
        run_id: str,
        download_dir: Path,
    ) -> None:
        self._http = http
        self._api_url = api_url
        self._repository = repository
        self._run_id = run_id
        self.download_dir = download_dir

    def collect(self, console: ConsoleProtocol) -> Result[list[ArtifactDescriptor], ReleaseError]:
        listed = list_run_artifacts(
            self._http,
            api_url=self._api_url,
            repository=self._repository,
            run_id=self._run_id,
        )
        if isinstance(listed, Err):
            return Err(
                ReleaseError(
                    kind="artifacts_failed",
                    message=f"failed to list artifacts for run {self._run_id}: {listed.error}",
                )
            )

        out: list[ArtifactDescriptor] = []
        archives = self.download_dir / ".archives"
        for artifact in listed.value:
            if artifact.expired:
                console.warning(f"Artifact {artifact.name} has expired; skipping")
                continue

            archive = archives / f"{artifact.id}.zip"
            downloaded = self._http.download(artifact.archive_download_url, archive)
            if isinstance(downloaded, Err):
                return Err(
                    ReleaseError(
                        kind="artifacts_failed",
                        message=f"failed to download artifact {artifact.name}: {downloaded.error}",
                    )
                )

            target = self.download_dir / artifact.name
            extracted = extract_zip(archive, target)
            if isinstance(extracted, Err):
                return extracted

            console.info(f"Downloaded {artifact.name} ({extracted.value} files)")
            out.append(ArtifactDescriptor(name=artifact.name, local_path=target))

        shutil.rmtree(archives, ignore_errors=True)
        return Ok(out)


def _safe_relative_path(member_name: str) -> Path | None:
    """Return a sanitized relative extraction path, or None if unsafe."""
    normalized = member_name.replace("\\", "/")
    if normalized.startswith("/"):
        return None

    parts = PurePosixPath(normalized).parts
    if not parts:
        return None
    if any(part in {"", ".", ".."} for part in parts):
        return None
    if parts[0].endswith(":"):
        return None

    return Path(*parts)


def _is_within_root(root: Path, target: Path) -> bool:
    try:
        return target.resolve().is_relative_to(root.resolve())
    except OSError:
        return False


def extract_zip(archive: Path, dest: Path) -> Result[int, ReleaseError]:
    """Extract an artifact zip into ``dest`` (recreated) and count the files.

    Entries escaping ``dest`` and symlinks are skipped.
    """
    try:
        if dest.exists():
            shutil.rmtree(dest)
        dest.mkdir(parents=True, exist_ok=True)
        root = dest.resolve()

        count = 0
        with zipfile.ZipFile(archive, "r") as zf:
            for info in zf.infolist():
                if info.is_dir():
                    continue

                rel_path = _safe_relative_path(info.filename)
                if rel_path is None:
                    continue

                file_type_bits = (info.external_attr >> 16) & 0o170000
                if file_type_bits == stat.S_IFLNK:
                    continue

                full_path = dest / rel_path
                if not _is_within_root(root, full_path):
                    continue

                full_path.parent.mkdir(parents=True, exist_ok=True)
                with zf.open(info) as src, open(full_path, "wb") as dst:
                    shutil.copyfileobj(src, dst)
                count += 1

        return Ok(count)

    except zipfile.BadZipFile as e:
        return Err(
            ReleaseError(
                kind="artifacts_failed",
                message=f"invalid artifact zip: {e}",
                hint=str(archive),
            )
        )
    except OSError as e:
        return Err(
            ReleaseError(kind="artifacts_failed", message=f"IO error: {e}", hint=str(archive))
        )

"""Asset selection and best-effort upload.

Selection is a pure function of the artifact name and file name under one of
two conventions (``AssetPolicyKind``):

- prefix: every file of an artifact named ``release_*`` is an asset,
- extensions: any file ending in an installer/package extension is an asset.

Uploads never fail the run. Each failure becomes a warning and an
``AssetUpload(ok=False)`` entry; the remaining files are still attempted.
"""

from __future__ import annotations

import mimetypes
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor

from tagrelease.core.config import AssetPolicy, AssetPolicyKind
from tagrelease.core.result import Err
from tagrelease.github.http import HttpClient
from tagrelease.output.console import ConsoleProtocol, Style
from tagrelease.release.gh import upload_release_asset
from tagrelease.release.model import (
    ArtifactDescriptor,
    AssetCandidate,
    AssetUpload,
    ReleaseResult,
)

DEFAULT_MIME_TYPE = "application/octet-stream"


def guess_mime_type(file_name: str) -> str:
    mime, _ = mimetypes.guess_type(file_name, strict=False)
    return mime or DEFAULT_MIME_TYPE


def is_selected(policy: AssetPolicy, *, artifact_name: str, file_name: str) -> bool:
    match policy.kind:
        case AssetPolicyKind.PREFIX:
            return artifact_name.startswith(policy.prefix)
        case AssetPolicyKind.EXTENSIONS:
            return file_name.endswith(policy.extensions)


def expand_candidates(artifact: ArtifactDescriptor) -> list[AssetCandidate]:
    """List the regular files of an artifact (a directory or a single file)."""
    root = artifact.local_path
    if root.is_file():
        files = [root]
    elif root.is_dir():
        files = sorted(p for p in root.rglob("*") if p.is_file() and not p.is_symlink())
    else:
        files = []

    return [
        AssetCandidate(
            artifact_name=artifact.name,
            file_name=path.name,
            file_path=path,
            size_bytes=path.stat().st_size,
            mime_type=guess_mime_type(path.name),
        )
        for path in files
    ]


def select_candidates(
    artifacts: Iterable[ArtifactDescriptor],
    *,
    policy: AssetPolicy,
    console: ConsoleProtocol,
) -> list[AssetCandidate]:
    selected: list[AssetCandidate] = []
    for artifact in artifacts:
        candidates = expand_candidates(artifact)
        kept = [
            c
            for c in candidates
            if is_selected(policy, artifact_name=c.artifact_name, file_name=c.file_name)
        ]
        if not kept:
            console.print(f"Skipping artifact {artifact.name}: no matching files", Style.DIM)
            continue
        for c in candidates:
            if c not in kept:
                console.print(f"Skipping {artifact.name}/{c.file_name}", Style.DIM)
        selected.extend(kept)
    return selected


def _upload_one(
    http: HttpClient,
    release: ReleaseResult,
    candidate: AssetCandidate,
    console: ConsoleProtocol,
) -> AssetUpload:
    console.info(f"Uploading {candidate.file_name} ({describe_size(candidate.size_bytes)}).")
    try:
        data = candidate.file_path.read_bytes()
        result = upload_release_asset(
            http,
            release=release,
            file_name=candidate.file_name,
            data=data,
            content_type=candidate.mime_type,
        )
    # One bad asset must not take its siblings down with it.
    except Exception as e:
        error = str(e) or type(e).__name__
        console.warning(f"Failed to upload {candidate.file_name}: {error}")
        return AssetUpload(candidate=candidate, ok=False, error=error)

    if isinstance(result, Err):
        error = str(result.error)
        console.warning(f"Failed to upload {candidate.file_name}: {error}")
        return AssetUpload(candidate=candidate, ok=False, error=error)

    return AssetUpload(candidate=candidate, ok=True, download_url=result.value)


def upload_assets(
    http: HttpClient,
    *,
    release: ReleaseResult,
    candidates: list[AssetCandidate],
    console: ConsoleProtocol,
    workers: int = 1,
) -> tuple[AssetUpload, ...]:
    """Upload every candidate; results are returned in candidate order.

    With ``workers > 1`` uploads run on a thread pool that is fully joined
    before this function returns.
    """
    if workers <= 1 or len(candidates) <= 1:
        return tuple(_upload_one(http, release, c, console) for c in candidates)

    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="upload") as pool:
        futures = [pool.submit(_upload_one, http, release, c, console) for c in candidates]
        return tuple(f.result() for f in futures)


def describe_size(size_bytes: int) -> str:
    size = float(size_bytes)
    for unit in ("B", "KiB", "MiB", "GiB"):
        if size < 1024 or unit == "GiB":
            return f"{size:.0f} {unit}" if unit == "B" else f"{size:.1f} {unit}"
        size /= 1024
    return f"{size_bytes} B"

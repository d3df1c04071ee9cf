"""Tagged-build release pipeline: tag, render, create, collect, upload."""

from tagrelease.release.errors import ReleaseError, release_error_code
from tagrelease.release.model import (
    ArtifactDescriptor,
    AssetCandidate,
    AssetUpload,
    ReleaseRequest,
    ReleaseResult,
    RunOutcome,
)
from tagrelease.release.service import run_release

__all__ = [
    "ArtifactDescriptor",
    "AssetCandidate",
    "AssetUpload",
    "ReleaseError",
    "ReleaseRequest",
    "ReleaseResult",
    "RunOutcome",
    "release_error_code",
    "run_release",
]

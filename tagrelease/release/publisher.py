from __future__ import annotations

from tagrelease.core.result import Err, Ok, Result
from tagrelease.github.http import HttpClient
from tagrelease.output.console import ConsoleProtocol
from tagrelease.release.errors import ReleaseError
from tagrelease.release.gh import create_release
from tagrelease.release.model import ReleaseRequest, ReleaseResult


def publish_release(
    http: HttpClient,
    *,
    api_url: str,
    repository: str,
    request: ReleaseRequest,
    console: ConsoleProtocol,
) -> Result[ReleaseResult, ReleaseError]:
    """Create the release. Not idempotent: each call creates a new release."""
    created = create_release(http, api_url=api_url, repository=repository, request=request)
    if isinstance(created, Err):
        return Err(
            ReleaseError(
                kind="release_failed",
                message=f"failed to create release {request.tag}: {created.error.message}",
                hint=str(created.error),
            )
        )

    release = created.value
    console.info(f"Created release {release.name or request.title}")
    return Ok(release)

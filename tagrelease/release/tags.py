"""Release tag discovery for the current commit.

Two strategies:

- ``ref``: the pipeline already tells us, ``refs/tags/v1.2.0`` -> ``v1.2.0``.
- ``git``: ask git which tags point at the commit. Checkouts on CI runners
  are shallow and tagless, so tag refs are fetched first.

An untagged commit is not an error; callers stop early and report success.
"""

from __future__ import annotations

from tagrelease.core.config import TagStrategy
from tagrelease.core.result import Err, Ok, Result
from tagrelease.git.repository import Repository
from tagrelease.output.console import ConsoleProtocol
from tagrelease.release.errors import ReleaseError
from tagrelease.release.model import TagResolution, Tagged, Untagged

TAG_REF_PREFIX = "refs/tags/"


def tag_from_ref(ref: str | None) -> TagResolution:
    if ref is None or not ref.startswith(TAG_REF_PREFIX):
        return Untagged(reason=f"ref is not a tag: {ref or '<unset>'}")
    tag = ref[len(TAG_REF_PREFIX) :].strip()
    if not tag:
        return Untagged(reason=f"empty tag in ref: {ref}")
    return Tagged(tag=tag)


def tag_from_git(
    repo: Repository,
    *,
    sha: str,
    console: ConsoleProtocol,
) -> Result[TagResolution, ReleaseError]:
    fetched = repo.fetch_tags()
    if isinstance(fetched, Err):
        # Tags already present locally may still match.
        console.warning(f"git fetch of tags failed: {fetched.error.message}")

    tags = repo.tags_at(sha)
    if isinstance(tags, Err):
        return Err(
            ReleaseError(
                kind="tag_query_failed",
                message=f"Getting tag failed: {tags.error.message}",
            )
        )

    if not tags.value:
        return Ok(Untagged(reason=f"no tag points at {sha[:8]}"))

    if len(tags.value) > 1:
        console.warning(f"multiple tags point at {sha[:8]}: {', '.join(tags.value)}")
    return Ok(Tagged(tag=tags.value[0]))


def resolve_tag(
    *,
    strategy: TagStrategy,
    repo: Repository,
    sha: str,
    ref: str | None,
    console: ConsoleProtocol,
) -> Result[TagResolution, ReleaseError]:
    match strategy:
        case TagStrategy.REF:
            return Ok(tag_from_ref(ref))
        case TagStrategy.GIT:
            return tag_from_git(repo, sha=sha, console=console)

"""Tests for release tag discovery."""

from __future__ import annotations

from pathlib import Path

from tagrelease.core.config import TagStrategy
from tagrelease.core.result import Err, Ok, Result
from tagrelease.git.repository import GitError, Repository
from tagrelease.output.console import MockConsole
from tagrelease.release.model import Tagged, Untagged
from tagrelease.release.tags import resolve_tag, tag_from_git, tag_from_ref

SHA = "0123456789abcdef0123456789abcdef01234567"


class FakeRepository(Repository):
    def __init__(
        self,
        *,
        tags: Result[list[str], GitError] = Ok([]),
        fetch: Result[str, GitError] = Ok(""),
    ) -> None:
        super().__init__(Path("."))
        self._tags = tags
        self._fetch = fetch
        self.fetched = False
        self.queried: list[str] = []

    def fetch_tags(self) -> Result[str, GitError]:
        self.fetched = True
        return self._fetch

    def tags_at(self, sha: str) -> Result[list[str], GitError]:
        self.queried.append(sha)
        return self._tags


class TestTagFromRef:
    def test_tag_ref(self) -> None:
        assert tag_from_ref("refs/tags/v1.2.0") == Tagged(tag="v1.2.0")

    def test_branch_ref(self) -> None:
        result = tag_from_ref("refs/heads/main")
        assert isinstance(result, Untagged)
        assert "refs/heads/main" in result.reason

    def test_missing_ref(self) -> None:
        assert isinstance(tag_from_ref(None), Untagged)

    def test_empty_tag(self) -> None:
        assert isinstance(tag_from_ref("refs/tags/"), Untagged)


class TestTagFromGit:
    def test_tagged(self) -> None:
        repo = FakeRepository(tags=Ok(["v1.2.0"]))
        console = MockConsole()

        result = tag_from_git(repo, sha=SHA, console=console)

        assert result == Ok(Tagged(tag="v1.2.0"))
        assert repo.fetched
        assert repo.queried == [SHA]
        assert not console.has_warning()

    def test_untagged(self) -> None:
        result = tag_from_git(FakeRepository(), sha=SHA, console=MockConsole())

        assert isinstance(result, Ok)
        assert isinstance(result.value, Untagged)
        assert "01234567" in result.value.reason

    def test_multiple_tags_uses_first_and_warns(self) -> None:
        console = MockConsole()

        result = tag_from_git(
            FakeRepository(tags=Ok(["v1.2.0", "stable"])), sha=SHA, console=console
        )

        assert result == Ok(Tagged(tag="v1.2.0"))
        assert console.find("multiple tags")

    def test_fetch_failure_is_a_warning(self) -> None:
        console = MockConsole()
        repo = FakeRepository(
            tags=Ok(["v1.0.0"]),
            fetch=Err(GitError(command="fetch", message="no remote")),
        )

        result = tag_from_git(repo, sha=SHA, console=console)

        assert result == Ok(Tagged(tag="v1.0.0"))
        assert console.find("no remote")

    def test_query_failure(self) -> None:
        repo = FakeRepository(tags=Err(GitError(command="tag --points-at", message="bad sha")))

        result = tag_from_git(repo, sha=SHA, console=MockConsole())

        assert isinstance(result, Err)
        assert result.error.kind == "tag_query_failed"
        assert result.error.message == "Getting tag failed: bad sha"


class TestResolveTag:
    def test_ref_strategy_does_not_touch_git(self) -> None:
        repo = FakeRepository(tags=Ok(["ignored"]))

        result = resolve_tag(
            strategy=TagStrategy.REF,
            repo=repo,
            sha=SHA,
            ref="refs/tags/v2.0.0",
            console=MockConsole(),
        )

        assert result == Ok(Tagged(tag="v2.0.0"))
        assert not repo.fetched

    def test_git_strategy(self) -> None:
        result = resolve_tag(
            strategy=TagStrategy.GIT,
            repo=FakeRepository(tags=Ok(["v3"])),
            sha=SHA,
            ref=None,
            console=MockConsole(),
        )
        assert result == Ok(Tagged(tag="v3"))

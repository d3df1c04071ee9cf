"""Tests for artifact collection."""

from __future__ import annotations

import stat
import zipfile
from pathlib import Path

import pytest

from tagrelease.core.result import Err, Ok
from tagrelease.github.http import HttpError, MockHttpClient
from tagrelease.output.console import MockConsole
from tagrelease.release.artifacts import LocalArtifactStore, RunArtifactStore, extract_zip

API = "https://api.github.com"
LIST_URL = f"{API}/repos/octo/app/actions/runs/42/artifacts?per_page=100&page=1"


def _zip_bytes(tmp_path: Path, files: dict[str, bytes], name: str = "a.zip") -> bytes:
    path = tmp_path / name
    with zipfile.ZipFile(path, "w") as zf:
        for member, data in files.items():
            zf.writestr(member, data)
    return path.read_bytes()


def _zip_artifact(i: int, name: str, *, expired: bool = False) -> dict[str, object]:
    return {
        "id": i,
        "name": name,
        "size_in_bytes": 1,
        "expired": expired,
        "archive_download_url": f"{API}/repos/octo/app/actions/artifacts/{i}/zip",
    }


class TestLocalArtifactStore:
    def test_one_artifact_per_subdirectory(self, tmp_path: Path) -> None:
        (tmp_path / "release_win").mkdir()
        (tmp_path / "release_linux").mkdir()
        (tmp_path / "stray.txt").write_text("x")

        result = LocalArtifactStore(tmp_path).collect(MockConsole())

        assert isinstance(result, Ok)
        assert [a.name for a in result.value] == ["release_linux", "release_win"]
        assert result.value[0].local_path == tmp_path / "release_linux"

    def test_missing_root_means_nothing_staged(self, tmp_path: Path) -> None:
        console = MockConsole()

        result = LocalArtifactStore(tmp_path / "none").collect(console)

        assert result == Ok([])
        assert console.find("No artifacts staged")

    def test_root_is_a_file(self, tmp_path: Path) -> None:
        path = tmp_path / "file"
        path.write_text("x")

        result = LocalArtifactStore(path).collect(MockConsole())

        assert isinstance(result, Err)
        assert result.error.kind == "artifacts_failed"


class TestExtractZip:
    def test_extracts_nested_files(self, tmp_path: Path) -> None:
        archive = tmp_path / "a.zip"
        _zip_bytes(tmp_path, {"app.deb": b"deb", "docs/README": b"readme"})

        result = extract_zip(archive, tmp_path / "out")

        assert result == Ok(2)
        assert (tmp_path / "out" / "docs" / "README").read_bytes() == b"readme"

    def test_skips_traversal_entries(self, tmp_path: Path) -> None:
        archive = tmp_path / "a.zip"
        _zip_bytes(tmp_path, {"../evil.txt": b"x", "ok.txt": b"ok"})

        result = extract_zip(archive, tmp_path / "out")

        assert result == Ok(1)
        assert not (tmp_path / "evil.txt").exists()

    def test_skips_symlinks(self, tmp_path: Path) -> None:
        archive = tmp_path / "a.zip"
        with zipfile.ZipFile(archive, "w") as zf:
            link = zipfile.ZipInfo("link")
            link.external_attr = (stat.S_IFLNK | 0o777) << 16
            zf.writestr(link, "/etc/passwd")
            zf.writestr("real.txt", b"real")

        result = extract_zip(archive, tmp_path / "out")

        assert result == Ok(1)
        assert not (tmp_path / "out" / "link").exists()

    def test_replaces_previous_contents(self, tmp_path: Path) -> None:
        dest = tmp_path / "out"
        dest.mkdir()
        (dest / "old.txt").write_text("old")
        _zip_bytes(tmp_path, {"new.txt": b"new"})

        assert extract_zip(tmp_path / "a.zip", dest) == Ok(1)
        assert not (dest / "old.txt").exists()

    def test_bad_zip(self, tmp_path: Path) -> None:
        archive = tmp_path / "a.zip"
        archive.write_bytes(b"not a zip")

        result = extract_zip(archive, tmp_path / "out")

        assert isinstance(result, Err)
        assert result.error.kind == "artifacts_failed"
        assert result.error.hint == str(archive)


class TestRunArtifactStore:
    @pytest.fixture
    def http(self, tmp_path: Path) -> MockHttpClient:
        http = MockHttpClient()
        http.set_get(
            LIST_URL,
            {
                "total_count": 2,
                "artifacts": [
                    _zip_artifact(1, "release_linux"),
                    _zip_artifact(2, "old_build", expired=True),
                ],
            },
        )
        http.set_download(
            f"{API}/repos/octo/app/actions/artifacts/1/zip",
            _zip_bytes(tmp_path, {"app.deb": b"deb"}, name="src.zip"),
        )
        return http

    def _store(self, http: MockHttpClient, download_dir: Path) -> RunArtifactStore:
        return RunArtifactStore(
            http,
            api_url=API,
            repository="octo/app",
            run_id="42",
            download_dir=download_dir,
        )

    def test_downloads_and_extracts(self, http: MockHttpClient, tmp_path: Path) -> None:
        console = MockConsole()
        download_dir = tmp_path / "dl"

        result = self._store(http, download_dir).collect(console)

        assert isinstance(result, Ok)
        (artifact,) = result.value
        assert artifact.name == "release_linux"
        assert (artifact.local_path / "app.deb").read_bytes() == b"deb"
        assert console.find("Downloaded release_linux (1 files)")
        assert not (download_dir / ".archives").exists()

    def test_expired_artifacts_are_skipped(self, http: MockHttpClient, tmp_path: Path) -> None:
        console = MockConsole()

        self._store(http, tmp_path / "dl").collect(console)

        assert console.find("Artifact old_build has expired")
        assert len(http.calls_to("DOWNLOAD")) == 1

    def test_listing_failure(self, tmp_path: Path) -> None:
        http = MockHttpClient()
        error = HttpError(url=LIST_URL, status=403, message="Resource not accessible")
        http.set_get(LIST_URL, error)

        result = self._store(http, tmp_path).collect(MockConsole())

        assert isinstance(result, Err)
        assert result.error.kind == "artifacts_failed"
        assert "run 42" in result.error.message

    def test_download_failure(self, tmp_path: Path) -> None:
        http = MockHttpClient()
        http.set_get(LIST_URL, {"total_count": 1, "artifacts": [_zip_artifact(1, "release_x")]})

        result = self._store(http, tmp_path).collect(MockConsole())

        assert isinstance(result, Err)
        assert "release_x" in result.error.message

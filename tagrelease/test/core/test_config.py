"""Tests for core/config.py: input resolution and validation."""

from __future__ import annotations

from pathlib import Path

import pytest

from tagrelease.core.config import (
    DEFAULT_API_URL,
    DEFAULT_ASSET_EXTENSIONS,
    AssetPolicyKind,
    ConfigError,
    RunConfig,
    TagStrategy,
    load_run_config,
    parse_bool_input,
    parse_extensions,
)
from tagrelease.core.result import Err, Ok


Overrides = dict[str, object | None]


def _env(tmp_path: Path, **extra: str) -> dict[str, str]:
    env = {
        "INPUT_TEMPLATE": "release.md",
        "INPUT_TITLE": "App 1.2.0",
        "GITHUB_TOKEN": "ghs_token",
        "GITHUB_REPOSITORY": "octo/app",
        "GITHUB_WORKSPACE": str(tmp_path),
        "GITHUB_RUN_ID": "4242",
    }
    env.update(extra)
    return env


def _load_ok(env: dict[str, str], overrides: Overrides | None = None) -> RunConfig:
    result = load_run_config(env, overrides)
    assert isinstance(result, Ok), result
    return result.value


def _load_err(env: dict[str, str], overrides: Overrides | None = None) -> ConfigError:
    result = load_run_config(env, overrides)
    assert isinstance(result, Err), result
    return result.error


class TestParseBoolInput:
    @pytest.mark.parametrize("raw", ["true", " true ", "true\n"])
    def test_true(self, raw: str) -> None:
        assert parse_bool_input(raw) is True

    @pytest.mark.parametrize("raw", [None, "", "false", "True", "TRUE", "yes", "1"])
    def test_anything_else_is_false(self, raw: str | None) -> None:
        assert parse_bool_input(raw) is False


class TestParseExtensions:
    def test_adds_leading_dot(self) -> None:
        assert parse_extensions("deb, .rpm") == (".deb", ".rpm")

    def test_whitespace_and_commas(self) -> None:
        assert parse_extensions(" .exe  .msi,,pkg.tar.zst ") == (".exe", ".msi", ".pkg.tar.zst")

    def test_empty(self) -> None:
        assert parse_extensions("  ") == ()


class TestDefaults:
    def test_minimal_environment(self, tmp_path: Path) -> None:
        config = _load_ok(_env(tmp_path))

        assert config.repository == "octo/app"
        assert config.token == "ghs_token"
        assert config.template == tmp_path / "release.md"
        assert config.variables == "{}"
        assert config.draft is False
        assert config.prerelease is False
        assert config.tag_strategy is TagStrategy.GIT
        assert config.asset_policy.kind is AssetPolicyKind.PREFIX
        assert config.asset_policy.prefix == "release_"
        assert config.asset_policy.extensions == DEFAULT_ASSET_EXTENSIONS
        assert config.api_url == DEFAULT_API_URL
        assert config.upload_workers == 1
        assert config.output_file is None
        assert config.environment == {}
        assert config.dry_run is False

    def test_absolute_template_is_kept(self, tmp_path: Path) -> None:
        template = tmp_path / "elsewhere" / "body.md"
        config = _load_ok(_env(tmp_path, INPUT_TEMPLATE=str(template)))
        assert config.template == template

    def test_api_url_trailing_slash(self, tmp_path: Path) -> None:
        config = _load_ok(_env(tmp_path, GITHUB_API_URL="https://ghe.example.com/api/v3/"))
        assert config.api_url == "https://ghe.example.com/api/v3"

    def test_output_file(self, tmp_path: Path) -> None:
        out = tmp_path / "out.txt"
        config = _load_ok(_env(tmp_path, GITHUB_OUTPUT=str(out)))
        assert config.output_file == out


class TestRequiredInputs:
    @pytest.mark.parametrize("key", ["INPUT_TEMPLATE", "INPUT_TITLE"])
    def test_missing(self, tmp_path: Path, key: str) -> None:
        env = _env(tmp_path)
        del env[key]
        error = _load_err(env)
        assert "input required and not supplied" in error.message

    def test_blank_counts_as_missing(self, tmp_path: Path) -> None:
        error = _load_err(_env(tmp_path, INPUT_TITLE="   "))
        assert error.key == "title"

    def test_missing_token(self, tmp_path: Path) -> None:
        env = _env(tmp_path)
        del env["GITHUB_TOKEN"]
        assert _load_err(env).key == "token"

    def test_input_token_wins(self, tmp_path: Path) -> None:
        config = _load_ok(_env(tmp_path, INPUT_TOKEN="pat"))
        assert config.token == "pat"

    def test_invalid_repository(self, tmp_path: Path) -> None:
        error = _load_err(_env(tmp_path, GITHUB_REPOSITORY="not-a-slug"))
        assert error.key == "repository"

    def test_no_artifact_source(self, tmp_path: Path) -> None:
        env = _env(tmp_path)
        del env["GITHUB_RUN_ID"]
        assert _load_err(env).key == "artifacts_dir"

    def test_artifacts_dir_replaces_run_id(self, tmp_path: Path) -> None:
        env = _env(tmp_path, INPUT_ARTIFACTS_DIR="dist")
        del env["GITHUB_RUN_ID"]
        config = _load_ok(env)
        assert config.artifacts_dir == tmp_path / "dist"
        assert config.run_id is None


class TestFlags:
    def test_env_flags(self, tmp_path: Path) -> None:
        config = _load_ok(_env(tmp_path, INPUT_DRAFT="true", INPUT_PRERELEASE="True"))
        assert config.draft is True
        assert config.prerelease is False

    def test_override_beats_env(self, tmp_path: Path) -> None:
        config = _load_ok(_env(tmp_path, INPUT_DRAFT="true"), {"draft": False})
        assert config.draft is False

    def test_variables_from_env_captures_environment(self, tmp_path: Path) -> None:
        env = _env(tmp_path, INPUT_VARIABLES_FROM_ENV="true", VERSION="1.2.0")
        config = _load_ok(env)
        assert config.environment["VERSION"] == "1.2.0"


class TestOverrides:
    def test_cli_values_take_precedence(self, tmp_path: Path) -> None:
        config = _load_ok(
            _env(tmp_path),
            {
                "title": "Override",
                "repository": "acme/tool",
                "variables": '{"a": 1}',
                "tag_strategy": "ref",
                "upload_workers": 4,
                "dry_run": True,
            },
        )
        assert config.title == "Override"
        assert config.repository == "acme/tool"
        assert config.variables == '{"a": 1}'
        assert config.tag_strategy is TagStrategy.REF
        assert config.upload_workers == 4
        assert config.dry_run is True

    def test_none_means_unset(self, tmp_path: Path) -> None:
        config = _load_ok(_env(tmp_path), {"title": None})
        assert config.title == "App 1.2.0"


class TestAssetPolicy:
    def test_extensions_policy_from_env(self, tmp_path: Path) -> None:
        env = _env(tmp_path, INPUT_ASSET_POLICY="extensions", INPUT_ASSET_EXTENSIONS="deb rpm")
        policy = _load_ok(env).asset_policy
        assert policy.kind is AssetPolicyKind.EXTENSIONS
        assert policy.extensions == (".deb", ".rpm")

    def test_extension_override_list(self, tmp_path: Path) -> None:
        policy = _load_ok(
            _env(tmp_path),
            {"asset_policy": "extensions", "asset_extensions": ["zip", ".tar.gz"]},
        ).asset_policy
        assert policy.extensions == (".zip", ".tar.gz")

    def test_custom_prefix(self, tmp_path: Path) -> None:
        policy = _load_ok(_env(tmp_path, INPUT_ASSET_PREFIX="dist-")).asset_policy
        assert policy.prefix == "dist-"

    def test_unknown_policy(self, tmp_path: Path) -> None:
        error = _load_err(_env(tmp_path, INPUT_ASSET_POLICY="glob"))
        assert error.key == "asset_policy"
        assert "prefix|extensions" in error.message

    def test_unknown_strategy(self, tmp_path: Path) -> None:
        assert _load_err(_env(tmp_path, INPUT_TAG_STRATEGY="api")).key == "tag_strategy"


class TestUploadWorkers:
    @pytest.mark.parametrize("raw", ["0", "-1", "many"])
    def test_invalid(self, tmp_path: Path, raw: str) -> None:
        assert _load_err(_env(tmp_path, INPUT_UPLOAD_WORKERS=raw)).key == "upload_workers"

    def test_from_env(self, tmp_path: Path) -> None:
        assert _load_ok(_env(tmp_path, INPUT_UPLOAD_WORKERS="3")).upload_workers == 3

"""Typed run configuration.

A release run reads its inputs from two places: the GitHub Actions
environment (``INPUT_*`` variables plus the ``GITHUB_*`` context) and CLI
options, which take precedence. Both are folded into one frozen
``RunConfig`` at the CLI boundary; components only ever see that object.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from .result import Err, Ok, Result

__all__ = [
    "AssetPolicy",
    "AssetPolicyKind",
    "ConfigError",
    "DEFAULT_API_URL",
    "DEFAULT_ASSET_EXTENSIONS",
    "DEFAULT_ASSET_PREFIX",
    "RunConfig",
    "TagStrategy",
    "load_run_config",
    "parse_bool_input",
    "parse_extensions",
]

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_ASSET_PREFIX = "release_"
DEFAULT_ASSET_EXTENSIONS: tuple[str, ...] = (
    ".deb",
    ".rpm",
    ".exe",
    ".msi",
    ".pkg.tar.zst",
    ".apk",
    ".appx",
    ".AppImage",
    ".snap",
)

_REPO_SLUG_RE = re.compile(r"^[A-Za-z0-9_.-]+/[A-Za-z0-9_.-]+$")


class TagStrategy(Enum):
    """How the release tag for the current commit is discovered."""

    GIT = "git"  # git fetch -t, then git tag --points-at <sha>
    REF = "ref"  # strip refs/tags/ from the pipeline ref

    def __str__(self) -> str:
        return self.value


class AssetPolicyKind(Enum):
    """Which naming convention selects release assets."""

    PREFIX = "prefix"
    EXTENSIONS = "extensions"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class AssetPolicy:
    """Asset selection policy. Only one convention is active per deployment."""

    kind: AssetPolicyKind = AssetPolicyKind.PREFIX
    prefix: str = DEFAULT_ASSET_PREFIX
    extensions: tuple[str, ...] = DEFAULT_ASSET_EXTENSIONS


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when the run configuration is incomplete or invalid."""

    message: str
    key: str | None = None


@dataclass(frozen=True, slots=True)
class RunConfig:
    """Everything a release run needs, resolved once.

    Attributes:
        repository: Target repository as ``owner/name``.
        token: API token used for every remote call.
        template: Path to the mustache template for the release body.
        title: Release display name.
        variables: Raw JSON object with template variables.
        environment: Process environment exposed to the template when
            ``variables_from_env`` is enabled (empty otherwise).
        sha: Commit the release targets; resolved from git when missing.
        ref: Pipeline ref (``refs/tags/v1.0.0``), used by the ref strategy.
        run_id: Pipeline run whose artifacts are collected.
        artifacts_dir: Local staging directory; takes precedence over run_id.
        output_file: File receiving step outputs (``GITHUB_OUTPUT``).
    """

    repository: str
    token: str
    template: Path
    title: str
    workspace: Path
    variables: str = "{}"
    variables_from_env: bool = False
    environment: Mapping[str, str] = field(default_factory=dict)
    draft: bool = False
    prerelease: bool = False
    tag_strategy: TagStrategy = TagStrategy.GIT
    asset_policy: AssetPolicy = field(default_factory=AssetPolicy)
    sha: str | None = None
    ref: str | None = None
    run_id: str | None = None
    artifacts_dir: Path | None = None
    output_file: Path | None = None
    api_url: str = DEFAULT_API_URL
    upload_workers: int = 1
    dry_run: bool = False


def parse_bool_input(value: str | None) -> bool:
    """Action inputs are strings; only ``"true"`` enables a flag."""
    if value is None:
        return False
    return value.strip() == "true"


def parse_extensions(value: str) -> tuple[str, ...]:
    """Split a comma/whitespace separated extension list.

    A missing leading dot is added (``deb`` -> ``.deb``).
    """
    out: list[str] = []
    for part in re.split(r"[,\s]+", value):
        part = part.strip()
        if not part:
            continue
        out.append(part if part.startswith(".") else f".{part}")
    return tuple(out)


def _pick(
    overrides: Mapping[str, object | None],
    key: str,
    env: Mapping[str, str],
    *env_keys: str,
) -> object | None:
    """CLI override first, then the first non-empty environment variable."""
    value = overrides.get(key)
    if value is not None:
        return value
    for env_key in env_keys:
        raw = env.get(env_key)
        if raw is not None and raw.strip():
            return raw.strip()
    return None


def _pick_str(
    overrides: Mapping[str, object | None],
    key: str,
    env: Mapping[str, str],
    *env_keys: str,
) -> str | None:
    value = _pick(overrides, key, env, *env_keys)
    if value is None:
        return None
    return str(value)


def _pick_flag(
    overrides: Mapping[str, object | None],
    key: str,
    env: Mapping[str, str],
    env_key: str,
) -> bool:
    value = overrides.get(key)
    if isinstance(value, bool):
        return value
    return parse_bool_input(env.get(env_key))


def _parse_enum[EnumT: Enum](
    enum_type: type[EnumT],
    raw: str | None,
    default: EnumT,
    *,
    key: str,
) -> Result[EnumT, ConfigError]:
    if raw is None:
        return Ok(default)
    try:
        return Ok(enum_type(raw.strip().lower()))
    except ValueError:
        allowed = "|".join(str(m.value) for m in enum_type)
        return Err(ConfigError(f"invalid {key}: {raw} (expected {allowed})", key=key))


def _parse_asset_policy(
    overrides: Mapping[str, object | None],
    env: Mapping[str, str],
) -> Result[AssetPolicy, ConfigError]:
    kind = _parse_enum(
        AssetPolicyKind,
        _pick_str(overrides, "asset_policy", env, "INPUT_ASSET_POLICY"),
        AssetPolicyKind.PREFIX,
        key="asset_policy",
    )
    if isinstance(kind, Err):
        return kind

    prefix = _pick_str(overrides, "asset_prefix", env, "INPUT_ASSET_PREFIX")

    extensions = DEFAULT_ASSET_EXTENSIONS
    ext_override = overrides.get("asset_extensions")
    if isinstance(ext_override, (list, tuple)) and ext_override:
        extensions = parse_extensions(",".join(str(e) for e in ext_override))
    else:
        raw_ext = env.get("INPUT_ASSET_EXTENSIONS")
        if raw_ext is not None and raw_ext.strip():
            extensions = parse_extensions(raw_ext)

    if kind.value is AssetPolicyKind.EXTENSIONS and not extensions:
        return Err(ConfigError("asset_extensions must not be empty", key="asset_extensions"))

    return Ok(
        AssetPolicy(
            kind=kind.value,
            prefix=prefix or DEFAULT_ASSET_PREFIX,
            extensions=extensions,
        )
    )


def _parse_workers(raw: object | None) -> Result[int, ConfigError]:
    if raw is None:
        return Ok(1)
    try:
        workers = int(str(raw))
    except ValueError:
        return Err(ConfigError(f"invalid upload_workers: {raw}", key="upload_workers"))
    if workers < 1:
        return Err(ConfigError("upload_workers must be >= 1", key="upload_workers"))
    return Ok(workers)


def load_run_config(
    env: Mapping[str, str],
    overrides: Mapping[str, object | None] | None = None,
) -> Result[RunConfig, ConfigError]:
    """Build the run configuration from the environment and CLI overrides.

    Args:
        env: Process environment (``os.environ`` in production).
        overrides: CLI option values keyed by RunConfig field name;
            ``None`` means "not given".

    Returns:
        Ok(RunConfig) on success, Err(ConfigError) naming the first problem.
    """
    opts: Mapping[str, object | None] = overrides or {}

    template = _pick_str(opts, "template", env, "INPUT_TEMPLATE")
    if template is None:
        return Err(ConfigError("input required and not supplied: template", key="template"))

    title = _pick_str(opts, "title", env, "INPUT_TITLE")
    if title is None:
        return Err(ConfigError("input required and not supplied: title", key="title"))

    token = _pick_str(opts, "token", env, "INPUT_TOKEN", "GITHUB_TOKEN")
    if token is None:
        return Err(ConfigError("input required and not supplied: token", key="token"))

    repository = _pick_str(opts, "repository", env, "GITHUB_REPOSITORY")
    if repository is None:
        return Err(ConfigError("repository not set (GITHUB_REPOSITORY)", key="repository"))
    if not _REPO_SLUG_RE.match(repository):
        return Err(
            ConfigError(f"invalid repository (expected owner/name): {repository}", key="repository")
        )

    strategy = _parse_enum(
        TagStrategy,
        _pick_str(opts, "tag_strategy", env, "INPUT_TAG_STRATEGY"),
        TagStrategy.GIT,
        key="tag_strategy",
    )
    if isinstance(strategy, Err):
        return strategy

    policy = _parse_asset_policy(opts, env)
    if isinstance(policy, Err):
        return policy

    workers = _parse_workers(_pick(opts, "upload_workers", env, "INPUT_UPLOAD_WORKERS"))
    if isinstance(workers, Err):
        return workers

    workspace_raw = _pick_str(opts, "workspace", env, "GITHUB_WORKSPACE")
    workspace = Path(workspace_raw) if workspace_raw else Path.cwd()

    template_path = Path(template)
    if not template_path.is_absolute():
        template_path = workspace / template_path

    artifacts_raw = _pick_str(opts, "artifacts_dir", env, "INPUT_ARTIFACTS_DIR")
    artifacts_dir: Path | None = None
    if artifacts_raw is not None:
        artifacts_dir = Path(artifacts_raw)
        if not artifacts_dir.is_absolute():
            artifacts_dir = workspace / artifacts_dir

    run_id = _pick_str(opts, "run_id", env, "GITHUB_RUN_ID")
    if artifacts_dir is None and run_id is None:
        return Err(
            ConfigError(
                "no artifact source: set --artifacts-dir or GITHUB_RUN_ID",
                key="artifacts_dir",
            )
        )

    variables_from_env = _pick_flag(opts, "variables_from_env", env, "INPUT_VARIABLES_FROM_ENV")
    output_raw = env.get("GITHUB_OUTPUT")

    return Ok(
        RunConfig(
            repository=repository,
            token=token,
            template=template_path,
            title=title,
            workspace=workspace,
            variables=_pick_str(opts, "variables", env, "INPUT_VARIABLES") or "{}",
            variables_from_env=variables_from_env,
            environment=dict(env) if variables_from_env else {},
            draft=_pick_flag(opts, "draft", env, "INPUT_DRAFT"),
            prerelease=_pick_flag(opts, "prerelease", env, "INPUT_PRERELEASE"),
            tag_strategy=strategy.value,
            asset_policy=policy.value,
            sha=_pick_str(opts, "sha", env, "GITHUB_SHA"),
            ref=_pick_str(opts, "ref", env, "GITHUB_REF"),
            run_id=run_id,
            artifacts_dir=artifacts_dir,
            output_file=Path(output_raw) if output_raw else None,
            api_url=(_pick_str(opts, "api_url", env, "GITHUB_API_URL") or DEFAULT_API_URL).rstrip(
                "/"
            ),
            upload_workers=workers.value,
            dry_run=bool(opts.get("dry_run") or False),
        )
    )

from __future__ import annotations

from pathlib import Path

import typer

from tagrelease.cli.context import build_context
from tagrelease.core.result import Err
from tagrelease.output.console import ActionsConsole, Style
from tagrelease.release.errors import release_error_code
from tagrelease.release.service import run_release


def publish(
    template: Path | None = typer.Option(
        None, "--template", help="Mustache template for the release body [INPUT_TEMPLATE]"
    ),
    title: str | None = typer.Option(None, "--title", help="Release name [INPUT_TITLE]"),
    variables: str | None = typer.Option(
        None, "--variables", help="JSON object with template variables [INPUT_VARIABLES]"
    ),
    variables_from_env: bool = typer.Option(
        False,
        "--variables-from-env",
        help="Expose the process environment to the template [INPUT_VARIABLES_FROM_ENV]",
    ),
    draft: bool = typer.Option(False, "--draft", help="Create a draft release [INPUT_DRAFT]"),
    prerelease: bool = typer.Option(
        False, "--prerelease", help="Mark the release as a prerelease [INPUT_PRERELEASE]"
    ),
    token: str | None = typer.Option(
        None, "--token", help="API token [INPUT_TOKEN, GITHUB_TOKEN]", show_default=False
    ),
    repository: str | None = typer.Option(
        None, "--repo", help="Target repository owner/name [GITHUB_REPOSITORY]"
    ),
    sha: str | None = typer.Option(None, "--sha", help="Commit to release [GITHUB_SHA]"),
    ref: str | None = typer.Option(None, "--ref", help="Pipeline ref [GITHUB_REF]"),
    run_id: str | None = typer.Option(
        None, "--run-id", help="Workflow run whose artifacts are uploaded [GITHUB_RUN_ID]"
    ),
    api_url: str | None = typer.Option(None, "--api-url", help="API base URL [GITHUB_API_URL]"),
    tag_strategy: str | None = typer.Option(
        None, "--tag-strategy", help="Tag discovery: git|ref [INPUT_TAG_STRATEGY]"
    ),
    asset_policy: str | None = typer.Option(
        None, "--asset-policy", help="Asset selection: prefix|extensions [INPUT_ASSET_POLICY]"
    ),
    asset_prefix: str | None = typer.Option(
        None, "--asset-prefix", help="Artifact name prefix for the prefix policy"
    ),
    asset_extensions: list[str] | None = typer.Option(
        None, "--asset-extension", help="Allowed extension for the extensions policy (repeatable)"
    ),
    artifacts_dir: Path | None = typer.Option(
        None, "--artifacts-dir", help="Local directory with one subdirectory per artifact"
    ),
    upload_workers: int | None = typer.Option(
        None, "--upload-workers", help="Concurrent asset uploads (default 1)"
    ),
    workspace: Path | None = typer.Option(
        None, "--workspace", help="Repository checkout [GITHUB_WORKSPACE]"
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Resolve the tag and render the body without creating anything"
    ),
) -> None:
    """Create a release for the tagged commit and upload its artifacts."""
    ctx = build_context(
        {
            "template": template,
            "title": title,
            "variables": variables,
            "variables_from_env": variables_from_env or None,
            "draft": draft or None,
            "prerelease": prerelease or None,
            "token": token,
            "repository": repository,
            "sha": sha,
            "ref": ref,
            "run_id": run_id,
            "api_url": api_url,
            "tag_strategy": tag_strategy,
            "asset_policy": asset_policy,
            "asset_prefix": asset_prefix,
            "asset_extensions": asset_extensions or None,
            "artifacts_dir": artifacts_dir,
            "upload_workers": upload_workers,
            "workspace": workspace,
            "dry_run": dry_run,
        }
    )

    result = run_release(ctx.config, http=ctx.http, repo=ctx.repo, console=ctx.console)
    if isinstance(ctx.console, ActionsConsole):
        ctx.console.close()

    if isinstance(result, Err):
        error = result.error
        ctx.console.error(error.message)
        if error.hint:
            ctx.console.print(f"hint: {error.hint}", Style.DIM)
        raise typer.Exit(code=int(release_error_code(error.kind)))

"""Release run orchestration.

Start -> TagCheck -> {Untagged | Render -> CreateRelease -> EmitOutputs ->
CollectArtifacts -> Upload each selected file (best effort)} -> End

Fatal errors (tag query, template, release creation, artifact collection)
short-circuit. A release that ends up with some or none of its assets is
still a successful run.
"""

from __future__ import annotations

import tempfile
from pathlib import Path

from tagrelease.core.config import RunConfig
from tagrelease.core.result import Err, Ok, Result
from tagrelease.git.repository import Repository
from tagrelease.github.http import HttpClient
from tagrelease.output.console import ConsoleProtocol, Style
from tagrelease.release.artifacts import ArtifactStore, LocalArtifactStore, RunArtifactStore
from tagrelease.release.assets import select_candidates, upload_assets
from tagrelease.release.errors import ReleaseError
from tagrelease.release.model import ReleaseRequest, RunOutcome, Untagged
from tagrelease.release.outputs import release_outputs, write_outputs
from tagrelease.release.publisher import publish_release
from tagrelease.release.tags import resolve_tag
from tagrelease.release.template import build_context, load_template, parse_variables, render_body


def resolve_sha(config: RunConfig, repo: Repository) -> Result[str, ReleaseError]:
    if config.sha:
        return Ok(config.sha)
    head = repo.head_sha()
    if isinstance(head, Err):
        return Err(
            ReleaseError(
                kind="tag_query_failed",
                message=f"cannot determine current commit: {head.error.message}",
                hint="Set GITHUB_SHA or pass --sha",
            )
        )
    return Ok(head.value)


def render_release_body(config: RunConfig) -> Result[str, ReleaseError]:
    template = load_template(config.template)
    if isinstance(template, Err):
        return template

    variables = parse_variables(config.variables)
    if isinstance(variables, Err):
        return variables

    context = build_context(variables.value, config.environment)
    return Ok(render_body(template.value, context))


def default_artifact_store(
    config: RunConfig,
    *,
    http: HttpClient,
    download_dir: Path,
) -> ArtifactStore:
    if config.artifacts_dir is not None:
        return LocalArtifactStore(config.artifacts_dir)
    # load_run_config guarantees one of artifacts_dir/run_id.
    assert config.run_id is not None
    return RunArtifactStore(
        http,
        api_url=config.api_url,
        repository=config.repository,
        run_id=config.run_id,
        download_dir=download_dir,
    )


def run_release(
    config: RunConfig,
    *,
    http: HttpClient,
    repo: Repository,
    console: ConsoleProtocol,
    artifact_store: ArtifactStore | None = None,
) -> Result[RunOutcome, ReleaseError]:
    sha = resolve_sha(config, repo)
    if isinstance(sha, Err):
        return sha

    resolution = resolve_tag(
        strategy=config.tag_strategy,
        repo=repo,
        sha=sha.value,
        ref=config.ref,
        console=console,
    )
    if isinstance(resolution, Err):
        return resolution
    if isinstance(resolution.value, Untagged):
        console.info("No tag found")
        console.print(resolution.value.reason, Style.DIM)
        return Ok(RunOutcome(status="untagged"))

    tag = resolution.value.tag
    console.info(f"Using tag {tag}")

    body = render_release_body(config)
    if isinstance(body, Err):
        return body
    console.info("Rendered body")

    request = ReleaseRequest(
        tag=tag,
        title=config.title,
        body=body.value,
        draft=config.draft,
        prerelease=config.prerelease,
        target_commit=sha.value,
    )

    if config.dry_run:
        console.header(f"Dry run: release {request.title} ({tag})")
        console.print(request.body)
        return Ok(RunOutcome(status="dry_run", tag=tag))

    release = publish_release(
        http,
        api_url=config.api_url,
        repository=config.repository,
        request=request,
        console=console,
    )
    if isinstance(release, Err):
        return release

    written = write_outputs(
        release_outputs(release.value),
        output_file=config.output_file,
        console=console,
    )
    if isinstance(written, Err):
        return written

    console.info("Downloading artifacts")
    with tempfile.TemporaryDirectory(prefix="tag-release-") as tmp:
        store = artifact_store or default_artifact_store(
            config, http=http, download_dir=Path(tmp)
        )
        artifacts = store.collect(console)
        if isinstance(artifacts, Err):
            return artifacts

        candidates = select_candidates(
            artifacts.value,
            policy=config.asset_policy,
            console=console,
        )
        uploads = upload_assets(
            http,
            release=release.value,
            candidates=candidates,
            console=console,
            workers=config.upload_workers,
        )

    outcome = RunOutcome(status="released", tag=tag, release=release.value, uploads=uploads)
    console.success(
        f"Released {tag}: {len(outcome.uploaded)} asset(s) uploaded, "
        f"{len(outcome.failed)} failed"
    )
    console.print(release.value.html_url, Style.DIM)
    return Ok(outcome)

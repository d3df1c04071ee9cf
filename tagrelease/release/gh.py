from __future__ import annotations

import re
import urllib.parse

from tagrelease.core.result import Err, Ok, Result
from tagrelease.core.structured import as_obj_list, as_str_dict, get_bool, get_int, get_str
from tagrelease.github.http import HttpClient, HttpError
from tagrelease.release.model import ReleaseRequest, ReleaseResult, RunArtifact

_ARTIFACTS_PER_PAGE = 100
_URI_TEMPLATE_RE = re.compile(r"\{[^}]*\}")


def releases_endpoint(api_url: str, repository: str) -> str:
    return f"{api_url}/repos/{repository}/releases"


def asset_upload_url(upload_url: str, file_name: str) -> str:
    """Expand the ``{?name,label}`` upload template for one file."""
    base = _URI_TEMPLATE_RE.sub("", upload_url)
    return f"{base}?name={urllib.parse.quote(file_name)}"


def create_release(
    http: HttpClient,
    *,
    api_url: str,
    repository: str,
    request: ReleaseRequest,
) -> Result[ReleaseResult, HttpError]:
    url = releases_endpoint(api_url, repository)
    result = http.post_json(url, request.as_payload())
    if isinstance(result, Err):
        return result

    data = result.value
    release_id = get_int(data, "id")
    html_url = get_str(data, "html_url")
    upload_url = get_str(data, "upload_url")
    if release_id is None or html_url is None or upload_url is None:
        return Err(
            HttpError(
                url=url,
                status=0,
                message="unexpected release payload (missing id/html_url/upload_url)",
            )
        )

    return Ok(
        ReleaseResult(
            id=release_id,
            html_url=html_url,
            upload_url=upload_url,
            name=get_str(data, "name"),
        )
    )


def upload_release_asset(
    http: HttpClient,
    *,
    release: ReleaseResult,
    file_name: str,
    data: bytes,
    content_type: str,
) -> Result[str | None, HttpError]:
    """Upload one asset. Returns the asset's download URL when reported."""
    url = asset_upload_url(release.upload_url, file_name)
    result = http.post_bytes(url, data, content_type=content_type)
    if isinstance(result, Err):
        return result
    return Ok(get_str(result.value, "browser_download_url"))


def _parse_artifact(item: object) -> RunArtifact | None:
    d = as_str_dict(item)
    if d is None:
        return None

    artifact_id = get_int(d, "id")
    name = get_str(d, "name")
    download_url = get_str(d, "archive_download_url")
    if artifact_id is None or name is None or download_url is None:
        return None

    return RunArtifact(
        id=artifact_id,
        name=name,
        size_bytes=get_int(d, "size_in_bytes") or 0,
        expired=get_bool(d, "expired") or False,
        archive_download_url=download_url,
    )


def list_run_artifacts(
    http: HttpClient,
    *,
    api_url: str,
    repository: str,
    run_id: str,
) -> Result[list[RunArtifact], HttpError]:
    out: list[RunArtifact] = []
    page = 1
    while True:
        url = (
            f"{api_url}/repos/{repository}/actions/runs/{run_id}/artifacts"
            f"?per_page={_ARTIFACTS_PER_PAGE}&page={page}"
        )
        result = http.get_json(url)
        if isinstance(result, Err):
            return result

        data = as_str_dict(result.value)
        raw = as_obj_list(data.get("artifacts")) if data is not None else None
        if data is None or raw is None:
            return Err(HttpError(url=url, status=0, message="unexpected artifacts payload"))

        for item in raw:
            artifact = _parse_artifact(item)
            if artifact is not None:
                out.append(artifact)

        total = get_int(data, "total_count") or 0
        if not raw or len(raw) < _ARTIFACTS_PER_PAGE or page * _ARTIFACTS_PER_PAGE >= total:
            return Ok(out)
        page += 1

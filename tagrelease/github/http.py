"""HTTP client abstraction for the GitHub REST API.

This module provides:
- HttpClient: Protocol for HTTP operations (injectable for tests)
- RealHttpClient: Real implementation using urllib
- MockHttpClient: Mock implementation for testing
"""

from __future__ import annotations

import json
import ssl
import urllib.error
import urllib.request
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol, cast, runtime_checkable

from tagrelease import __version__
from tagrelease.core.result import Err, Ok, Result
from tagrelease.core.structured import as_str_dict, get_str

__all__ = [
    "HttpClient",
    "HttpError",
    "MockHttpClient",
    "RealHttpClient",
]

_API_VERSION = "2022-11-28"


@dataclass(frozen=True, slots=True)
class HttpError:
    """HTTP error details.

    Attributes:
        url: The URL that failed
        status: HTTP status code (0 for network errors)
        message: Human-readable error message
    """

    url: str
    status: int
    message: str

    def __str__(self) -> str:
        if self.status:
            return f"HTTP {self.status}: {self.message} ({self.url})"
        return f"{self.message} ({self.url})"


@runtime_checkable
class HttpClient(Protocol):
    """Protocol for the HTTP calls a release run makes."""

    def get_json(self, url: str) -> Result[object, HttpError]:
        """GET a URL and parse the JSON body."""
        ...

    def post_json(self, url: str, payload: dict[str, Any]) -> Result[dict[str, Any], HttpError]:
        """POST a JSON body and parse the JSON object response."""
        ...

    def post_bytes(
        self,
        url: str,
        data: bytes,
        *,
        content_type: str,
    ) -> Result[dict[str, Any], HttpError]:
        """POST raw bytes (release asset upload) and parse the JSON response."""
        ...

    def download(self, url: str, dest: Path) -> Result[Path, HttpError]:
        """Stream a URL to a file, following redirects."""
        ...


def _error_message(e: urllib.error.HTTPError) -> str:
    """Prefer the API's own ``message`` field over the bare reason phrase."""
    try:
        raw = e.read()
    except OSError:
        raw = b""
    if raw:
        try:
            data = as_str_dict(json.loads(raw.decode("utf-8")))
        except (json.JSONDecodeError, UnicodeDecodeError):
            data = None
        if data is not None:
            message = get_str(data, "message")
            if message:
                return message
    return str(e.reason)


class RealHttpClient:
    """HTTP client using urllib.

    The token is sent as an unredirected header: artifact downloads redirect
    to pre-signed storage URLs that reject a second set of credentials.
    """

    def __init__(
        self,
        token: str | None = None,
        *,
        timeout: float = 60.0,
        user_agent: str = f"tag-release/{__version__}",
    ) -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self._token = token
        self._ssl_context = ssl.create_default_context()

    def _build(
        self,
        url: str,
        *,
        method: str = "GET",
        data: bytes | None = None,
        content_type: str | None = None,
    ) -> urllib.request.Request:
        req = urllib.request.Request(url, data=data, method=method)
        req.add_header("User-Agent", self.user_agent)
        req.add_header("Accept", "application/vnd.github+json")
        req.add_header("X-GitHub-Api-Version", _API_VERSION)
        if content_type is not None:
            req.add_header("Content-Type", content_type)
        if data is not None:
            req.add_header("Content-Length", str(len(data)))
        if self._token:
            req.add_unredirected_header("Authorization", f"Bearer {self._token}")
        return req

    def _send(self, req: urllib.request.Request) -> Result[bytes, HttpError]:
        url = req.full_url
        try:
            with urllib.request.urlopen(
                req,
                timeout=self.timeout,
                context=self._ssl_context,
            ) as response:
                return Ok(response.read())
        except urllib.error.HTTPError as e:
            return Err(HttpError(url=url, status=e.code, message=_error_message(e)))
        except urllib.error.URLError as e:
            return Err(HttpError(url=url, status=0, message=str(e.reason)))
        except TimeoutError:
            return Err(HttpError(url=url, status=0, message="Request timed out"))
        except (ValueError, OSError) as e:
            return Err(HttpError(url=url, status=0, message=str(e)))

    def _parse_object(self, url: str, raw: bytes) -> Result[dict[str, Any], HttpError]:
        try:
            data = as_str_dict(json.loads(raw.decode("utf-8")))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            return Err(HttpError(url=url, status=0, message=f"JSON parse error: {e}"))
        if data is None:
            return Err(HttpError(url=url, status=0, message="Expected JSON object"))
        return Ok(cast(dict[str, Any], data))

    def get_json(self, url: str) -> Result[object, HttpError]:
        result = self._send(self._build(url))
        if isinstance(result, Err):
            return result
        try:
            return Ok(json.loads(result.value.decode("utf-8")))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            return Err(HttpError(url=url, status=0, message=f"JSON parse error: {e}"))

    def post_json(self, url: str, payload: dict[str, Any]) -> Result[dict[str, Any], HttpError]:
        body = json.dumps(payload).encode("utf-8")
        req = self._build(url, method="POST", data=body, content_type="application/json")
        result = self._send(req)
        if isinstance(result, Err):
            return result
        return self._parse_object(url, result.value)

    def post_bytes(
        self,
        url: str,
        data: bytes,
        *,
        content_type: str,
    ) -> Result[dict[str, Any], HttpError]:
        req = self._build(url, method="POST", data=data, content_type=content_type)
        result = self._send(req)
        if isinstance(result, Err):
            return result
        return self._parse_object(url, result.value)

    def download(self, url: str, dest: Path) -> Result[Path, HttpError]:
        req = self._build(url)
        try:
            with urllib.request.urlopen(
                req,
                timeout=self.timeout,
                context=self._ssl_context,
            ) as response:
                dest.parent.mkdir(parents=True, exist_ok=True)
                with open(dest, "wb") as f:
                    while True:
                        chunk = response.read(64 * 1024)
                        if not chunk:
                            break
                        f.write(chunk)
                return Ok(dest)
        except urllib.error.HTTPError as e:
            return Err(HttpError(url=url, status=e.code, message=_error_message(e)))
        except urllib.error.URLError as e:
            return Err(HttpError(url=url, status=0, message=str(e.reason)))
        except TimeoutError:
            return Err(HttpError(url=url, status=0, message="Download timed out"))
        except (ValueError, OSError) as e:
            return Err(HttpError(url=url, status=0, message=str(e)))


@dataclass(frozen=True, slots=True)
class RecordedCall:
    """A call captured by MockHttpClient."""

    method: str
    url: str
    payload: dict[str, Any] | None = None
    data: bytes | None = None
    content_type: str | None = None


class MockHttpClient:
    """Mock HTTP client for testing.

    Responses are registered per URL; unknown URLs answer 404.

    Usage:
        client = MockHttpClient()
        client.set_post("https://api.github.com/repos/o/r/releases", {"id": 1})
        result = client.post_json("https://api.github.com/repos/o/r/releases", {})
        assert result == Ok({"id": 1})
    """

    def __init__(self) -> None:
        self._get: dict[str, object | HttpError] = {}
        self._post: dict[str, dict[str, Any] | HttpError | Exception] = {}
        self._downloads: dict[str, bytes | HttpError] = {}
        self.calls: list[RecordedCall] = []

    def set_get(self, url: str, response: object | HttpError) -> None:
        self._get[url] = response

    def set_post(self, url: str, response: dict[str, Any] | HttpError | Exception) -> None:
        """Register a POST response; an Exception is raised when called."""
        self._post[url] = response

    def set_download(self, url: str, response: bytes | HttpError) -> None:
        self._downloads[url] = response

    def _post_response(self, url: str) -> Result[dict[str, Any], HttpError]:
        if url not in self._post:
            return Err(HttpError(url=url, status=404, message="Not Found (mock)"))
        response = self._post[url]
        if isinstance(response, HttpError):
            return Err(response)
        if isinstance(response, Exception):
            raise response
        return Ok(response)

    def get_json(self, url: str) -> Result[object, HttpError]:
        self.calls.append(RecordedCall("GET", url))
        if url not in self._get:
            return Err(HttpError(url=url, status=404, message="Not Found (mock)"))
        response = self._get[url]
        if isinstance(response, HttpError):
            return Err(response)
        return Ok(response)

    def post_json(self, url: str, payload: dict[str, Any]) -> Result[dict[str, Any], HttpError]:
        self.calls.append(RecordedCall("POST", url, payload=payload))
        return self._post_response(url)

    def post_bytes(
        self,
        url: str,
        data: bytes,
        *,
        content_type: str,
    ) -> Result[dict[str, Any], HttpError]:
        self.calls.append(RecordedCall("POST", url, data=data, content_type=content_type))
        return self._post_response(url)

    def download(self, url: str, dest: Path) -> Result[Path, HttpError]:
        self.calls.append(RecordedCall("DOWNLOAD", url))
        if url not in self._downloads:
            return Err(HttpError(url=url, status=404, message="Not Found (mock)"))
        response = self._downloads[url]
        if isinstance(response, HttpError):
            return Err(response)
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_bytes(response)
        return Ok(dest)

    def calls_to(self, method: str, prefix: str = "") -> list[RecordedCall]:
        """Calls with the given method whose URL starts with ``prefix``."""
        return [c for c in self.calls if c.method == method and c.url.startswith(prefix)]

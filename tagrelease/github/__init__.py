"""HTTP transport for the GitHub REST API."""

from .http import HttpClient, HttpError, MockHttpClient, RealHttpClient

__all__ = [
    "HttpClient",
    "HttpError",
    "MockHttpClient",
    "RealHttpClient",
]

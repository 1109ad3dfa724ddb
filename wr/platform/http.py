"""HTTP transport for the GitLab API.

This module provides:
- HttpClient: Protocol for JSON requests (injectable for tests)
- RealHttpClient: Real implementation using urllib
- MockHttpClient: Scripted implementation for testing
"""

from __future__ import annotations

import json
import ssl
import urllib.error
import urllib.request
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from wr.core.result import Err, Ok, Result

__all__ = [
    "HttpClient",
    "HttpError",
    "MockHttpClient",
    "RealHttpClient",
]


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
    """Protocol for JSON-over-HTTP calls."""

    def request_json(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
    ) -> Result[object, HttpError]:
        """Send a request and parse the response body as JSON.

        An empty body parses as None.
        """
        ...


class RealHttpClient:
    """HTTP client using urllib with system certificates."""

    def __init__(self, timeout: float = 30.0, user_agent: str = "wr") -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self._ssl_context = ssl.create_default_context()

    def _request(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str] | None,
    ) -> Result[bytes, HttpError]:
        all_headers = {"User-Agent": self.user_agent, "Accept": "application/json"}
        if headers:
            all_headers.update(headers)
        try:
            req = urllib.request.Request(url, headers=all_headers, method=method)
            with urllib.request.urlopen(
                req,
                timeout=self.timeout,
                context=self._ssl_context,
            ) as response:
                return Ok(response.read())
        except urllib.error.HTTPError as e:
            return Err(HttpError(url=url, status=e.code, message=str(e.reason)))
        except urllib.error.URLError as e:
            return Err(HttpError(url=url, status=0, message=str(e.reason)))
        except TimeoutError:
            return Err(HttpError(url=url, status=0, message="Request timed out"))
        except ValueError as e:
            return Err(HttpError(url=url, status=0, message=str(e)))
        except OSError as e:
            return Err(HttpError(url=url, status=0, message=str(e)))

    def request_json(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
    ) -> Result[object, HttpError]:
        result = self._request(method, url, headers)
        if isinstance(result, Err):
            return result

        body = result.value
        if not body.strip():
            return Ok(None)
        try:
            data: object = json.loads(body.decode("utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            return Err(HttpError(url=url, status=0, message=f"JSON parse error: {e}"))
        return Ok(data)


class MockHttpClient:
    """Scripted HTTP client for tests.

    Responses are queued per (method, url); the last queued response keeps
    being returned once the queue is drained, which suits polling loops.

    Usage:
        http = MockHttpClient()
        http.set_json("GET", url, {"status": "created"}, {"status": "success"})
    """

    def __init__(self) -> None:
        self._responses: dict[tuple[str, str], list[object | HttpError]] = {}
        self.calls: list[tuple[str, str]] = []
        self.headers: list[dict[str, str]] = []

    def set_json(self, method: str, url: str, *responses: object | HttpError) -> None:
        self._responses[(method.upper(), url)] = list(responses)

    def request_json(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
    ) -> Result[object, HttpError]:
        key = (method.upper(), url)
        self.calls.append(key)
        self.headers.append(dict(headers or {}))

        queue = self._responses.get(key)
        if not queue:
            return Err(HttpError(url=url, status=404, message="Not found (mock)"))

        response = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(response, HttpError):
            return Err(response)
        return Ok(response)

    def count(self, method: str, url: str) -> int:
        return self.calls.count((method.upper(), url))

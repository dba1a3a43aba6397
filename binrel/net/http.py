"""HTTP existence probes for published downloads.

This module provides:
- HttpProbe: Protocol for HEAD requests (injectable for tests)
- RealHttpClient: urllib implementation
- MockHttpClient: canned responses for tests
"""

from __future__ import annotations

import logging
import ssl
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from binrel import __version__
from binrel.core.result import Err, Ok, Result

__all__ = [
    "HttpError",
    "HttpProbe",
    "MockHttpClient",
    "RealHttpClient",
]

log = logging.getLogger(__name__)

_CONTENT_HEADERS = ("content-length", "content-type")


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
class HttpProbe(Protocol):
    """Issues a HEAD request and reports the final status code."""

    def head(self, url: str) -> Result[int, HttpError]:
        """Ok(status) for a 2xx response after redirects, Err otherwise."""
        ...


class _HeadRedirectHandler(urllib.request.HTTPRedirectHandler):
    """Follow redirects without turning HEAD into GET.

    The download endpoint redirects to the CDN object; a GET there would
    fetch the whole archive.
    """

    def redirect_request(
        self,
        req: urllib.request.Request,
        fp: object,
        code: int,
        msg: str,
        headers: object,
        newurl: str,
    ) -> urllib.request.Request | None:
        if req.get_method() != "HEAD":
            return super().redirect_request(  # type: ignore[arg-type]
                req, fp, code, msg, headers, newurl
            )
        if code not in (301, 302, 303, 307, 308):
            return None
        # unredirected headers such as Host belong to the original server
        new_headers = {k: v for k, v in req.headers.items() if k.lower() not in _CONTENT_HEADERS}
        return urllib.request.Request(
            newurl,
            headers=new_headers,
            origin_req_host=req.origin_req_host,
            unverifiable=True,
            method="HEAD",
        )


class RealHttpClient:
    """HEAD probes over urllib with system certificates."""

    def __init__(self, timeout: float = 30.0, user_agent: str = f"binrel/{__version__}") -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self._ssl_context = ssl.create_default_context()
        self._opener = urllib.request.build_opener(
            _HeadRedirectHandler(),
            urllib.request.HTTPSHandler(context=self._ssl_context),
        )

    def head(self, url: str) -> Result[int, HttpError]:
        req = urllib.request.Request(url, headers={"User-Agent": self.user_agent}, method="HEAD")
        try:
            with self._opener.open(req, timeout=self.timeout) as response:
                status = int(response.status)
        except urllib.error.HTTPError as e:
            return Err(HttpError(url=url, status=e.code, message=str(e.reason)))
        except urllib.error.URLError as e:
            return Err(HttpError(url=url, status=0, message=str(e.reason)))
        except TimeoutError:
            return Err(HttpError(url=url, status=0, message="Request timed out"))
        except (ValueError, OSError) as e:
            return Err(HttpError(url=url, status=0, message=str(e)))

        log.debug("HEAD %s -> %s", url, status)
        if not 200 <= status < 300:
            return Err(HttpError(url=url, status=status, message="Unexpected status"))
        return Ok(status)


class MockHttpClient:
    """Mock probe for tests.

    Usage:
        client = MockHttpClient()
        client.set_status("https://example.com/a", 200)
        client.set_error("https://example.com/b", HttpError(..., status=0, ...))
    Unknown URLs answer 404.
    """

    def __init__(self) -> None:
        self._responses: dict[str, int | HttpError] = {}
        self.calls: list[str] = []

    def set_status(self, url: str, status: int) -> None:
        self._responses[url] = status

    def set_error(self, url: str, error: HttpError) -> None:
        self._responses[url] = error

    def head(self, url: str) -> Result[int, HttpError]:
        self.calls.append(url)
        response = self._responses.get(url)
        if response is None:
            return Err(HttpError(url=url, status=404, message="Not found (mock)"))
        if isinstance(response, HttpError):
            return Err(response)
        if not 200 <= response < 300:
            return Err(HttpError(url=url, status=response, message="Unexpected status (mock)"))
        return Ok(response)

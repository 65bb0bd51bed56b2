"""HTTP transport used by the manifest data source.

- Allowed URL schemes: https:// and http:// only.
- Max response body: 5 MB.
- Timeout: 30 seconds (connect + read).
- Max redirects: 3.

Non-2xx responses are returned (``ok`` is False); only transport failures
raise ``DownloadError``: network and protocol errors, truncated bodies,
oversized bodies.
"""

from __future__ import annotations

import urllib.error
import urllib.parse
import urllib.request
from collections.abc import Callable
from dataclasses import dataclass
from http.client import HTTPException, HTTPResponse

from ragindex.errors import DownloadError

_USER_AGENT = "ragindex/0.1"
_MAX_BYTES = 5 * 1024 * 1024  # 5 MB
_TIMEOUT = 30  # seconds
_MAX_REDIRECTS = 3
_ALLOWED_SCHEMES = {"https", "http"}


@dataclass
class FetchResponse:
    url: str
    status: int
    status_text: str
    body: bytes = b""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


Fetcher = Callable[[str], FetchResponse]


def fetch(url: str) -> FetchResponse:
    """GET *url* with timeout, redirect limit and size cap.

    Raises:
        DownloadError: on an unsupported scheme, a network or protocol failure,
            a body cut short of its Content-Length, or a body larger than the
            size cap.
    """
    parsed = urllib.parse.urlparse(url)
    if parsed.scheme not in _ALLOWED_SCHEMES:
        raise DownloadError(url, f"unsupported URL scheme '{parsed.scheme}'")

    request = urllib.request.Request(url, headers={"User-Agent": _USER_AGENT})
    opener = urllib.request.build_opener(_LimitedRedirectHandler(_MAX_REDIRECTS))

    try:
        response: HTTPResponse = opener.open(request, timeout=_TIMEOUT)
        with response:
            body = response.read(_MAX_BYTES + 1)
            status = response.status
            reason = response.reason
            declared = response.headers.get("Content-Length")
    except urllib.error.HTTPError as exc:
        exc.close()
        return FetchResponse(url=url, status=exc.code, status_text=str(exc.reason))
    except (urllib.error.URLError, OSError, HTTPException, ValueError) as exc:
        raise DownloadError(url, str(exc) or type(exc).__name__) from exc

    if len(body) > _MAX_BYTES:
        raise DownloadError(url, f"response body exceeds {_MAX_BYTES // (1024 * 1024)} MB")
    if declared and declared.isdigit() and len(body) < int(declared):
        raise DownloadError(url, f"incomplete body ({len(body)} of {declared} bytes)")
    return FetchResponse(url=url, status=status, status_text=reason, body=body)


class _LimitedRedirectHandler(urllib.request.HTTPRedirectHandler):
    """Raise an error after more than *max_redirects* redirects."""

    def __init__(self, max_redirects: int) -> None:
        self._max_redirects = max_redirects
        self._count = 0

    def redirect_request(self, req, fp, code, msg, headers, newurl):
        self._count += 1
        if self._count > self._max_redirects:
            raise DownloadError(req.full_url, f"too many redirects (>{self._max_redirects})")
        return super().redirect_request(req, fp, code, msg, headers, newurl)

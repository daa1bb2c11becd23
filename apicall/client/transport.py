from __future__ import annotations

import json
import ssl
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Protocol
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from apicall.client.errors import TransportError


@dataclass(frozen=True, slots=True)
class HttpResponse:
    """HTTP response as returned by a transport.

    Security notes:
    - Treat `body_bytes` as untrusted.

    """

    status: int
    headers: Mapping[str, str]
    body_bytes: bytes

    def json(self) -> Any:
        """Decode body as JSON."""

        return json.loads(self.body_bytes.decode("utf-8", errors="strict"))

    @property
    def text(self) -> str:
        return self.body_bytes.decode("utf-8", errors="replace")


class Transport(Protocol):
    """Sends one request and returns the raw response.

    HTTP error statuses are responses, not exceptions. Connection-level
    failures raise `TransportError`.
    """

    def send(
        self, method: str, url: str, headers: Mapping[str, str], body: Optional[bytes]
    ) -> HttpResponse: ...


class UrllibTransport:
    """Stdlib transport over `urllib.request`.

    Security notes:
    - Uses the default SSL context (verification ON).

    """

    def __init__(self, timeout_sec: Optional[float] = None):
        self.timeout_sec = timeout_sec

    def send(
        self, method: str, url: str, headers: Mapping[str, str], body: Optional[bytes]
    ) -> HttpResponse:
        req = Request(url=url, data=body, method=method)
        for name, value in headers.items():
            req.add_header(name, value)
        if body is not None:
            req.add_header("Content-Length", str(len(body)))

        kwargs: dict = {"context": ssl.create_default_context()}
        if self.timeout_sec is not None:
            kwargs["timeout"] = self.timeout_sec

        try:
            with urlopen(req, **kwargs) as resp:
                data = resp.read()
                resp_headers = {k: v for k, v in resp.headers.items()}
                return HttpResponse(status=int(resp.status), headers=resp_headers, body_bytes=data)
        except HTTPError as e:
            data = e.read() if hasattr(e, "read") else b""
            resp_headers = dict(getattr(e, "headers", {}) or {})
            return HttpResponse(
                status=int(getattr(e, "code", 0) or 0), headers=resp_headers, body_bytes=data
            )
        except (URLError, OSError) as e:
            raise TransportError(f"network error: {e}") from e

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

import pytest

from apicall.client import ApiClient, ClientConfig, HttpResponse, StaticReachability


@dataclass
class SentRequest:
    method: str
    url: str
    headers: Dict[str, str]
    body: Optional[bytes]


@dataclass
class RecordingTransport:
    """Returns canned responses and records what was sent."""

    responses: List[Any] = field(default_factory=list)
    sent: List[SentRequest] = field(default_factory=list)

    def send(
        self, method: str, url: str, headers: Mapping[str, str], body: Optional[bytes]
    ) -> Any:
        self.sent.append(SentRequest(method, url, dict(headers), body))
        return self.responses.pop(0)


def json_response(status: int, body: bytes) -> HttpResponse:
    return HttpResponse(status=status, headers={"Content-Type": "application/json"}, body_bytes=body)


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def make_client(transport: RecordingTransport):
    """Factory for clients wired to the recording transport."""

    def _make(connected: bool = True, **config: Any) -> ApiClient:
        config.setdefault("base_url", "https://api.example.com")
        return ApiClient(
            ClientConfig(**config),
            transport=transport,
            reachability=StaticReachability(connected),
        )

    return _make

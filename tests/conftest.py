"""Shared test fixtures for the playht_converter test suite.

WHY: Most tests need a fake play.ht service that answers the convert,
status, and audio requests with scripted payloads, and that records every
request so call counts and headers can be asserted.

HOW: ScriptedService is an httpx.MockTransport handler. Tests wrap it in an
httpx.AsyncClient and inject that into Transport, so the real transport,
client, writer, and pipeline code all run against it. Tests reach the
fakes through fixtures: scripted_service is the ScriptedService class (call
it with the scripted payloads) and failing_stream builds a body that breaks
mid-read.

RULES:
- Endpoints live on https://playht.test; audio lives on http://x
- Status responses are consumed in order; running out is a test failure
- No test touches the real network
"""

from __future__ import annotations

from typing import Any, List

import httpx
import pytest

from playht_converter.api.client import ConversionClient
from playht_converter.api.transport import Transport
from playht_converter.config import Credentials

CONVERT_URL = "https://playht.test/api/v1/convert"
STATUS_URL = "https://playht.test/api/v1/articleStatus"
AUDIO_URL = "http://x/y.mp3"

CREDENTIALS = Credentials(authorization="secret-key", user_id="user-42")


def _respond(payload: Any) -> httpx.Response:
    if isinstance(payload, httpx.Response):
        return payload
    return httpx.Response(200, json=payload)


class ScriptedService:
    """Fake play.ht API driven by scripted responses."""

    audio_url = AUDIO_URL

    def __init__(
        self,
        submit: Any = None,
        statuses: List[Any] = None,
        audio: Any = b"",
    ) -> None:
        self.submit_response = submit if submit is not None else {"transcriptionId": "abc"}
        self.statuses = list(statuses or [])
        self.audio = audio
        self.requests: List[httpx.Request] = []

    def _requests_to(self, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]

    @property
    def submit_calls(self) -> List[httpx.Request]:
        return self._requests_to("/api/v1/convert")

    @property
    def status_calls(self) -> List[httpx.Request]:
        return self._requests_to("/api/v1/articleStatus")

    @property
    def audio_calls(self) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.host == "x"]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.host == "playht.test" and request.url.path == "/api/v1/convert":
            return _respond(self.submit_response)
        if request.url.host == "playht.test" and request.url.path == "/api/v1/articleStatus":
            assert self.statuses, "unexpected extra status query"
            return _respond(self.statuses.pop(0))
        if request.url.host == "x":
            if isinstance(self.audio, httpx.Response):
                return self.audio
            return httpx.Response(200, content=self.audio)
        return httpx.Response(404, json={"error": "not found"})

    def http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))

    def conversion_client(self, transport: Transport) -> ConversionClient:
        """ConversionClient pointed at the scripted endpoints."""
        return ConversionClient(
            transport,
            CREDENTIALS,
            convert_url=CONVERT_URL,
            status_url=STATUS_URL,
        )


class FailingStream(httpx.AsyncByteStream):
    """Response body that yields some bytes, then drops the connection."""

    def __init__(self, first: bytes) -> None:
        self._first = first

    async def __aiter__(self):
        yield self._first
        raise httpx.ReadError("connection reset")


@pytest.fixture
def scripted_service():
    """Factory for a fake play.ht: scripted_service(submit=..., statuses=..., audio=...)."""
    return ScriptedService


@pytest.fixture
def failing_stream():
    """Factory for a response body that drops the connection after its first chunk."""
    return FailingStream

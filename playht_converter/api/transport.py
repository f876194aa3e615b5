"""Thin async HTTP transport over httpx.

WHY: The conversion client and the artifact writer both talk HTTP, but
neither should know about connection pools, JSON decoding, or how network
failures surface. This module wraps httpx.AsyncClient and turns every
low-level failure into a TransportError.

HOW: Transport is an async context manager. Entering it creates an
httpx.AsyncClient (unless one was injected, as tests do with
httpx.MockTransport); exiting closes the client it owns. JSON helpers parse
the body regardless of status code because play.ht encodes errors as JSON
payloads. get_stream() is an async context manager yielding raw chunks.

RULES:
- No default headers: authorization is passed per call by the caller
- JSON bodies are parsed regardless of HTTP status
- A body that is not JSON raises ResponseDecodeError
- get_stream() sends no authorization and rejects non-2xx responses
- No retries; timeout defaults to None (no timeout) unless configured
"""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager
from typing import Any

import httpx

from playht_converter.errors import ResponseDecodeError, TransportError

logger = logging.getLogger(__name__)


class Transport:
    """Async HTTP transport returning parsed JSON or raw byte streams.

    RULES:
    - Use as: async with Transport() as transport: ...
    - An injected httpx.AsyncClient is used as-is and never closed here
    - timeout is seconds (float) or None for no timeout
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
    ) -> None:
        self._timeout = timeout
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self) -> Transport:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self._timeout))
            self._owns_client = True
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def _ensure_client(self) -> httpx.AsyncClient:
        """Return the active httpx client, raising if not in context manager."""
        if self._client is None:
            raise RuntimeError(
                "Transport must be used as an async context manager: "
                "async with Transport() as transport: ..."
            )
        return self._client

    async def post_json(
        self,
        url: str,
        headers: Mapping[str, str],
        body: Any,
    ) -> Any:
        """POST a JSON body and return the parsed JSON response."""
        client = self._ensure_client()
        logger.debug("POST %s", url)
        try:
            resp = await client.post(url, headers=dict(headers), content=json.dumps(body))
        except httpx.HTTPError as e:
            raise TransportError("POST {} failed: {}".format(url, e)) from e
        return _decode_json(url, resp)

    async def get_json(
        self,
        url: str,
        headers: Mapping[str, str],
        params: Mapping[str, str] | None = None,
    ) -> Any:
        """GET a URL and return the parsed JSON response."""
        client = self._ensure_client()
        logger.debug("GET %s params=%s", url, params)
        try:
            resp = await client.get(url, headers=dict(headers), params=params)
        except httpx.HTTPError as e:
            raise TransportError("GET {} failed: {}".format(url, e)) from e
        return _decode_json(url, resp)

    @asynccontextmanager
    async def get_stream(self, url: str) -> AsyncIterator[AsyncIterator[bytes]]:
        """Open an unauthenticated GET and yield an async iterator of chunks.

        WHY: Audio files are streamed to disk rather than buffered in
        memory.

        HOW: Wraps httpx's streaming request. Errors raised while the
        connection opens or while chunks are being read both surface as
        TransportError; errors raised by the consumer pass through.

        RULES:
        - Non-2xx responses raise TransportError before any chunk is yielded
        - The response is closed when the context exits
        """
        client = self._ensure_client()
        logger.debug("GET (stream) %s", url)
        try:
            async with client.stream("GET", url) as resp:
                if resp.is_error:
                    raise TransportError(
                        "GET {} returned HTTP {}".format(url, resp.status_code)
                    )
                yield _wrap_chunks(url, resp.aiter_bytes())
        except httpx.HTTPError as e:
            raise TransportError("GET {} failed: {}".format(url, e)) from e


async def _wrap_chunks(url: str, chunks: AsyncIterator[bytes]) -> AsyncIterator[bytes]:
    try:
        async for chunk in chunks:
            yield chunk
    except httpx.HTTPError as e:
        raise TransportError("Reading {} failed: {}".format(url, e)) from e


def _decode_json(url: str, resp: httpx.Response) -> Any:
    """Parse a response body as JSON, whatever its status code."""
    if resp.is_error:
        logger.debug("%s answered HTTP %s", url, resp.status_code)
    try:
        return resp.json()
    except ValueError:
        raise ResponseDecodeError(url, resp.text) from None

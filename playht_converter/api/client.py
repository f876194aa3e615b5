"""Async client for the play.ht v1 text-to-speech conversion API.

WHY: The pipeline needs two API operations — submit a conversion job and
query its status — without knowing play.ht header names, endpoint URLs,
or response shapes. This module speaks play.ht's dialect on top of the
generic Transport.

HOW: ConversionClient receives its Credentials and endpoint URLs at
construction and injects the authorization headers on every call. Responses
are validated and parsed into the dataclasses from models.py.

RULES:
- Credentials are constructor input, never read from the environment here
- submit() raises SubmissionError unless a non-empty transcriptionId comes back
- check_status() raises StatusQueryError for bodies that are not JSON objects
- A status object with odd or missing fields is NOT an error; it is
  classified as StatusKind.MALFORMED and left to the pipeline
"""

from __future__ import annotations

import logging

from playht_converter.api.models import (
    ConversionHandle,
    ConversionRequest,
    ConversionStatus,
)
from playht_converter.api.transport import Transport
from playht_converter.config import PLAYHT_CONVERT_URL, PLAYHT_STATUS_URL, Credentials
from playht_converter.errors import ResponseDecodeError, StatusQueryError, SubmissionError

logger = logging.getLogger(__name__)


class ConversionClient:
    """Typed interface to the play.ht convert and articleStatus endpoints.

    WHY: Keeps request headers and payload parsing in one place so the
    pipeline only deals with ConversionHandle and ConversionStatus.

    HOW: Wraps a Transport. The caller owns the transport's lifecycle
    (enter it before using the client).

    RULES:
    - convert_url defaults to PLAYHT_CONVERT_URL from config
    - status_url defaults to PLAYHT_STATUS_URL from config
    """

    def __init__(
        self,
        transport: Transport,
        credentials: Credentials,
        convert_url: str | None = None,
        status_url: str | None = None,
    ) -> None:
        self._transport = transport
        self._credentials = credentials
        self._convert_url = convert_url or PLAYHT_CONVERT_URL
        self._status_url = status_url or PLAYHT_STATUS_URL

    def _auth_headers(self) -> dict[str, str]:
        return {
            "AUTHORIZATION": "Bearer {}".format(self._credentials.authorization),
            "X-USER-ID": self._credentials.user_id,
        }

    async def submit(self, request: ConversionRequest) -> ConversionHandle:
        """Submit a conversion job and return its handle.

        WHY: Conversion is asynchronous; the convert endpoint only hands
        back a transcriptionId to poll with.

        HOW: POSTs {content, voice} and extracts transcriptionId. play.ht
        reports failures as JSON objects without that field, often with an
        "error" or "message" key, which is surfaced in the exception.

        RULES:
        - Raises SubmissionError if the body is not JSON, not an object,
          or lacks a non-empty string transcriptionId
        - TransportError from the network layer passes through unchanged

        Args:
            request: The text segments and voice to convert.

        Returns:
            ConversionHandle for the new job.
        """
        headers = {
            "accept": "audio/mpeg",
            "content-type": "application/json",
            **self._auth_headers(),
        }
        try:
            data = await self._transport.post_json(self._convert_url, headers, request.to_dict())
        except ResponseDecodeError as e:
            raise SubmissionError("Convert endpoint returned a non-JSON body", e.body) from e

        if not isinstance(data, dict):
            raise SubmissionError(
                "Convert endpoint returned {} instead of an object".format(type(data).__name__),
                data,
            )

        transcription_id = data.get("transcriptionId")
        if not isinstance(transcription_id, str) or not transcription_id:
            detail = data.get("error") or data.get("message")
            message = "Convert response has no transcriptionId"
            if detail:
                message = "{}: {}".format(message, detail)
            raise SubmissionError(message, data)

        logger.info("Submitted conversion %s (voice %s)", transcription_id, request.voice)
        return ConversionHandle(transcription_id=transcription_id)

    async def check_status(self, handle: ConversionHandle) -> ConversionStatus:
        """Query the conversion status of a submitted job.

        RULES:
        - Raises StatusQueryError if the body is not JSON or not an object
        - Returns a classified ConversionStatus otherwise
        """
        headers = {"accept": "application/json", **self._auth_headers()}
        params = {"transcriptionId": handle.transcription_id}
        try:
            data = await self._transport.get_json(self._status_url, headers, params)
        except ResponseDecodeError as e:
            raise StatusQueryError(
                "Status response for {} is not valid JSON".format(handle.transcription_id),
                e.body,
            ) from e

        if not isinstance(data, dict):
            raise StatusQueryError(
                "Status response for {} is {} instead of an object".format(
                    handle.transcription_id, type(data).__name__
                ),
                data,
            )

        status = ConversionStatus.from_dict(data)
        logger.debug(
            "Status of %s: %s (converted=%r)",
            handle.transcription_id, status.kind.value, status.raw_converted,
        )
        return status

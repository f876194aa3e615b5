"""Submit → poll → download pipeline for one conversion job.

WHY: play.ht offers no push notification. The only way to get the audio is
to submit the text, ask about the job until it stops reporting "pending",
then download the file it points to. This module owns that sequence and
its waiting/termination policy.

HOW: ConversionPipeline is a single-use state machine:
  SUBMITTING → POLLING → DOWNLOADING → DONE, with FAILED reachable from
  every state. Each transition is logged. The polling loop is driven by a
  PollPolicy whose defaults reproduce the legacy behaviour (no delay, no
  attempt or time limit); bounds and exponential backoff are opt-in.

RULES:
- Polling continues only while the status is PENDING (converted is False)
- CONVERTED and MALFORMED both end polling; MALFORMED is logged as a warning
- Download requires an audio URL; none → StatusQueryError, no download
- Errors are recorded on the pipeline, state becomes FAILED, error re-raised
- A pipeline instance runs once
- Status callback (on_status) is optional; called once per poll
"""

from __future__ import annotations

import asyncio
import enum
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from playht_converter.api.client import ConversionClient
from playht_converter.api.models import (
    ConversionHandle,
    ConversionRequest,
    ConversionStatus,
    StatusKind,
)
from playht_converter.config import load_poll_defaults
from playht_converter.core.writer import ArtifactWriter
from playht_converter.errors import PollTimeoutError, StatusQueryError

logger = logging.getLogger(__name__)


class PipelineState(str, enum.Enum):
    """Lifecycle of a pipeline run.

    RULES:
    - pending: constructed, run() not called yet
    - done and failed are terminal
    """

    PENDING = "pending"
    SUBMITTING = "submitting"
    POLLING = "polling"
    DOWNLOADING = "downloading"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class PollPolicy:
    """How long and how often to poll the status endpoint.

    WHY: An unbounded loop matches how the service has always been driven,
    but it is an operational risk. The bounds live here so callers can opt
    into them without touching the state machine.

    HOW: interval_s is the first delay after a pending status; each later
    delay is multiplied by backoff_factor and capped at max_interval_s.

    RULES:
    - max_attempts None = unlimited status queries
    - timeout_s None = no time limit (checked before each query)
    - interval_s 0 = query again immediately
    """

    max_attempts: int | None = None
    interval_s: float = 0.0
    backoff_factor: float = 1.0
    max_interval_s: float | None = None
    timeout_s: float | None = None

    def __post_init__(self) -> None:
        if self.max_attempts is not None and self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.interval_s < 0:
            raise ValueError("interval_s must not be negative")
        if self.backoff_factor < 1.0:
            raise ValueError("backoff_factor must be at least 1.0")
        if self.timeout_s is not None and self.timeout_s <= 0:
            raise ValueError("timeout_s must be positive")

    @classmethod
    def from_config(cls) -> PollPolicy:
        """Policy built from the PLAYHT_POLL_* environment variables.

        RULES:
        - Unset variables give the legacy unbounded, no-delay loop
        - Raises ConfigurationError (a ValueError) for non-numeric values
        """
        defaults = load_poll_defaults()
        return cls(
            max_attempts=defaults.max_attempts,
            interval_s=defaults.interval_s,
            backoff_factor=defaults.backoff_factor,
            timeout_s=defaults.timeout_s,
        )

    def next_interval(self, interval: float) -> float:
        interval = interval * self.backoff_factor
        if self.max_interval_s is not None:
            interval = min(interval, self.max_interval_s)
        return interval


class ConversionPipeline:
    """Runs one conversion from submission to a file on disk.

    WHY: Keeps the ordering guarantees in one place: submit strictly
    before any status query, the final status strictly before the
    download, nothing started before its predecessor finished.

    HOW: run() walks the states in order, awaiting each network call.
    Progress is visible through the state, handle, status, poll_attempts
    and error attributes, which tests and callers may inspect afterwards.

    RULES:
    - policy defaults to PollPolicy.from_config() (PLAYHT_POLL_* variables,
      the legacy unbounded loop when none are set)
    - on_status receives "Conversion status is: <raw value>" per poll
    """

    def __init__(
        self,
        client: ConversionClient,
        writer: ArtifactWriter,
        policy: PollPolicy | None = None,
        on_status: Callable[[str], None] | None = None,
        sleep: Callable[[float], object] = asyncio.sleep,
    ) -> None:
        self._client = client
        self._writer = writer
        self._policy = PollPolicy.from_config() if policy is None else policy
        self._on_status = on_status
        self._sleep = sleep

        self.state = PipelineState.PENDING
        self.handle: ConversionHandle | None = None
        self.status: ConversionStatus | None = None
        self.poll_attempts = 0
        self.error: BaseException | None = None

    def _transition(self, state: PipelineState) -> None:
        logger.debug("Pipeline %s → %s", self.state.value, state.value)
        self.state = state

    async def run(self, request: ConversionRequest, output_path: Path | str) -> Path:
        """Convert request to speech and save the audio at output_path.

        Args:
            request: Text segments and voice.
            output_path: Destination file for the MP3.

        Returns:
            The path of the written file.

        Raises:
            SubmissionError, StatusQueryError, PollTimeoutError,
            TransportError, WriteError: whatever ended the run.
        """
        if self.state is not PipelineState.PENDING:
            raise RuntimeError("ConversionPipeline instances can only run once")

        try:
            self._transition(PipelineState.SUBMITTING)
            self.handle = await self._client.submit(request)

            self._transition(PipelineState.POLLING)
            self.status = await self._poll(self.handle)

            self._transition(PipelineState.DOWNLOADING)
            audio_url = self._require_audio_url(self.handle, self.status)
            path = await self._writer.save(audio_url, output_path)
        except BaseException as e:
            self.error = e
            logger.error("Conversion failed while %s: %s", self.state.value, e)
            self._transition(PipelineState.FAILED)
            raise

        self._transition(PipelineState.DONE)
        logger.info("Conversion %s saved to %s", self.handle.transcription_id, path)
        return path

    async def _poll(self, handle: ConversionHandle) -> ConversionStatus:
        """Query the status until it is anything other than pending."""
        policy = self._policy
        interval = policy.interval_s
        start_time = time.monotonic()

        while True:
            if policy.max_attempts is not None and self.poll_attempts >= policy.max_attempts:
                raise PollTimeoutError(
                    "Conversion {} still pending after {} status queries".format(
                        handle.transcription_id, self.poll_attempts
                    )
                )
            elapsed = time.monotonic() - start_time
            if policy.timeout_s is not None and elapsed > policy.timeout_s:
                raise PollTimeoutError(
                    "Conversion {} timed out after {:.0f}s (limit: {}s)".format(
                        handle.transcription_id, elapsed, policy.timeout_s
                    )
                )

            status = await self._client.check_status(handle)
            self.poll_attempts += 1
            if self._on_status:
                self._on_status("Conversion status is: {}".format(_format_raw(status)))

            if not status.is_pending:
                if status.kind is StatusKind.MALFORMED:
                    logger.warning(
                        "Conversion %s reported converted=%r; treating it as complete",
                        handle.transcription_id, status.raw_converted,
                    )
                return status

            if interval > 0:
                await self._sleep(interval)
            interval = policy.next_interval(interval)

    @staticmethod
    def _require_audio_url(handle: ConversionHandle, status: ConversionStatus) -> str:
        if not status.audio_url:
            raise StatusQueryError(
                "Conversion {} finished polling without an audioUrl (converted={!r})".format(
                    handle.transcription_id, status.raw_converted
                )
            )
        return status.audio_url


def _format_raw(status: ConversionStatus) -> str:
    """Render the raw "converted" value the way the service wrote it.

    A missing key renders as "undefined", an explicit null as "null".
    """
    if not status.has_converted:
        return "undefined"
    value = status.raw_converted
    if value is True:
        return "true"
    if value is False:
        return "false"
    if value is None:
        return "null"
    return str(value)


async def convert_text_to_file(
    text: str,
    output_path: Path | str,
    client: ConversionClient,
    writer: ArtifactWriter,
    voice: str,
    policy: PollPolicy | None = None,
    on_status: Callable[[str], None] | None = None,
) -> Path:
    """Run a single-segment conversion through a fresh pipeline."""
    pipeline = ConversionPipeline(client, writer, policy=policy, on_status=on_status)
    return await pipeline.run(ConversionRequest.from_text(text, voice), output_path)

"""play.ht request and response dataclasses.

WHY: The play.ht v1 API exchanges small JSON objects: a conversion request,
a submission response carrying the transcription ID, and a status response
that eventually carries the audio URL. Typed dataclasses make these shapes
explicit and keep the raw-dict handling in one place.

HOW: Each dataclass maps to one JSON object. Factory methods (from_dict)
parse raw API responses. The status response is classified into an
explicit StatusKind so the pipeline transitions on a named variant instead
of comparing raw values.

RULES:
- ConversionRequest is immutable and renders the wire body via to_dict()
- ConversionHandle only exists once the API returned a non-empty ID
- StatusKind.PENDING iff the raw "converted" value is exactly False
- StatusKind.CONVERTED iff "converted" is exactly True and "audioUrl" is a
  non-empty string
- Everything else is StatusKind.MALFORMED (absent, null, 0, "yes", ...)
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ConversionRequest:
    """Text to convert and the voice to speak it with.

    RULES:
    - content is a sequence of text segments (sent as a JSON array)
    - voice selects both the language and the voice model
    """

    content: tuple[str, ...]
    voice: str

    @classmethod
    def from_text(cls, text: str, voice: str) -> ConversionRequest:
        """Build a single-segment request, the common case."""
        return cls(content=(text,), voice=voice)

    def to_dict(self) -> dict:
        return {"content": list(self.content), "voice": self.voice}


@dataclass(frozen=True)
class ConversionHandle:
    """Opaque identifier of a submitted conversion job."""

    transcription_id: str


class StatusKind(str, enum.Enum):
    """Classification of a status response.

    WHY: play.ht reports progress with a bare "converted" flag. The
    pipeline keeps polling only while that flag is exactly false and
    treats every other value as completion. Naming the three cases makes
    that lenient rule visible and testable.

    HOW: Inherits from str so values log and serialize cleanly.

    RULES:
    - pending: keep polling
    - converted: proceed to download
    - malformed: proceed to download as well (legacy lenient completion)
    """

    PENDING = "pending"
    CONVERTED = "converted"
    MALFORMED = "malformed"


@dataclass
class ConversionStatus:
    """Status response from GET /articleStatus.

    WHY: The polling loop needs to know whether to ask again, and the
    download step needs the audio URL once the job is done.

    HOW: from_dict() classifies the raw response. The raw "converted" value
    is kept as-is for progress output, so a malformed value stays visible.

    RULES:
    - kind is derived from the raw payload, never set by callers
    - audio_url is None unless the payload carries a non-empty string
    - raw_converted is the untouched "converted" value (may be anything)
    - has_converted is False when the "converted" key was absent, which
      tells a missing field apart from an explicit null
    """

    kind: StatusKind
    raw_converted: Any = None
    audio_url: str | None = None
    has_converted: bool = True

    @property
    def is_pending(self) -> bool:
        return self.kind is StatusKind.PENDING

    @classmethod
    def from_dict(cls, data: dict) -> ConversionStatus:
        """Classify a raw status response dict.

        RULES:
        - Identity checks against False/True, so 0 and 1 are MALFORMED
        - A missing "converted" key is MALFORMED, not PENDING
        """
        converted = data.get("converted")
        audio_url = data.get("audioUrl")
        if not isinstance(audio_url, str) or not audio_url:
            audio_url = None

        if converted is False:
            kind = StatusKind.PENDING
        elif converted is True and audio_url:
            kind = StatusKind.CONVERTED
        else:
            kind = StatusKind.MALFORMED

        return cls(
            kind=kind,
            raw_converted=converted,
            audio_url=audio_url,
            has_converted="converted" in data,
        )

"""PlayHT Converter — text-to-speech job runner for the play.ht v1 API.

WHY: play.ht converts text to speech asynchronously. A conversion is
submitted, reported as pending for a while, and eventually exposes an MP3
URL. This package turns that multi-request dance into a single call that
ends with an audio file on disk.

HOW: Three layers — transport (httpx), conversion client (play.ht request
and response shapes), and the core pipeline (submit → poll → download)
which also owns the artifact writer. Each layer is independently testable.

RULES:
- Credentials are passed explicitly as a Credentials struct
- Polling defaults to the legacy unbounded loop; bounds are opt-in
- Errors propagate to the caller; no layer retries on its own
"""

__version__ = "0.1.0"

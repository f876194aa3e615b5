"""Exception hierarchy for the conversion pipeline.

WHY: Callers need typed exceptions to tell a network failure from a
rejected submission, an unreadable status report, or a full disk. The
pipeline never recovers from any of them, but the CLI and tests do need to
distinguish them.

RULES:
- Every pipeline failure derives from ConversionError
- ResponseDecodeError is a TransportError (the transport failed to read JSON)
- PollTimeoutError is also a builtin TimeoutError
- Configuration problems are ConfigurationError in config.py, not here
"""

from __future__ import annotations


class ConversionError(Exception):
    """Base class for every failure of a conversion run."""


class TransportError(ConversionError):
    """Raised when an HTTP request cannot be completed.

    Covers DNS failures, refused connections, TLS errors, and non-2xx
    audio downloads.
    """


class ResponseDecodeError(TransportError):
    """Raised when a response body is not valid JSON."""

    def __init__(self, url: str, body: str) -> None:
        self.url = url
        self.body = body
        preview = body[:200] + ("..." if len(body) > 200 else "")
        super().__init__("Response from {} is not valid JSON: {!r}".format(url, preview))


class SubmissionError(ConversionError):
    """Raised when the convert endpoint does not return a transcriptionId."""

    def __init__(self, message: str, payload: object = None) -> None:
        self.payload = payload
        super().__init__(message)


class StatusQueryError(ConversionError):
    """Raised when a status response cannot be used.

    Either the body is not a JSON object, or polling ended on a status that
    carries no audio URL to download.
    """

    def __init__(self, message: str, payload: object = None) -> None:
        self.payload = payload
        super().__init__(message)


class WriteError(ConversionError):
    """Raised when the audio file cannot be written to disk."""

    def __init__(self, path: object, cause: OSError) -> None:
        self.path = path
        super().__init__("Could not write {}: {}".format(path, cause))


class PollTimeoutError(ConversionError, TimeoutError):
    """Raised when polling exceeds the configured attempts or time limit."""

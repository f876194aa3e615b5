"""Configuration constants, credentials, and .env loading.

WHY: Centralizes every configurable value — endpoint URLs, the default
voice, output location, and polling bounds — so they are easy to find and
override. Credentials are loaded here once and handed to the conversion
client explicitly instead of being read from the environment deep inside
request code.

HOW: python-dotenv loads the .env file on import. Constants are module-level
values with environment overrides. load_credentials() builds an immutable
Credentials struct and fails loudly when either secret is missing.

RULES:
- AUTHORIZATION and USER_ID come from the environment (.env), never hardcoded
- Missing credentials raise ConfigurationError (a ValueError)
- Polling defaults reproduce the legacy loop: unbounded, no delay
- Numeric overrides are parsed lazily by load_poll_defaults()
- All defaults can be overridden via environment variables
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

# Load .env from the project root (where the script is run from)
load_dotenv()

# ---------------------------------------------------------------------------
# API endpoints
# ---------------------------------------------------------------------------

PLAYHT_CONVERT_URL = os.getenv("PLAYHT_CONVERT_URL", "https://api.play.ht/api/v1/convert")
PLAYHT_STATUS_URL = os.getenv("PLAYHT_STATUS_URL", "https://api.play.ht/api/v1/articleStatus")

# ---------------------------------------------------------------------------
# Conversion defaults
# ---------------------------------------------------------------------------

DEFAULT_VOICE = os.getenv("PLAYHT_VOICE", "fi-FI-Standard-A")
"""Voice model identifier; also selects the language."""

DEFAULT_OUTPUT_DIR = os.getenv("PLAYHT_OUTPUT_DIR", "output")


class ConfigurationError(ValueError):
    """Raised when required configuration is missing or invalid.

    WHY: Every authenticated call fails without credentials, so there is
    no point starting a conversion. A ValueError subclass lets the CLI
    report it like any other configuration mistake.
    """


def _optional_int(name: str) -> int | None:
    raw = os.getenv(name, "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError("{} must be an integer, got {!r}".format(name, raw)) from None


def _optional_float(name: str) -> float | None:
    raw = os.getenv(name, "").strip()
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError("{} must be a number, got {!r}".format(name, raw)) from None


# ---------------------------------------------------------------------------
# Polling and HTTP defaults
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PollDefaults:
    """Environment-backed polling and HTTP defaults.

    WHY: These values are parsed on demand rather than at import time, so a
    malformed variable surfaces as a ConfigurationError the caller can
    report instead of breaking every import of the package.

    RULES:
    - max_attempts None = poll until the service reports something other
      than pending
    - interval_s 0.0 and backoff_factor 1.0 when unset (the legacy loop)
    - timeout_s and http_timeout_s None when unset (no limit)
    """

    max_attempts: int | None = None
    interval_s: float = 0.0
    backoff_factor: float = 1.0
    timeout_s: float | None = None
    http_timeout_s: float | None = None


def load_poll_defaults() -> PollDefaults:
    """Read PLAYHT_POLL_* and PLAYHT_HTTP_TIMEOUT_S from the environment.

    RULES:
    - Unset or blank variables fall back to the PollDefaults field default
    - Explicit values (including 0) are kept as given, for validation later
    - Raises ConfigurationError for values that are not numbers
    """
    interval_s = _optional_float("PLAYHT_POLL_INTERVAL_S")
    backoff_factor = _optional_float("PLAYHT_POLL_BACKOFF_FACTOR")
    return PollDefaults(
        max_attempts=_optional_int("PLAYHT_POLL_MAX_ATTEMPTS"),
        interval_s=0.0 if interval_s is None else interval_s,
        backoff_factor=1.0 if backoff_factor is None else backoff_factor,
        timeout_s=_optional_float("PLAYHT_POLL_TIMEOUT_S"),
        http_timeout_s=_optional_float("PLAYHT_HTTP_TIMEOUT_S"),
    )


@dataclass(frozen=True)
class Credentials:
    """play.ht API credentials.

    WHY: Both secrets are sent on every authenticated request. Bundling
    them in a frozen struct makes them explicit constructor input for the
    conversion client and keeps them immutable for the process lifetime.

    RULES:
    - authorization is the raw secret key (the "Bearer " prefix is added
      by the client)
    - user_id is sent as the X-USER-ID header
    """

    authorization: str
    user_id: str

    def __repr__(self) -> str:
        return "Credentials(authorization='***', user_id={!r})".format(self.user_id)


def load_credentials() -> Credentials:
    """Load the play.ht credentials from the environment.

    WHY: Loading from the environment (via .env) keeps secrets out of
    source code and command lines.

    HOW: Reads AUTHORIZATION and USER_ID from os.environ (populated by
    python-dotenv).

    RULES:
    - Raises ConfigurationError naming every missing variable
    - Never returns a default/placeholder value
    """
    authorization = os.getenv("AUTHORIZATION", "").strip()
    user_id = os.getenv("USER_ID", "").strip()

    missing = [
        name
        for name, value in (("AUTHORIZATION", authorization), ("USER_ID", user_id))
        if not value
    ]
    if missing:
        raise ConfigurationError(
            "play.ht credentials not configured. "
            "Add {} to the .env file in the app folder.".format(" and ".join(missing))
        )
    return Credentials(authorization=authorization, user_id=user_id)

"""Command-line interface for the PlayHT Converter.

WHY: Users need a simple way to turn a sentence into an MP3 from the
terminal. The CLI wires together credential loading, the play.ht client,
the polling pipeline, and the artifact writer behind a single command.

HOW: Uses argparse to accept the text, the output file name, voice and
polling options. Runs the async pipeline via asyncio.run(). Status
messages go to stderr; the audio is saved under --output-dir.

RULES:
- Positional arguments: text to convert, output file name
- Defaults reproduce the classic run: voice fi-FI-Standard-A, output/ dir
- Polling flags override the PLAYHT_POLL_* variables; unbounded when neither is set
- Status output goes to stderr (not stdout)
- Exit code 1 on any failure, 130 when interrupted
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from playht_converter.api.client import ConversionClient
from playht_converter.api.transport import Transport
from playht_converter.config import (
    DEFAULT_OUTPUT_DIR,
    DEFAULT_VOICE,
    PollDefaults,
    load_credentials,
    load_poll_defaults,
)
from playht_converter.core.pipeline import PollPolicy, convert_text_to_file
from playht_converter.core.writer import ArtifactWriter
from playht_converter.errors import ConversionError


def _status(msg: str) -> None:
    """Print a status message to stderr, flushed immediately."""
    print(msg, file=sys.stderr, flush=True)


def _pick(value, fallback):
    return fallback if value is None else value


def _build_policy(args: argparse.Namespace, defaults: PollDefaults) -> PollPolicy:
    """Merge polling flags over the PLAYHT_POLL_* environment defaults."""
    return PollPolicy(
        max_attempts=_pick(args.max_attempts, defaults.max_attempts),
        interval_s=_pick(args.poll_interval, defaults.interval_s),
        backoff_factor=_pick(args.backoff, defaults.backoff_factor),
        max_interval_s=args.max_poll_interval,
        timeout_s=_pick(args.poll_timeout, defaults.timeout_s),
    )


async def _run_pipeline(args: argparse.Namespace) -> Path:
    """Execute one conversion and return the saved path.

    WHY: This is the async core of the CLI. Credentials, environment
    defaults, and the policy are resolved first, inside main's error
    handling, so configuration mistakes are reported before any request.

    HOW: Opens one Transport shared by the client and the writer, then
    hands both to convert_text_to_file().
    """
    credentials = load_credentials()
    defaults = load_poll_defaults()
    policy = _build_policy(args, defaults)
    http_timeout = _pick(args.http_timeout, defaults.http_timeout_s)
    output_path = Path(args.output_dir) / args.output_name

    async with Transport(timeout=http_timeout) as transport:
        client = ConversionClient(transport, credentials)
        writer = ArtifactWriter(transport)
        return await convert_text_to_file(
            args.text,
            output_path,
            client=client,
            writer=writer,
            voice=args.voice,
            policy=policy,
            on_status=_status,
        )


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI.

    WHY: Separating parser construction from main() makes the CLI
    testable — tests can inspect the parser without running the pipeline.
    """
    parser = argparse.ArgumentParser(
        prog="playht_converter",
        description="Convert text to speech with play.ht and save the MP3.",
    )

    parser.add_argument("text", help="Text to convert to speech.")
    parser.add_argument("output_name", help="File name of the MP3 to write (e.g. greeting.mp3).")

    parser.add_argument(
        "--voice",
        default=DEFAULT_VOICE,
        help="play.ht voice identifier (default: %(default)s).",
    )
    parser.add_argument(
        "--output-dir",
        default=DEFAULT_OUTPUT_DIR,
        help="Directory to save the audio in (default: %(default)s).",
    )
    parser.add_argument(
        "--max-attempts",
        type=int,
        default=None,
        help="Give up after this many status queries (default: unlimited).",
    )
    parser.add_argument(
        "--poll-interval",
        type=float,
        default=None,
        help="Seconds to wait between status queries (default: 0).",
    )
    parser.add_argument(
        "--backoff",
        type=float,
        default=None,
        help="Multiply the poll interval by this factor after each query "
             "(default: 1.0).",
    )
    parser.add_argument(
        "--max-poll-interval",
        type=float,
        default=None,
        help="Upper bound for the poll interval in seconds.",
    )
    parser.add_argument(
        "--poll-timeout",
        type=float,
        default=None,
        help="Give up polling after this many seconds (default: no limit).",
    )
    parser.add_argument(
        "--http-timeout",
        type=float,
        default=None,
        help="Per-request HTTP timeout in seconds (default: no timeout).",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log progress to stderr.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Log every request and state transition to stderr.",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """CLI entry point.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose or args.debug:
        logging.basicConfig(
            level=logging.DEBUG if args.debug else logging.INFO,
            format="%(asctime)s %(name)s %(levelname)s %(message)s",
        )

    try:
        path = asyncio.run(_run_pipeline(args))
    except KeyboardInterrupt:
        _status("\nCancelled by user.")
        sys.exit(130)
    except (ValueError, ConversionError) as e:
        # Config errors, bad polling options, and pipeline failures
        print("Error: {}".format(e), file=sys.stderr)
        sys.exit(1)

    _status("Download complete.")
    _status("  Saved: {}".format(path))


if __name__ == "__main__":
    main()

"""Tests for the command-line interface.

WHY: The CLI is the process entry point: it must default to the classic
run (Finnish voice, output/ directory, unbounded polling), turn options
into a PollPolicy, and exit with a readable error instead of a traceback.

HOW: The pipeline itself is patched out with an AsyncMock; these tests
only check argument handling, wiring, and exit codes.
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from playht_converter.cli import build_parser, main
from playht_converter.core.pipeline import PollPolicy
from playht_converter.errors import SubmissionError

_POLL_ENV = (
    "PLAYHT_POLL_MAX_ATTEMPTS",
    "PLAYHT_POLL_INTERVAL_S",
    "PLAYHT_POLL_BACKOFF_FACTOR",
    "PLAYHT_POLL_TIMEOUT_S",
    "PLAYHT_HTTP_TIMEOUT_S",
)


@pytest.fixture(autouse=True)
def _clear_poll_env(monkeypatch):
    for name in _POLL_ENV:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def creds_env(monkeypatch):
    monkeypatch.setenv("AUTHORIZATION", "secret-key")
    monkeypatch.setenv("USER_ID", "user-42")


class TestParser:

    def test_defaults(self):
        args = build_parser().parse_args(["Tervetuloa", "greeting.mp3"])
        assert args.text == "Tervetuloa"
        assert args.output_name == "greeting.mp3"
        assert args.voice == "fi-FI-Standard-A"
        assert args.output_dir == "output"
        assert args.max_attempts is None
        assert args.max_poll_interval is None
        assert args.verbose is False
        assert args.debug is False

    def test_polling_options(self):
        args = build_parser().parse_args([
            "Hi", "hi.mp3",
            "--max-attempts", "10",
            "--poll-interval", "1.5",
            "--backoff", "2",
            "--poll-timeout", "120",
        ])
        assert args.max_attempts == 10
        assert args.poll_interval == 1.5
        assert args.backoff == 2.0
        assert args.poll_timeout == 120.0

    def test_explicit_zero_interval_is_kept(self):
        args = build_parser().parse_args(["Hi", "hi.mp3", "--poll-interval", "0"])
        assert args.poll_interval == 0.0

    @pytest.mark.parametrize("flag", ["-v", "--verbose"])
    def test_verbose_flag(self, flag):
        args = build_parser().parse_args(["Hi", "hi.mp3", flag])
        assert args.verbose is True
        assert args.debug is False

    def test_debug_flag(self):
        args = build_parser().parse_args(["Hi", "hi.mp3", "--debug"])
        assert args.debug is True


class TestMain:

    def test_runs_pipeline_and_reports(self, tmp_path, creds_env, capsys):
        saved = tmp_path / "greeting.mp3"
        runner = AsyncMock(return_value=saved)

        with patch("playht_converter.cli.convert_text_to_file", runner):
            main([
                "Tervetuloa", "greeting.mp3",
                "--output-dir", str(tmp_path),
                "--voice", "fi-FI-Standard-A",
                "--max-attempts", "5",
            ])

        args, kwargs = runner.call_args
        assert args == ("Tervetuloa", Path(tmp_path) / "greeting.mp3")
        assert kwargs["voice"] == "fi-FI-Standard-A"
        assert kwargs["policy"] == PollPolicy(max_attempts=5)
        assert "Download complete." in capsys.readouterr().err

    def test_without_flags_or_env_polls_unbounded(self, tmp_path, creds_env):
        runner = AsyncMock(return_value=tmp_path / "hi.mp3")

        with patch("playht_converter.cli.convert_text_to_file", runner):
            main(["Hi", "hi.mp3", "--output-dir", str(tmp_path)])

        assert runner.call_args.kwargs["policy"] == PollPolicy()

    def test_env_supplies_poll_defaults(self, tmp_path, creds_env, monkeypatch):
        monkeypatch.setenv("PLAYHT_POLL_TIMEOUT_S", "30")
        monkeypatch.setenv("PLAYHT_POLL_MAX_ATTEMPTS", "9")
        runner = AsyncMock(return_value=tmp_path / "hi.mp3")

        with patch("playht_converter.cli.convert_text_to_file", runner):
            main(["Hi", "hi.mp3", "--output-dir", str(tmp_path), "--max-attempts", "4"])

        assert runner.call_args.kwargs["policy"] == PollPolicy(max_attempts=4, timeout_s=30.0)

    def test_bad_poll_env_exit_1_without_traceback(self, tmp_path, creds_env, monkeypatch, capsys):
        monkeypatch.setenv("PLAYHT_POLL_MAX_ATTEMPTS", "lots")
        runner = AsyncMock()

        with patch("playht_converter.cli.convert_text_to_file", runner):
            with pytest.raises(SystemExit) as exc_info:
                main(["Hi", "hi.mp3", "--output-dir", str(tmp_path)])

        err = capsys.readouterr().err
        assert exc_info.value.code == 1
        assert "Error: PLAYHT_POLL_MAX_ATTEMPTS must be an integer" in err
        assert "Traceback" not in err
        runner.assert_not_called()

    def test_bad_http_timeout_env_exit_1(self, tmp_path, creds_env, monkeypatch, capsys):
        monkeypatch.setenv("PLAYHT_HTTP_TIMEOUT_S", "soon")

        with pytest.raises(SystemExit) as exc_info:
            main(["Hi", "hi.mp3", "--output-dir", str(tmp_path)])

        assert exc_info.value.code == 1
        assert "PLAYHT_HTTP_TIMEOUT_S" in capsys.readouterr().err

    def test_missing_credentials_exit_1(self, monkeypatch, capsys):
        monkeypatch.delenv("AUTHORIZATION", raising=False)
        monkeypatch.delenv("USER_ID", raising=False)
        runner = AsyncMock()

        with patch("playht_converter.cli.convert_text_to_file", runner):
            with pytest.raises(SystemExit) as exc_info:
                main(["Hi", "hi.mp3"])

        assert exc_info.value.code == 1
        assert "credentials not configured" in capsys.readouterr().err
        runner.assert_not_called()

    def test_pipeline_error_exit_1(self, tmp_path, creds_env, capsys):
        runner = AsyncMock(side_effect=SubmissionError("Convert response has no transcriptionId"))

        with patch("playht_converter.cli.convert_text_to_file", runner):
            with pytest.raises(SystemExit) as exc_info:
                main(["Hi", "hi.mp3", "--output-dir", str(tmp_path)])

        assert exc_info.value.code == 1
        assert "Error: Convert response has no transcriptionId" in capsys.readouterr().err

    def test_invalid_policy_exit_1(self, creds_env, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["Hi", "hi.mp3", "--max-attempts", "0"])
        assert exc_info.value.code == 1
        assert "max_attempts" in capsys.readouterr().err

    @pytest.mark.parametrize("flag, level", [("--verbose", 20), ("--debug", 10)])
    def test_logging_level_follows_flag(self, tmp_path, creds_env, flag, level):
        runner = AsyncMock(return_value=tmp_path / "hi.mp3")

        with patch("playht_converter.cli.convert_text_to_file", runner), \
                patch("playht_converter.cli.logging.basicConfig") as basic_config:
            main(["Hi", "hi.mp3", "--output-dir", str(tmp_path), flag])

        assert basic_config.call_args.kwargs["level"] == level

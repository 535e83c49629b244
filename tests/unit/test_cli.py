"""
Unit tests for the command-line entry point.
"""

import socket
from pathlib import Path

import pytest

from staticserver import __version__
from staticserver.__main__ import build_parser, main
from staticserver.config import ServerConfig


class TestParser:
    """Tests for argument parsing."""

    def test_defaults_from_config(self):
        args = build_parser(ServerConfig()).parse_args([])

        assert args.host == "0.0.0.0"
        assert args.port == 6789
        assert args.root == "."
        assert args.workers is None
        assert args.log_level == "INFO"
        assert args.log_format == "text"

    def test_defaults_follow_env(self, monkeypatch):
        monkeypatch.setenv("STATICSERVER_PORT", "9000")
        args = build_parser(ServerConfig.from_env()).parse_args([])

        assert args.port == 9000

    def test_short_flags(self):
        args = build_parser(ServerConfig()).parse_args(
            ["-p", "8000", "-r", "/srv", "-H", "127.0.0.1", "-w", "4", "-l", "debug"]
        )

        assert args.port == 8000
        assert args.root == "/srv"
        assert args.host == "127.0.0.1"
        assert args.workers == 4
        assert args.log_level == "DEBUG"

    def test_bad_log_format(self):
        with pytest.raises(SystemExit) as exc_info:
            build_parser(ServerConfig()).parse_args(["--log-format", "xml"])

        assert exc_info.value.code == 2


class TestMain:
    """Tests for main()."""

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])

        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out

    def test_invalid_root_exits_2(self, tmp_path: Path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--root", str(tmp_path / "missing")])

        assert exc_info.value.code == 2
        assert "Document root" in capsys.readouterr().err

    def test_bind_failure_exits_1(self, document_root: Path, capsys):
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as blocker:
            blocker.bind(("127.0.0.1", 0))
            blocker.listen(1)
            port = blocker.getsockname()[1]

            with pytest.raises(SystemExit) as exc_info:
                main([
                    "--host", "127.0.0.1",
                    "--port", str(port),
                    "--root", str(document_root),
                    "--log-level", "WARNING",
                ])

        assert exc_info.value.code == 1
        assert str(port) in capsys.readouterr().err

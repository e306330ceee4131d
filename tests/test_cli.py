"""Tests for mdserve._cli — argument parsing and dispatch."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from mdserve._cli import _build_parser, main
from mdserve._errors import StartupError


class TestBuildParser:
    """_build_parser — CLI argument parsing."""

    def test_file_only(self) -> None:
        args = _build_parser().parse_args(["README.md"])
        assert args.file == "README.md"
        assert args.port is None
        assert args.host is None
        assert args.watch is None
        assert args.open_browser is None

    def test_short_flags(self) -> None:
        args = _build_parser().parse_args(["doc.md", "-p", "8080", "-w", "-o"])
        assert args.port == 8080
        assert args.watch is True
        assert args.open_browser is True

    def test_long_flags(self) -> None:
        args = _build_parser().parse_args(
            ["doc.md", "--port", "4000", "--host", "0.0.0.0", "--watch", "--open"]
        )
        assert args.port == 4000
        assert args.host == "0.0.0.0"
        assert args.watch is True
        assert args.open_browser is True

    @pytest.mark.parametrize("value", ["0", "65536", "abc", "-3"])
    def test_invalid_port(self, value: str, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as info:
            _build_parser().parse_args(["doc.md", f"--port={value}"])
        assert info.value.code == 2
        assert f'Invalid port number "{value}"' in capsys.readouterr().err

    def test_file_required(self) -> None:
        with pytest.raises(SystemExit):
            _build_parser().parse_args([])

    def test_version(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as info:
            _build_parser().parse_args(["--version"])
        assert info.value.code == 0
        assert "mdserve 0.1.0" in capsys.readouterr().out


class TestMain:
    """main — dispatch to serve() and error handling."""

    def test_dispatches_to_serve(self, doc: Path) -> None:
        with patch("mdserve.app.serve") as serve:
            main([str(doc), "--port", "4001", "--watch"])
        serve.assert_called_once_with(
            doc, host=None, port=4001, watch=True, open_browser=None,
        )

    def test_non_markdown_file_passed_through(self, tmp_path: Path) -> None:
        path = tmp_path / "notes.txt"
        path.write_text("# hi\n")
        with patch("mdserve.app.serve") as serve:
            main([str(path)])
        assert serve.call_args.args == (path,)

    def test_mdserve_error_exits_1(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        with (
            patch("mdserve.app.serve", side_effect=StartupError("Port 3000 is already in use")),
            pytest.raises(SystemExit) as info,
        ):
            main([str(tmp_path / "a.md")])
        assert info.value.code == 1
        assert "Error: Port 3000 is already in use" in capsys.readouterr().err

    def test_missing_file_exits_1(self, tmp_path: Path) -> None:
        with pytest.raises(SystemExit) as info:
            main([str(tmp_path / "missing.md")])
        assert info.value.code == 1

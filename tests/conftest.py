"""Shared test fixtures for mdserve."""

from __future__ import annotations

import threading
from pathlib import Path

import pytest

from mdserve._errors import RenderError


@pytest.fixture
def doc(tmp_path: Path) -> Path:
    """A small Markdown document with one image next to it.

    Layout::

        tmp_path/
            README.md
            img/logo.png
    """
    path = tmp_path / "README.md"
    path.write_text("# Hello World\n\nSee ![logo](img/logo.png).\n", encoding="utf-8")

    img = tmp_path / "img"
    img.mkdir()
    (img / "logo.png").write_bytes(b"\x89PNG\r\n\x1a\nfake")

    return path


class FakeRenderer:
    """Stand-in for ``render_markdown``.

    Counts calls, can block inside a render until released, and can be told
    to fail the next renders with ``RenderError``.
    """

    def __init__(self) -> None:
        self.calls = 0
        self.fail = False
        self.block = False
        self.started = threading.Event()
        self.release = threading.Event()
        self._lock = threading.Lock()

    def __call__(self, path: Path) -> str:
        with self._lock:
            self.calls += 1
            n = self.calls
        if self.block:
            self.started.set()
            self.release.wait(timeout=5)
        if self.fail:
            msg = f"render {n} rejected"
            raise RenderError(msg)
        return f"<p>render {n}</p>"


@pytest.fixture
def fake_renderer() -> FakeRenderer:
    return FakeRenderer()

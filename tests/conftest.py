from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable

import pytest


def pytest_configure() -> None:
    src_root = Path(__file__).resolve().parents[1] / "src"
    src_path = str(src_root)
    if src_path not in sys.path:
        sys.path.insert(0, src_path)


@pytest.fixture
def write_edges(tmp_path: Path) -> Callable[..., Path]:
    """Write ``(source, target[, weight])`` rows as a tab-separated edge list."""

    def _write(name: str, rows, directory: Path | None = None) -> Path:
        path = (directory or tmp_path) / name
        path.parent.mkdir(parents=True, exist_ok=True)
        lines = ["\t".join(str(value) for value in row) for row in rows]
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    return _write

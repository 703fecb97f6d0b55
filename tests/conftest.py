"""Test configuration that puts src/ on the path and builds chapter folders."""

import sys
from pathlib import Path
from typing import Callable

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

sys.path.insert(0, str(SRC))


@pytest.fixture()
def write_chapters(tmp_path: Path) -> Callable[..., Path]:
    """Create a directory of chapter files from name -> markup pairs."""

    def _write(chapters: dict[str, str], name: str = "book") -> Path:
        directory = tmp_path / name
        directory.mkdir()
        for filename, markup in chapters.items():
            (directory / filename).write_text(markup, encoding="utf-8")
        return directory

    return _write

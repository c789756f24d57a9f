"""Pytest configuration and fixtures."""

from pathlib import Path
from typing import Callable

import pytest

from notegraph.vault.graph import DiagnosticReport, NoteGraph
from notegraph.vault.loader import load_graph


@pytest.fixture
def make_vault(tmp_path: Path) -> Callable[[dict[str, str]], Path]:
    """Write {relative path: content} into a fresh notes directory."""

    def _make(files: dict[str, str]) -> Path:
        root = tmp_path / "notes"
        root.mkdir(exist_ok=True)
        for rel, content in files.items():
            path = root / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return root

    return _make


@pytest.fixture
def abc_vault(make_vault) -> Path:
    """A has no links, B links to A, C links to a missing note."""
    return make_vault(
        {
            "A.md": "# A\n\nNothing here.\n",
            "B.md": "# B\n\nSee [[A]].\n",
            "C.md": "# C\n\nSee [[Z]].\n",
        }
    )


@pytest.fixture
def abc_graph(abc_vault: Path) -> tuple[NoteGraph, DiagnosticReport]:
    return load_graph(abc_vault)

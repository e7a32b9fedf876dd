"""Shared test fixtures for the markdown board tests."""

import sys
from pathlib import Path

import pytest

# Ensure kanban_server.py at the project root is importable
sys.path.insert(0, str(Path(__file__).parent.parent))

from mdkanban.source import BoardFile
from mdkanban.store import BoardStore


SAMPLE_MD = """# Projects

## Backlog
- [ ] write spec
- [ ] pick a name

## Active
- [x] draft design

## Done
"""


@pytest.fixture
def board_path(tmp_path):
    return tmp_path / "PROJECTS.md"


@pytest.fixture
def store(board_path):
    board_path.write_text(SAMPLE_MD, encoding="utf-8")
    return BoardStore(BoardFile(board_path))

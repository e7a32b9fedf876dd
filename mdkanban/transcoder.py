"""
Markdown <-> Board transcoder.

File dialect:

    # Projects

    ## Backlog
    - [ ] write spec

    ## Active
    - [x] draft design

Parsing is lenient: unknown headings, prose, blank lines and malformed
checkboxes are skipped, never rejected. Task ids are not written to the
file, so every parse hands out fresh ids.
"""
import re
import uuid
from typing import Iterable

from .schema import Board, Task, DEFAULT_COLUMNS

PREAMBLE = "# Projects\n\n"

HEADING_RE = re.compile(r"^## (.+)$")
# Only a lowercase x marks completion; [X] is read as an open task.
TASK_RE = re.compile(r"^- \[([ xX])\] (.+)$")

ID_LENGTH = 7


def generate_id() -> str:
    """Short random task id, unique enough for a hand-sized board."""
    return uuid.uuid4().hex[:ID_LENGTH]


def parse(content: str, columns: Iterable[str] = DEFAULT_COLUMNS) -> Board:
    """Parse markdown text into a Board holding every recognized column."""
    board = Board.empty(list(columns))
    current = None

    for line in content.split("\n"):
        heading = HEADING_RE.match(line)
        if heading:
            name = heading.group(1).strip()
            if name in board.tasks:
                current = name
            continue

        match = TASK_RE.match(line)
        if match and current:
            text = match.group(2).strip()
            if not text:
                continue
            board.tasks[current].append(Task(
                id=generate_id(),
                text=text,
                done=match.group(1) == "x",
            ))

    return board


def serialize(board: Board) -> str:
    """Render a Board as markdown, columns in configured order."""
    md = PREAMBLE
    for col in board.columns:
        md += f"## {col}\n"
        for task in board.column(col):
            checkbox = "[x]" if task.done else "[ ]"
            md += f"- {checkbox} {task.text}\n"
        md += "\n"
    return md.strip() + "\n"

"""
Board store: validated mutations and the canonical in-memory snapshot.

The mutators are pure: each takes a Board, returns a new Board, and leaves
its input untouched. A mutation aimed at a task or column that no longer
exists (stale client state) returns the board unchanged.

BoardStore owns the current snapshot between requests and writes it back
through a BoardFile on every accepted change (full replace, last writer wins).
"""
import logging
import threading
from typing import Optional, Iterable, Callable

from .schema import Board, Task, DEFAULT_COLUMNS
from .source import BoardFile
from .transcoder import parse, serialize, generate_id

logger = logging.getLogger(__name__)


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Pure mutators
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def move_task(board: Board, task_id: str, from_column: str, to_column: str) -> Board:
    """Move a task to the bottom of another column."""
    if from_column == to_column or to_column not in board.columns:
        return board
    idx = board.find(task_id, from_column)
    if idx is None:
        return board

    moved = board.copy()
    task = moved.tasks[from_column].pop(idx)
    moved.tasks[to_column].append(task)
    return moved


def toggle_done(board: Board, task_id: str, column: str) -> Board:
    """Flip the done flag of a task."""
    idx = board.find(task_id, column)
    if idx is None:
        return board

    toggled = board.copy()
    task = toggled.tasks[column][idx]
    task.done = not task.done
    return toggled


def delete_task(board: Board, task_id: str, column: str) -> Board:
    """Remove a task by id."""
    idx = board.find(task_id, column)
    if idx is None:
        return board

    pruned = board.copy()
    del pruned.tasks[column][idx]
    return pruned


def add_task(board: Board, text: str, id_factory: Callable[[], str] = generate_id) -> Board:
    """Append a new open task to the first column. Blank text is ignored."""
    text = " ".join(text.splitlines()).strip()
    if not text or not board.columns:
        return board

    existing = board.task_ids()
    task_id = id_factory()
    while task_id in existing:
        task_id = id_factory()

    grown = board.copy()
    grown.tasks[board.columns[0]].append(Task(id=task_id, text=text, done=False))
    return grown


def normalize_board(
    board: Board,
    columns: Optional[Iterable[str]] = None,
    id_factory: Callable[[], str] = generate_id,
) -> Board:
    """
    Clean a client-supplied board before it is persisted.

    - tasks in columns outside the recognized list are discarded
    - task text is trimmed and line breaks are folded into spaces
    - tasks with blank text are dropped
    - a repeated id gets a fresh one so ids stay unique
    """
    columns = list(columns) if columns is not None else list(board.columns)

    dropped = [col for col in board.tasks if col not in columns and board.tasks[col]]
    if dropped:
        logger.debug(f"discarding tasks in unrecognized columns: {dropped}")

    seen = set()
    clean = Board.empty(columns)
    for col in columns:
        for task in board.column(col):
            text = " ".join(task.text.splitlines()).strip()
            if not text:
                continue
            task_id = task.id
            while task_id in seen:
                task_id = id_factory()
            seen.add(task_id)
            clean.tasks[col].append(Task(id=task_id, text=text, done=bool(task.done)))
    return clean


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# BoardStore
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class BoardStore:
    """Owns the current board and syncs it with the markdown file."""

    def __init__(self, source: BoardFile, columns: Iterable[str] = DEFAULT_COLUMNS):
        self.source = source
        self.columns = list(columns)
        self._board: Optional[Board] = None
        self._last_text: Optional[str] = None
        self._lock = threading.Lock()

    # ── transcoding ──

    def load(self, raw_text: Optional[str]) -> Board:
        """Board from file text; None (no file) gives an empty board."""
        if raw_text is None:
            return Board.empty(self.columns)
        return parse(raw_text, self.columns)

    def save(self, board: Board) -> str:
        """Normalized markdown for a board."""
        return serialize(normalize_board(board, self.columns))

    # ── snapshot ──

    def current(self) -> Board:
        """Copy of the current board, reading the file on first use."""
        with self._lock:
            if self._board is None:
                text = self.source.read()
                self._board = self.load(text)
                self._last_text = text
            return self._board.copy()

    def replace(self, board: Board) -> bool:
        """
        Persist a full board. Returns False if the write failed, in which
        case the previous snapshot is kept.
        """
        normalized = normalize_board(board, self.columns)
        text = serialize(normalized)
        with self._lock:
            if not self.source.write(text):
                logger.error(f"Board not saved; keeping previous snapshot ({self.source.path})")
                return False
            self._board = normalized
            self._last_text = text
        return True

    def refresh(self) -> bool:
        """
        Re-read the file after an outside edit.

        Returns True if the snapshot was replaced. Text identical to what the
        store last read or wrote is ignored so ids survive our own writes.
        """
        text = self.source.read()
        with self._lock:
            if self._board is not None and text == self._last_text:
                return False
            self._board = self.load(text)
            self._last_text = text
        logger.info(f"Reloaded board from {self.source.path}")
        return True

    # ── first-class mutations ──

    def _apply(self, mutate: Callable[..., Board], *args) -> Optional[Board]:
        """Run a pure mutator on the snapshot and persist the result.

        Returns the resulting board, or None if the write failed.
        """
        before = self.current()
        after = mutate(before, *args)
        if after is before:
            return before
        if not self.replace(after):
            return None
        return self.current()

    def move(self, task_id: str, from_column: str, to_column: str) -> Optional[Board]:
        return self._apply(move_task, task_id, from_column, to_column)

    def toggle(self, task_id: str, column: str) -> Optional[Board]:
        return self._apply(toggle_done, task_id, column)

    def delete(self, task_id: str, column: str) -> Optional[Board]:
        return self._apply(delete_task, task_id, column)

    def add(self, text: str) -> Optional[Board]:
        return self._apply(add_task, text)

"""
Tests for the board store: pure mutators, normalization, snapshot and file sync.
"""
import itertools
from pathlib import Path
from unittest.mock import patch

from mdkanban.schema import Board, Task
from mdkanban.source import BoardFile
from mdkanban.store import (
    BoardStore,
    add_task,
    delete_task,
    move_task,
    normalize_board,
    toggle_done,
)


def sample_board() -> Board:
    return Board(tasks={
        "Backlog": [Task("a", "write spec"), Task("b", "pick a name")],
        "Active": [Task("c", "draft design", done=True)],
        "Done": [],
    })


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Mutator Tests
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_move_appends_to_end_of_target():
    """Moved task lands at the bottom even if the target already has tasks"""
    board = sample_board()
    moved = move_task(board, "a", "Backlog", "Active")
    assert [t.id for t in moved.tasks["Backlog"]] == ["b"]
    assert [t.id for t in moved.tasks["Active"]] == ["c", "a"]


def test_move_does_not_touch_input():
    board = sample_board()
    move_task(board, "a", "Backlog", "Done")
    assert board == sample_board()


def test_move_noop_cases():
    board = sample_board()
    assert move_task(board, "missing", "Backlog", "Active") is board
    assert move_task(board, "a", "Active", "Done") is board  # wrong source column
    assert move_task(board, "a", "Backlog", "Backlog") is board
    assert move_task(board, "a", "Backlog", "Someday") is board
    assert move_task(board, "a", "Someday", "Active") is board


def test_toggle_done_flips_flag():
    board = sample_board()
    toggled = toggle_done(board, "c", "Active")
    assert toggled.tasks["Active"][0].done is False
    assert board.tasks["Active"][0].done is True
    assert toggle_done(toggled, "c", "Active") == board


def test_toggle_unknown_task_is_noop():
    board = sample_board()
    assert toggle_done(board, "nonexistent", "Backlog") == sample_board()
    assert toggle_done(board, "a", "Done") is board


def test_delete_task():
    board = sample_board()
    pruned = delete_task(board, "b", "Backlog")
    assert [t.id for t in pruned.tasks["Backlog"]] == ["a"]
    assert len(board.tasks["Backlog"]) == 2


def test_delete_absent_is_noop():
    board = sample_board()
    assert delete_task(board, "b", "Active") is board
    assert delete_task(board, "zzz", "Backlog") is board


def test_add_task_goes_to_first_column():
    board = sample_board()
    grown = add_task(board, "  new idea  ")
    assert [t.text for t in grown.tasks["Backlog"]] == ["write spec", "pick a name", "new idea"]
    new = grown.tasks["Backlog"][-1]
    assert new.done is False
    assert new.id not in board.task_ids()


def test_add_task_first_column_is_configurable():
    board = Board.empty(["Inbox", "Later"])
    grown = add_task(board, "triage")
    assert [t.text for t in grown.tasks["Inbox"]] == ["triage"]
    assert grown.tasks["Later"] == []


def test_add_blank_task_is_noop():
    board = sample_board()
    assert add_task(board, "") is board
    assert add_task(board, "   \n\t ") is board


def test_add_task_regenerates_colliding_id():
    ids = itertools.chain(["a", "c"], ["fresh"])
    grown = add_task(sample_board(), "another", id_factory=lambda: next(ids))
    assert grown.tasks["Backlog"][-1].id == "fresh"


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Normalization Tests
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_normalize_drops_blank_and_unknown():
    board = Board(tasks={
        "Backlog": [Task("a", "  keep me "), Task("b", "   ")],
        "Someday": [Task("s", "invented column")],
    })
    clean = normalize_board(board)
    assert list(clean.tasks) == ["Backlog", "Active", "Done"]
    assert [(t.id, t.text) for t in clean.tasks["Backlog"]] == [("a", "keep me")]


def test_normalize_folds_line_breaks():
    board = Board(tasks={"Active": [Task("a", "first\nsecond\r\nthird")]})
    clean = normalize_board(board)
    assert clean.tasks["Active"][0].text == "first second third"


def test_normalize_gives_duplicates_new_ids():
    board = Board(tasks={
        "Backlog": [Task("dup", "one")],
        "Done": [Task("dup", "two", True)],
    })
    clean = normalize_board(board, id_factory=lambda: "new")
    assert [t.id for t in clean.all_tasks()] == ["dup", "new"]


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# BoardStore Tests
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_load_missing_source_gives_empty_board(tmp_path):
    store = BoardStore(BoardFile(tmp_path / "nope.md"))
    assert store.load(None) == Board.empty()
    board = store.current()
    assert board.all_tasks() == []
    assert list(board.tasks) == ["Backlog", "Active", "Done"]


def test_save_normalizes_and_serializes(tmp_path):
    store = BoardStore(BoardFile(tmp_path / "b.md"))
    board = Board(tasks={
        "Backlog": [Task("a", " x "), Task("b", "")],
        "Elsewhere": [Task("e", "dropped")],
    })
    assert store.save(board) == "# Projects\n\n## Backlog\n- [ ] x\n\n## Active\n\n## Done\n"


def test_current_reads_file_once(store):
    first = store.current()
    assert [t.text for t in first.tasks["Backlog"]] == ["write spec", "pick a name"]
    # Ids stay stable while the store holds the snapshot
    assert store.current() == first


def test_current_returns_copy(store):
    board = store.current()
    board.tasks["Backlog"].clear()
    assert len(store.current().tasks["Backlog"]) == 2


def test_replace_writes_file(store, board_path):
    board = store.current()
    board = move_task(board, board.tasks["Backlog"][0].id, "Backlog", "Done")
    assert store.replace(board)
    assert board_path.read_text(encoding="utf-8") == (
        "# Projects\n\n## Backlog\n- [ ] pick a name\n\n"
        "## Active\n- [x] draft design\n\n## Done\n- [ ] write spec\n"
    )
    assert store.current() == board


def test_replace_failure_keeps_snapshot(store, board_path):
    """A failed write leaves both the file and the snapshot untouched"""
    before = store.current()
    original = board_path.read_text(encoding="utf-8")
    with patch.object(BoardFile, "write", return_value=False):
        assert not store.replace(Board.empty())
    assert store.current() == before
    assert board_path.read_text(encoding="utf-8") == original


def test_store_mutations_persist(store, board_path):
    board = store.add("ship it")
    new_id = board.tasks["Backlog"][-1].id

    board = store.move(new_id, "Backlog", "Active")
    assert board.tasks["Active"][-1].id == new_id

    board = store.toggle(new_id, "Active")
    assert board.tasks["Active"][-1].done is True
    assert "- [x] ship it" in board_path.read_text(encoding="utf-8")

    board = store.delete(new_id, "Active")
    assert new_id not in board.task_ids()
    assert "ship it" not in board_path.read_text(encoding="utf-8")


def test_store_noop_mutation_does_not_write(store, board_path):
    mtime = board_path.stat().st_mtime_ns
    with patch.object(BoardFile, "write") as write:
        board = store.toggle("nonexistent", "Backlog")
    write.assert_not_called()
    assert board == store.current()
    assert board_path.stat().st_mtime_ns == mtime


def test_store_mutation_write_failure_returns_none(store):
    with patch.object(BoardFile, "write", return_value=False):
        assert store.add("lost") is None
    assert "lost" not in [t.text for t in store.current().all_tasks()]


def test_refresh_ignores_own_writes(store):
    board = store.add("mine")
    assert store.refresh() is False
    assert store.current() == board


def test_refresh_picks_up_hand_edits(store, board_path):
    store.current()
    board_path.write_text("## Done\n- [x] edited by hand\n", encoding="utf-8")
    assert store.refresh() is True
    board = store.current()
    assert [(t.text, t.done) for t in board.all_tasks()] == [("edited by hand", True)]


def test_refresh_after_file_removed(store, board_path):
    store.current()
    Path(board_path).unlink()
    assert store.refresh() is True
    assert store.current().all_tasks() == []

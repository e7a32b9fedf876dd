#!/usr/bin/env python3
"""
Quick verification that the markdown board works end-to-end.

    python verify_board.py                          # offline, temp file
    python verify_board.py --url http://localhost:3456   # against a running server
"""
import argparse
import sys
import tempfile
from pathlib import Path

from mdkanban.client import BoardClient
from mdkanban.source import BoardFile
from mdkanban.store import BoardStore


def verify_local() -> bool:
    print("\n[1/5] Creating store on a temp file...")
    tmp_dir = tempfile.mkdtemp(prefix="mdkanban-")
    path = Path(tmp_dir) / "PROJECTS.md"
    store = BoardStore(BoardFile(path))
    board = store.current()
    print(f"✅ Store created, columns: {' → '.join(board.columns)}")

    print("\n[2/5] Adding tasks...")
    store.add("write spec")
    board = store.add("draft design")
    first = board.columns[0]
    print(f"   {first}: {[t.text for t in board.tasks[first]]}")

    print("\n[3/5] Moving and toggling...")
    task = board.tasks[first][1]
    board = store.move(task.id, first, board.columns[1])
    board = store.toggle(task.id, board.columns[1])
    print(f"   {board.columns[1]}: {[(t.text, t.done) for t in board.tasks[board.columns[1]]]}")

    print("\n[4/5] File contents:")
    print(path.read_text(encoding="utf-8"))

    print("[5/5] Reloading from disk...")
    reloaded = store.load(store.source.read())
    same = [(t.text, t.done) for t in reloaded.all_tasks()] == \
           [(t.text, t.done) for t in board.all_tasks()]
    print("✅ Round trip matches" if same else "❌ Round trip differs")
    return same


def verify_remote(url: str) -> bool:
    client = BoardClient(url)

    print(f"\n[1/3] Checking {url}/health ...")
    if not client.health():
        print("❌ Server not reachable")
        return False
    print("✅ Server up")

    print("\n[2/3] Fetching board...")
    board = client.get_board()
    if board is None:
        print("❌ Could not fetch board")
        return False
    for col in board.columns:
        print(f"   {col}: {len(board.tasks[col])} tasks")

    print("\n[3/3] Saving the same board back...")
    if not client.save_board(board):
        print("❌ Save failed")
        return False
    print("✅ Saved")
    return True


def main():
    parser = argparse.ArgumentParser(description="Verify the markdown board")
    parser.add_argument("--url", help="Base URL of a running kanban_server")
    args = parser.parse_args()

    print("=" * 60)
    print("mdkanban Verification")
    print("=" * 60)

    ok = verify_remote(args.url) if args.url else verify_local()

    print("\n" + "=" * 60)
    print("✅ ALL CHECKS PASSED" if ok else "❌ CHECKS FAILED")
    print("=" * 60)
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())

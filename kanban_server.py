#!/usr/bin/env python3
"""
mdkanban Server
---------------
Serves the dashboard and a JSON API backed by a markdown checklist file.

Usage:
    python kanban_server.py                     # ./PROJECTS.md
    python kanban_server.py ~/notes/PROJECTS.md --port 4000
    KANBAN_PORT=4000 python kanban_server.py

Access:
    http://localhost:3456

API:
    GET    /api/board              → { columns, board }
    POST   /api/board              → body { board }, full replace; { success }
    GET    /api/config             → { columns, file }
    POST   /api/tasks              → body { text }; adds to the first column
    POST   /api/tasks/<id>/move    → body { from, to }
    POST   /api/tasks/<id>/toggle  → body { column }
    DELETE /api/tasks/<id>?column= → removes the task
    GET    /health                 → { status, file, columns }

Task endpoints answer { success, columns, board }. A save that cannot be
written answers 500 and leaves the in-memory board as it was.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from flask import Flask, jsonify, request, send_from_directory, abort

from mdkanban.config import BoardConfig, ConfigError
from mdkanban.schema import Board, PayloadError
from mdkanban.source import BoardFile
from mdkanban.store import BoardStore

logger = logging.getLogger("kanban")

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def _board_response(board: Optional[Board], status: int = 200):
    """Shared reply for task endpoints; None means the write failed."""
    if board is None:
        return jsonify({"success": False}), 500
    return jsonify({"success": True, **board.to_dict()}), status


def _json_body() -> dict:
    data = request.get_json(force=True, silent=True)
    if not isinstance(data, dict):
        raise PayloadError("request body must be a JSON object")
    return data


def _string_field(data: dict, key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise PayloadError(f"'{key}' must be a string")
    return value


def create_app(config: Optional[BoardConfig] = None, store: Optional[BoardStore] = None) -> Flask:
    """Build the Flask app around a store (one is created from config if omitted)."""
    if config is None:
        config = BoardConfig.load()
    if store is None:
        store = BoardStore(BoardFile(config.projects_file), config.columns)

    app = Flask(__name__, static_folder=None)
    app.json.sort_keys = False
    app.config["BOARD_CONFIG"] = config
    app.config["BOARD_STORE"] = store

    # ── CORS ─────────────────────────────────────────────────────────────────

    @app.before_request
    def preflight():
        if request.method == "OPTIONS" and request.path.startswith("/api/"):
            return "", 204

    @app.after_request
    def add_cors_headers(response):
        if request.path.startswith("/api/"):
            response.headers.update(CORS_HEADERS)
        return response

    @app.errorhandler(PayloadError)
    def bad_payload(e):
        logger.warning(f"Rejected request to {request.path}: {e}")
        return jsonify({"error": str(e)}), 400

    # ── Board ────────────────────────────────────────────────────────────────

    @app.route("/api/board", methods=["GET"])
    def api_board():
        return jsonify(store.current().to_dict())

    @app.route("/api/board", methods=["POST"])
    def api_board_save():
        board = Board.from_payload(_json_body(), store.columns)
        success = store.replace(board)
        return jsonify({"success": success}), (200 if success else 500)

    @app.route("/api/config", methods=["GET"])
    def api_config():
        return jsonify({"columns": store.columns, "file": str(store.source.path)})

    # ── Tasks ────────────────────────────────────────────────────────────────

    @app.route("/api/tasks", methods=["POST"])
    def api_add_task():
        text = _string_field(_json_body(), "text")
        before = store.current()
        board = store.add(text)
        created = board is not None and board != before
        return _board_response(board, 201 if created else 200)

    @app.route("/api/tasks/<task_id>/move", methods=["POST"])
    def api_move_task(task_id):
        data = _json_body()
        return _board_response(store.move(
            task_id, _string_field(data, "from"), _string_field(data, "to")
        ))

    @app.route("/api/tasks/<task_id>/toggle", methods=["POST"])
    def api_toggle_task(task_id):
        column = _string_field(_json_body(), "column")
        return _board_response(store.toggle(task_id, column))

    @app.route("/api/tasks/<task_id>", methods=["DELETE"])
    def api_delete_task(task_id):
        column = request.args.get("column", "")
        if not column:
            raise PayloadError("'column' query parameter is required")
        return _board_response(store.delete(task_id, column))

    # ── Dashboard ────────────────────────────────────────────────────────────

    @app.route("/")
    def index():
        return _static("index.html")

    @app.route("/<path:filename>")
    def static_file(filename):
        if filename.startswith("api/"):
            abort(404)
        return _static(filename)

    def _static(filename: str):
        assets = Path(config.assets_dir)
        if not (assets / filename).is_file():
            abort(404)
        return send_from_directory(assets, filename)

    @app.route("/health")
    def health():
        return jsonify({
            "status": "ok",
            "file": str(store.source.path),
            "columns": store.columns,
        })

    return app


# ── Main ─────────────────────────────────────────────────────────────────────

def main(argv=None):
    parser = argparse.ArgumentParser(description="mdkanban Server")
    parser.add_argument("projects_file", nargs="?",
                        help="Markdown board file (default ./PROJECTS.md)")
    parser.add_argument("--config", help="Path to kanban.yaml")
    parser.add_argument("--host", help="Bind address (use 0.0.0.0 to expose on network)")
    parser.add_argument("--port", type=int)
    parser.add_argument("--no-watch", action="store_true",
                        help="Do not reload the board when the file is edited by hand")
    args = parser.parse_args(argv)

    try:
        config = BoardConfig.load(args.config)
    except ConfigError as e:
        print(f"Config error: {e}", file=sys.stderr)
        return 2
    if args.projects_file:
        config.projects_file = str(Path(args.projects_file).expanduser().resolve())
    if args.host:
        config.host = args.host
    if args.port:
        config.port = args.port
    if args.no_watch:
        config.watch = False

    logging.basicConfig(
        level=getattr(logging, str(config.log_level).upper(), logging.INFO),
        format="%(asctime)s [kanban] %(levelname)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    store = BoardStore(BoardFile(config.projects_file), config.columns)
    app = create_app(config, store)

    watcher = None
    if config.watch:
        from mdkanban.watcher import BoardWatcher
        watcher = BoardWatcher(store, config.debounce_ms)
        watcher.start()

    print(f"""
╔═══════════════════════════════════════╗
║  mdkanban Server                      ║
╚═══════════════════════════════════════╝
  URL:     http://{config.host}:{config.port}
  File:    {config.projects_file}
  Columns: {' → '.join(config.columns)}
""")

    try:
        # One request at a time; the store is the only owner of the board
        app.run(host=config.host, port=config.port, debug=False, threaded=False)
    finally:
        if watcher:
            watcher.stop()
    return 0


if __name__ == "__main__":
    sys.exit(main())

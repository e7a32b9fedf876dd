# mdkanban: HTTP client
#
# Thin wrapper over the board server's JSON API for scripts and checks.
# Network failures come back as None/False instead of raising.

import logging
from typing import Optional, Dict, Any

import requests

from .schema import Board, PayloadError

logger = logging.getLogger(__name__)


class BoardClient:
    """HTTP client for the board server API."""

    def __init__(self, base_url: str = "http://localhost:3456", timeout: float = 5):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def _get(self, path: str) -> Optional[Dict[str, Any]]:
        try:
            r = requests.get(f"{self.base_url}{path}", timeout=self.timeout)
            if not r.ok:
                logger.warning(f"GET {path} -> {r.status_code}")
                return None
            return r.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"GET {path} failed: {e}")
            return None

    def _post(self, path: str, payload: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        try:
            r = requests.post(
                f"{self.base_url}{path}",
                json=payload,
                timeout=self.timeout,
            )
            if not r.ok:
                logger.warning(f"POST {path} -> {r.status_code}")
                return None
            return r.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"POST {path} failed: {e}")
            return None

    def _board(self, data: Optional[Dict[str, Any]]) -> Optional[Board]:
        if not data:
            return None
        columns = data.get("columns")
        if not isinstance(columns, list) or not all(isinstance(c, str) for c in columns):
            logger.warning(f"Server sent unexpected columns: {columns!r}")
            return None
        try:
            return Board.from_payload(data, columns)
        except PayloadError as e:
            logger.warning(f"Server sent an unexpected board: {e}")
            return None

    def get_board(self) -> Optional[Board]:
        """Fetch the current board."""
        return self._board(self._get("/api/board"))

    def save_board(self, board: Board) -> bool:
        """Replace the whole board on the server."""
        data = self._post("/api/board", {"board": board.to_dict()["board"]})
        return bool(data and data.get("success"))

    def add_task(self, text: str) -> Optional[Board]:
        """Add a task to the first column; returns the updated board."""
        return self._board(self._post("/api/tasks", {"text": text}))

    def move_task(self, task_id: str, from_column: str, to_column: str) -> Optional[Board]:
        return self._board(self._post(
            f"/api/tasks/{task_id}/move", {"from": from_column, "to": to_column}
        ))

    def toggle_task(self, task_id: str, column: str) -> Optional[Board]:
        return self._board(self._post(f"/api/tasks/{task_id}/toggle", {"column": column}))

    def delete_task(self, task_id: str, column: str) -> Optional[Board]:
        try:
            r = requests.delete(
                f"{self.base_url}/api/tasks/{task_id}",
                params={"column": column},
                timeout=self.timeout,
            )
            if not r.ok:
                logger.warning(f"DELETE task {task_id} -> {r.status_code}")
                return None
            return self._board(r.json())
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"DELETE task {task_id} failed: {e}")
            return None

    def get_config(self) -> Optional[Dict[str, Any]]:
        return self._get("/api/config")

    def health(self) -> bool:
        data = self._get("/health")
        return bool(data and data.get("status") == "ok")

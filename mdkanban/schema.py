"""
Board schema: tasks, columns and the JSON shape exchanged with the dashboard.

JSON shape:
  { "columns": ["Backlog", "Active", "Done"],
    "board":   { "Backlog": [{"id": "...", "text": "...", "done": false}], ... } }

A Board always carries every recognized column, even when empty.
"""
import copy
import logging
from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any, Iterable, Sequence

logger = logging.getLogger(__name__)

DEFAULT_COLUMNS = ("Backlog", "Active", "Done")


class PayloadError(Exception):
    """Raised when a board payload from the API is structurally invalid."""
    pass


@dataclass
class Task:
    """One checklist item."""
    id: str
    text: str
    done: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "text": self.text, "done": self.done}

    @classmethod
    def from_dict(cls, data: Dict[str, Any], id_factory=None) -> "Task":
        """Deserialize from a client dict. Raises PayloadError on bad types."""
        if not isinstance(data, dict):
            raise PayloadError(f"task must be an object, got {type(data).__name__}")

        text = data.get("text", "")
        if not isinstance(text, str):
            raise PayloadError("task text must be a string")

        done = data.get("done", False)
        if not isinstance(done, bool):
            raise PayloadError("task done must be a boolean")

        task_id = data.get("id")
        if task_id is None or task_id == "":
            if id_factory is None:
                # Import here to avoid a circular import with transcoder
                from .transcoder import generate_id
                id_factory = generate_id
            task_id = id_factory()
        elif not isinstance(task_id, str):
            # Numeric ids from hand-written clients are accepted as strings
            if isinstance(task_id, bool) or not isinstance(task_id, int):
                raise PayloadError("task id must be a string")
            task_id = str(task_id)

        return cls(id=task_id, text=text, done=done)


@dataclass
class Board:
    """Ordered columns mapped to their task sequences."""
    columns: List[str] = field(default_factory=lambda: list(DEFAULT_COLUMNS))
    tasks: Dict[str, List[Task]] = field(default_factory=dict)

    def __post_init__(self):
        self.columns = list(self.columns)
        self.tasks = dict(self.tasks)
        for col in self.columns:
            self.tasks.setdefault(col, [])

    @classmethod
    def empty(cls, columns: Sequence[str] = DEFAULT_COLUMNS) -> "Board":
        return cls(columns=list(columns), tasks={})

    def copy(self) -> "Board":
        return copy.deepcopy(self)

    def column(self, name: str) -> List[Task]:
        """Tasks of a column, or an empty list for an unknown name."""
        return self.tasks.get(name, [])

    def find(self, task_id: str, column: str) -> Optional[int]:
        """Index of task_id inside column, None if absent."""
        for idx, task in enumerate(self.column(column)):
            if task.id == task_id:
                return idx
        return None

    def task_ids(self) -> set:
        return {t.id for tasks in self.tasks.values() for t in tasks}

    def all_tasks(self) -> List[Task]:
        """Tasks of the recognized columns, in board order."""
        result: List[Task] = []
        for col in self.columns:
            result.extend(self.tasks[col])
        return result

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the dashboard JSON shape."""
        return {
            "columns": list(self.columns),
            "board": {
                col: [t.to_dict() for t in self.tasks.get(col, [])]
                for col in self.columns
            },
        }

    @classmethod
    def from_payload(
        cls,
        data: Any,
        columns: Iterable[str] = DEFAULT_COLUMNS,
        id_factory=None,
    ) -> "Board":
        """
        Build a Board from a POSTed body ``{"board": {...}}``.

        Columns the client invented are kept here and discarded later by
        store.normalize_board(). Missing recognized columns become empty.
        Raises PayloadError before anything is touched.
        """
        if not isinstance(data, dict):
            raise PayloadError("request body must be a JSON object")
        raw_board = data.get("board")
        if not isinstance(raw_board, dict):
            raise PayloadError("'board' must be an object mapping column names to task lists")

        tasks: Dict[str, List[Task]] = {}
        for col, raw_tasks in raw_board.items():
            if not isinstance(raw_tasks, list):
                raise PayloadError(f"column '{col}' must be a list of tasks")
            tasks[col] = [Task.from_dict(t, id_factory=id_factory) for t in raw_tasks]

        columns = list(columns)
        unknown = [col for col in tasks if col not in columns]
        if unknown:
            logger.debug(f"payload carries unrecognized columns: {unknown}")
        return cls(columns=columns, tasks=tasks)

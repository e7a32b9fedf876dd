# mdkanban: configuration
# Override via kanban.yaml, KANBAN_* environment variables, or CLI args.

import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import List, Optional

import yaml

from .schema import DEFAULT_COLUMNS

logger = logging.getLogger(__name__)

CONFIG_NAME = "kanban.yaml"
DEFAULT_ASSETS_DIR = Path(__file__).resolve().parent.parent / "assets" / "dashboard"


class ConfigError(Exception):
    """Raised when configuration is invalid."""
    pass


@dataclass
class BoardConfig:
    """Runtime configuration for the board server."""

    # Markdown file backing the board
    projects_file: str = "PROJECTS.md"

    # HTTP
    host: str = "127.0.0.1"
    port: int = 3456
    assets_dir: str = ""  # empty = bundled assets/dashboard

    # Board
    columns: List[str] = field(default_factory=lambda: list(DEFAULT_COLUMNS))

    # Behavior
    watch: bool = True         # reload when the file is edited by hand
    debounce_ms: int = 300
    log_level: str = "INFO"

    def validate(self):
        """Reject column lists the board cannot represent."""
        if not isinstance(self.columns, list) or not self.columns:
            raise ConfigError("columns must be a non-empty list of names")
        for col in self.columns:
            if not isinstance(col, str) or not col.strip():
                raise ConfigError(f"Invalid column name: {col!r}")
            # Headings are trimmed on parse, so padded names would never match
            if col != col.strip() or "\n" in col or "\r" in col:
                raise ConfigError(f"Column name has surrounding whitespace or a line break: {col!r}")
        if len(set(self.columns)) != len(self.columns):
            raise ConfigError(f"Duplicate column names: {self.columns}")
        try:
            self.port = int(self.port)
        except (TypeError, ValueError):
            raise ConfigError(f"Invalid port: {self.port!r}")

    def resolve_paths(self):
        """Expand ~ and make paths absolute."""
        self.projects_file = str(Path(self.projects_file).expanduser().resolve())
        if not self.assets_dir:
            self.assets_dir = str(DEFAULT_ASSETS_DIR)
        self.assets_dir = str(Path(self.assets_dir).expanduser().resolve())

    def apply_env(self):
        """KANBAN_FILE / KANBAN_HOST / KANBAN_PORT take precedence over the file."""
        if os.environ.get("KANBAN_FILE"):
            self.projects_file = os.environ["KANBAN_FILE"]
        if os.environ.get("KANBAN_HOST"):
            self.host = os.environ["KANBAN_HOST"]
        if os.environ.get("KANBAN_PORT"):
            self.port = os.environ["KANBAN_PORT"]

    @classmethod
    def load(cls, path: Optional[str] = None) -> "BoardConfig":
        """Load config from YAML file, falling back to defaults."""
        cfg_path = Path(path) if path else Path.cwd() / CONFIG_NAME
        if cfg_path.exists():
            try:
                with open(cfg_path, "r") as f:
                    data = yaml.safe_load(f) or {}
                if not isinstance(data, dict):
                    raise ValueError("top level must be a mapping")
                known = {fld.name for fld in fields(cls)}
                cfg = cls(**{k: v for k, v in data.items() if k in known})
            except (OSError, ValueError, yaml.YAMLError) as e:
                logger.warning(f"Ignoring unreadable config {cfg_path}: {e}")
                cfg = cls()
        else:
            cfg = cls()
        cfg.apply_env()
        cfg.validate()
        cfg.resolve_paths()
        return cfg

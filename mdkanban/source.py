"""
Markdown file access for the board.

Writes go through a temp file in the same directory and os.replace(), so a
reader sees either the old file or the new one, never a partial write.
"""
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


class BoardFile:
    """The PROJECTS.md file backing a board."""

    def __init__(self, path):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.is_file()

    def read(self) -> Optional[str]:
        """File text, or None if it is missing or unreadable."""
        if not self.path.exists():
            return None
        try:
            return self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Error reading {self.path}: {e}")
            return None

    def write(self, text: str) -> bool:
        """Replace the file contents. Returns False on any I/O failure."""
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                newline="",
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(text)
                tmp.flush()
                os.fsync(tmp.fileno())
            if self.path.exists():
                os.chmod(tmp_name, self.path.stat().st_mode & 0o777)
            os.replace(tmp_name, self.path)
            return True
        except OSError as e:
            logger.error(f"Error writing {self.path}: {e}")
            if tmp_name:
                Path(tmp_name).unlink(missing_ok=True)
            return False

"""File-based task storage adapter."""

import json
import logging
import os
import tempfile
from pathlib import Path

from keeper.core.tasks import Task

logger = logging.getLogger(__name__)


class TaskStoreError(Exception):
    """Raised when the task file cannot be read or contains malformed records."""

    pass


class JsonTaskStore:
    """
    JSON file task storage.

    Implements TaskStore protocol. The whole collection lives in one file,
    replaced atomically on every save.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path).expanduser()

    def load(self) -> list[Task]:
        """Load all tasks. Returns an empty list if the file does not exist."""
        if not self.path.exists():
            logger.debug(f"No task file at {self.path}, starting empty")
            return []

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise TaskStoreError(f"Task file {self.path} is not valid JSON: {e}") from e
        except (OSError, UnicodeDecodeError) as e:
            raise TaskStoreError(f"Cannot read task file {self.path}: {e}") from e

        if not isinstance(data, list):
            raise TaskStoreError(f"Task file {self.path} must contain a JSON list")

        tasks = []
        for index, record in enumerate(data):
            try:
                tasks.append(Task.from_dict(record))
            except (AttributeError, KeyError, TypeError, ValueError) as e:
                raise TaskStoreError(f"Malformed task record #{index} in {self.path}: {e}") from e

        logger.debug(f"Loaded {len(tasks)} tasks from {self.path}")
        return tasks

    def save(self, tasks: list[Task]) -> None:
        """Write all tasks, replacing the file in one step."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        content = json.dumps([t.to_dict() for t in tasks], indent=2)

        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
            os.replace(tmp_name, self.path)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.debug(f"Saved {len(tasks)} tasks to {self.path}")

"""Configuration management for Keeper."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from .core.tasks import TaskCategory, TaskPriority

logger = logging.getLogger(__name__)

KEEPER_HOME = Path(os.environ.get("KEEPER_HOME", Path.home() / "keeper"))
CONFIG_FILE = KEEPER_HOME / "config" / "keeper.conf"
DATA_DIR = KEEPER_HOME / "data"


@dataclass
class Config:
    """Keeper configuration."""

    tasks_file: str = ""
    default_category: TaskCategory = TaskCategory.HOUSE
    default_priority: TaskPriority = TaskPriority.MEDIUM
    upcoming_count: int = 5

    @property
    def tasks_path(self) -> Path:
        """Resolve the task file, falling back to the data directory."""
        if self.tasks_file:
            return Path(self.tasks_file).expanduser()
        return DATA_DIR / "tasks.json"


def _unquote(value: str) -> str:
    """Strip surrounding quotes, or an inline comment from unquoted values."""
    if value.startswith('"') or value.startswith("'"):
        quote = value[0]
        end_quote = value.find(quote, 1)
        if end_quote != -1:
            return value[1:end_quote]
        return value[1:]
    if "#" in value:
        return value.split("#")[0].strip()
    return value


def load_config(path: Path | None = None) -> Config:
    """Load configuration from keeper.conf file."""
    config = Config()
    path = path or CONFIG_FILE

    if not path.exists():
        return config

    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = _unquote(value.strip())

        match key:
            case "tasks_file":
                config.tasks_file = value
            case "default_category":
                try:
                    config.default_category = TaskCategory(value)
                except ValueError:
                    logger.warning(f"Unknown DEFAULT_CATEGORY {value!r}, using {config.default_category.value}")
            case "default_priority":
                try:
                    config.default_priority = TaskPriority(value.lower())
                except ValueError:
                    logger.warning(f"Unknown DEFAULT_PRIORITY {value!r}, using {config.default_priority.value}")
            case "upcoming_count":
                try:
                    config.upcoming_count = int(value)
                except ValueError:
                    logger.warning(f"UPCOMING_COUNT must be an integer, got {value!r}")

    return config

"""Task storage interface."""

from typing import Protocol

from keeper.core.tasks import Task


class TaskStore(Protocol):
    """Interface for loading and saving the whole task collection."""

    def load(self) -> list[Task]:
        """Load all tasks. Returns an empty list if nothing is stored yet."""
        ...

    def save(self, tasks: list[Task]) -> None:
        """Replace the stored collection with `tasks`."""
        ...

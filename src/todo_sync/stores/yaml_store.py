"""Todo list kept in a YAML file."""

import logging
import uuid
from pathlib import Path

import yaml
from pydantic import ValidationError

from todo_sync.exceptions import IdentityNotFoundError, StoreError
from todo_sync.models import MAX_MAPPED_ID, TodoItem

logger = logging.getLogger(__name__)


class YamlItemStore:
    """Todos stored as a YAML document of the form ``{"todos": [...]}``.

    Works as the local store being synchronized, and as a target store when
    mirroring to another file. Changes stay in memory until commit().
    """

    def __init__(self, path: Path) -> None:
        """Load the store.

        Args:
            path: YAML file location. A missing file is an empty store.

        Raises:
            StoreError: If the file exists but cannot be parsed.
        """
        self.path = path
        self._items: dict[str, TodoItem] = {}
        self._load()

    def _load(self) -> None:
        if not self.path.exists():
            logger.info(f"Todo file {self.path} not found, starting with an empty list")
            return

        try:
            with open(self.path) as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise StoreError(f"Failed to load todo file {self.path}: {e}") from e

        if not isinstance(data, dict):
            raise StoreError(f"Todo file {self.path} must contain a mapping")

        for raw in data.get("todos") or []:
            try:
                item = TodoItem(**raw)
            except (TypeError, ValidationError) as e:
                raise StoreError(f"Invalid todo in {self.path}: {e}") from e
            if item.app_id in self._items:
                raise StoreError(f"Duplicate app ID {item.app_id!r} in {self.path}")
            self._items[item.app_id] = item

        logger.debug(f"Loaded {len(self._items)} todos from {self.path}")

    def list_items(self) -> list[TodoItem]:
        """Return every todo in file order."""
        return list(self._items.values())

    def get(self, app_id: str) -> TodoItem | None:
        """Return the todo with app_id, or None."""
        return self._items.get(app_id)

    def find_by_mapped_id(self, mapped_id: int) -> TodoItem | None:
        """Return the todo carrying mapped_id, or None."""
        for item in self._items.values():
            if item.mapped_id == mapped_id:
                return item
        return None

    def mapped_ids(self) -> set[int]:
        """Return the mapped IDs of every todo bound to the target store."""
        return {item.mapped_id for item in self._items.values() if item.is_mapped}

    def add(self, item: TodoItem) -> int:
        """Add a todo, assigning it the next free mapped ID.

        The incoming app ID is kept unless it is already taken here.

        Returns:
            The mapped ID assigned to the new todo.

        Raises:
            StoreError: If the ID space is exhausted.
        """
        mapped_id = max(self.mapped_ids(), default=0) + 1
        if mapped_id > MAX_MAPPED_ID:
            raise StoreError(f"No mapped IDs left in {self.path}")

        app_id = item.app_id if item.app_id not in self._items else uuid.uuid4().hex
        self._items[app_id] = item.model_copy(update={"app_id": app_id, "mapped_id": mapped_id})
        logger.debug(f"Added todo {app_id} as {mapped_id}")
        return mapped_id

    def update(self, item: TodoItem) -> None:
        """Overwrite the todo carrying item.mapped_id, keeping its app ID.

        Raises:
            StoreError: If no todo carries that mapped ID.
        """
        existing = self.find_by_mapped_id(item.mapped_id)
        if existing is None:
            raise StoreError(f"No todo with mapped ID {item.mapped_id} in {self.path}")
        self._items[existing.app_id] = item.model_copy(update={"app_id": existing.app_id})

    def remove(self, item: TodoItem) -> None:
        """Remove a todo by app ID.

        Raises:
            IdentityNotFoundError: If the todo is not in the store.
        """
        if self._items.pop(item.app_id, None) is None:
            raise IdentityNotFoundError(item.app_id)

    def set_mapped_id(self, app_id: str, mapped_id: int) -> TodoItem:
        """Record the mapped ID of a todo without touching its timestamps.

        Raises:
            IdentityNotFoundError: If app_id does not resolve.
        """
        item = self._items.get(app_id)
        if item is None:
            raise IdentityNotFoundError(app_id)
        updated = item.model_copy(update={"mapped_id": mapped_id})
        self._items[app_id] = updated
        return updated

    def commit(self) -> None:
        """Write the todos back to the YAML file.

        Raises:
            StoreError: If the file cannot be written.
        """
        document = {"todos": [item.model_dump(mode="json") for item in self._items.values()]}
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w") as f:
                yaml.safe_dump(document, f, default_flow_style=False, sort_keys=False)
        except OSError as e:
            raise StoreError(f"Failed to save todo file {self.path}: {e}") from e
        logger.debug(f"Saved {len(self._items)} todos to {self.path}")

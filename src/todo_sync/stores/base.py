"""Interfaces the sync core expects from item stores."""

from typing import Protocol

from todo_sync.models import TodoItem


class ItemStore(Protocol):
    """A store that changes can be pushed to."""

    def list_items(self) -> list[TodoItem]:
        """Return every item currently in the store."""
        ...

    def add(self, item: TodoItem) -> int:
        """Add an item and return the mapped ID the store assigned to it."""
        ...

    def find_by_mapped_id(self, mapped_id: int) -> TodoItem | None:
        """Return the item carrying mapped_id, or None."""
        ...

    def update(self, item: TodoItem) -> None:
        """Overwrite the item carrying item.mapped_id."""
        ...

    def remove(self, item: TodoItem) -> None:
        """Remove an item."""
        ...

    def commit(self) -> None:
        """Persist pending changes."""
        ...


class LocalItemStore(ItemStore, Protocol):
    """The store whose changes are being synchronized.

    Items are identified by app ID; mapped IDs are bound onto them once the
    target store has accepted them.
    """

    def get(self, app_id: str) -> TodoItem | None:
        """Return the item with app_id, or None."""
        ...

    def set_mapped_id(self, app_id: str, mapped_id: int) -> TodoItem:
        """Record the mapped ID of an item and return the updated item.

        Raises:
            IdentityNotFoundError: If app_id does not resolve.
        """
        ...

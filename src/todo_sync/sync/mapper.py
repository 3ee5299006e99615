"""Binding of service-assigned IDs onto local todos."""

import logging
from collections.abc import Iterable

from todo_sync.exceptions import IdentityNotFoundError, MappingError
from todo_sync.models import MAX_MAPPED_ID, UNMAPPED, TodoItem
from todo_sync.stores.base import LocalItemStore

logger = logging.getLogger(__name__)


class IDMapper:
    """Records which target-store ID each local todo was given."""

    def __init__(self, store: LocalItemStore) -> None:
        """Initialize ID mapper.

        Args:
            store: Local store holding the todos to bind.
        """
        self.store = store

    def bind_id(self, app_id: str, assigned_id: int) -> TodoItem:
        """Bind an assigned ID onto a previously unmapped todo.

        Binding the ID a todo already carries is a no-op. A bound todo is
        never re-bound to a different ID.

        Args:
            app_id: Local app ID of the todo.
            assigned_id: ID the target store assigned on addition.

        Returns:
            The bound todo.

        Raises:
            IdentityNotFoundError: If app_id does not resolve.
            MappingError: If assigned_id is unusable or the todo is bound elsewhere.
        """
        if not UNMAPPED < assigned_id <= MAX_MAPPED_ID:
            raise MappingError(f"Cannot bind {app_id} to invalid ID {assigned_id}")

        item = self.store.get(app_id)
        if item is None:
            raise IdentityNotFoundError(app_id)

        if item.mapped_id == assigned_id:
            return item
        if item.is_mapped:
            raise MappingError(
                f"Todo {app_id} is already bound to {item.mapped_id}, refusing {assigned_id}"
            )

        bound = self.store.set_mapped_id(app_id, assigned_id)
        logger.info(f"Bound todo {app_id} to ID {assigned_id}")
        return bound

    def bind_all(self, assignments: Iterable[tuple[str, int]]) -> list[str]:
        """Bind a batch of (app ID, assigned ID) pairs.

        Every pair is attempted; failures are logged.

        Returns:
            App IDs that could not be bound.
        """
        failed: list[str] = []
        for app_id, assigned_id in assignments:
            try:
                self.bind_id(app_id, assigned_id)
            except (IdentityNotFoundError, MappingError) as e:
                logger.error(f"Failed to bind ID {assigned_id}: {e}")
                failed.append(app_id)
        return failed

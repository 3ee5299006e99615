"""Exception classes for todo-sync."""


class TodoSyncError(Exception):
    """Base exception for all todo-sync errors."""
    pass


class ConfigurationError(TodoSyncError):
    """Raised when configuration is invalid or missing."""
    pass


class StoreError(TodoSyncError):
    """Raised when an item store cannot be loaded, reached or written."""
    pass


class IdentityNotFoundError(TodoSyncError):
    """Raised when an app ID does not resolve to an item in the local store."""

    def __init__(self, app_id: str) -> None:
        super().__init__(f"No todo with app ID {app_id!r}")
        self.app_id = app_id


class MappingError(TodoSyncError):
    """Raised when a mapped ID cannot be bound to an item."""
    pass

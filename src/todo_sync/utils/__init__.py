"""Utility modules for todo-sync."""

from todo_sync.utils.logging import setup_logging
from todo_sync.utils.storage import StorageManager

__all__ = ["setup_logging", "StorageManager"]

"""Item stores that todos are read from and pushed to."""

from todo_sync.stores.base import ItemStore, LocalItemStore
from todo_sync.stores.remote import RemoteTodoClient
from todo_sync.stores.yaml_store import YamlItemStore

__all__ = ["ItemStore", "LocalItemStore", "RemoteTodoClient", "YamlItemStore"]

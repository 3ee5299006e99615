"""Pytest configuration and fixtures."""

import logging
import tempfile
from collections.abc import Callable, Iterator
from datetime import datetime, timedelta, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path

import pytest

from todo_sync.config import Config
from todo_sync.exceptions import IdentityNotFoundError, StoreError
from todo_sync.models import TodoItem
from todo_sync.utils import StorageManager

BASE_TIME = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


class FakeItemStore:
    """In-memory item store recording every call."""

    def __init__(self, items: list[TodoItem] | None = None, first_id: int = 100) -> None:
        self.items: dict[str, TodoItem] = {item.app_id: item for item in items or []}
        self.next_id = first_id
        self.fail_on: set[str] = set()
        self.calls: list[tuple[str, str]] = []
        self.commits = 0

    def _check(self, op: str, key: str) -> None:
        self.calls.append((op, key))
        if key in self.fail_on:
            raise StoreError(f"{op} rejected for {key}")

    def list_items(self) -> list[TodoItem]:
        return list(self.items.values())

    def get(self, app_id: str) -> TodoItem | None:
        return self.items.get(app_id)

    def add(self, item: TodoItem) -> int:
        self._check("add", item.app_id)
        assigned = self.next_id
        self.next_id += 1
        self.items[item.app_id] = item.model_copy(update={"mapped_id": assigned})
        return assigned

    def find_by_mapped_id(self, mapped_id: int) -> TodoItem | None:
        for item in self.items.values():
            if item.mapped_id == mapped_id:
                return item
        return None

    def update(self, item: TodoItem) -> None:
        self._check("update", item.app_id)
        existing = self.find_by_mapped_id(item.mapped_id)
        self.items[existing.app_id] = item.model_copy(update={"app_id": existing.app_id})

    def remove(self, item: TodoItem) -> None:
        self._check("remove", str(item.mapped_id))
        del self.items[item.app_id]

    def set_mapped_id(self, app_id: str, mapped_id: int) -> TodoItem:
        if app_id not in self.items:
            raise IdentityNotFoundError(app_id)
        self.items[app_id] = self.items[app_id].model_copy(update={"mapped_id": mapped_id})
        return self.items[app_id]

    def commit(self) -> None:
        self.commits += 1


@pytest.fixture
def temp_config_dir() -> Path:
    """Create a temporary configuration directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def storage_manager(temp_config_dir: Path) -> StorageManager:
    """Create a storage manager with temporary directory."""
    return StorageManager(temp_config_dir)


@pytest.fixture
def config(temp_config_dir: Path) -> Config:
    """Create a config instance with temporary directory."""
    return Config(temp_config_dir)


@pytest.fixture
def base_time() -> datetime:
    """A fixed cutoff to compare item timestamps against."""
    return BASE_TIME


@pytest.fixture
def make_item() -> Callable[..., TodoItem]:
    """Factory for todo items with timestamps relative to BASE_TIME."""

    def _make(
        app_id: str,
        mapped_id: int = 0,
        created_offset: int = -60,
        modified_offset: int = -60,
        **fields: object,
    ) -> TodoItem:
        return TodoItem(
            app_id=app_id,
            mapped_id=mapped_id,
            created_at=BASE_TIME + timedelta(minutes=created_offset),
            modified_at=BASE_TIME + timedelta(minutes=modified_offset),
            summary=fields.pop("summary", f"Todo {app_id}"),
            **fields,
        )

    return _make


@pytest.fixture
def sample_item(make_item: Callable[..., TodoItem]) -> TodoItem:
    """Create a fully populated todo."""
    return make_item(
        "app-full",
        mapped_id=42,
        summary="Renew passport",
        notes="Bring two photos",
        category="Errands",
        priority=3,
        start_date=BASE_TIME,
        due_date=BASE_TIME + timedelta(days=7),
        completed_at=BASE_TIME + timedelta(days=2),
        completed=True,
    )


@pytest.fixture
def reset_logging() -> Iterator[None]:
    """Remove the handlers setup_logging installs and restore logger levels."""
    root_logger = logging.getLogger()
    level = root_logger.level
    yield
    for handler in root_logger.handlers[:]:
        if isinstance(handler, RotatingFileHandler) or type(handler) is logging.StreamHandler:
            root_logger.removeHandler(handler)
            handler.close()
    root_logger.setLevel(level)
    for name in ("httpx", "httpcore"):
        logging.getLogger(name).setLevel(logging.NOTSET)

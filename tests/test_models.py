"""Tests for Pydantic models."""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from todo_sync.models import MAX_MAPPED_ID, DeltaResult, TodoItem


class TestTodoItem:
    """Test TodoItem model."""

    def test_defaults(self) -> None:
        """Test an item with only the required fields."""
        item = TodoItem(
            app_id="app-1",
            created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
            modified_at=datetime(2024, 1, 2, tzinfo=timezone.utc),
        )

        assert item.mapped_id == 0
        assert item.is_mapped is False
        assert item.summary == ""
        assert item.priority == 0
        assert item.due_date is None
        assert item.completed is False

    def test_alias_construction(self) -> None:
        """Test populating by camelCase alias."""
        item = TodoItem(
            appId="app-1",
            mappedId=7,
            createdAt="2024-01-01T00:00:00Z",
            modifiedAt="2024-01-01T00:00:00Z",
        )

        assert item.app_id == "app-1"
        assert item.mapped_id == 7
        assert item.is_mapped is True

    def test_naive_timestamps_become_utc(self) -> None:
        """Test that naive datetimes are interpreted as UTC."""
        item = TodoItem(
            app_id="app-1",
            created_at=datetime(2024, 1, 1, 8, 30),
            modified_at=datetime(2024, 1, 1, 9, 0),
        )

        assert item.created_at.tzinfo is not None
        assert item.created_at == datetime(2024, 1, 1, 8, 30, tzinfo=timezone.utc)

    @pytest.mark.parametrize("mapped_id", [-1, MAX_MAPPED_ID + 1])
    def test_mapped_id_must_fit_32_bits(self, mapped_id: int) -> None:
        """Test that mapped IDs outside the ledger's range are rejected."""
        with pytest.raises(ValidationError):
            TodoItem(
                app_id="app-1",
                mapped_id=mapped_id,
                created_at=datetime(2024, 1, 1),
                modified_at=datetime(2024, 1, 1),
            )

    def test_empty_app_id_rejected(self) -> None:
        """Test that an item needs an app ID."""
        with pytest.raises(ValidationError):
            TodoItem(app_id="", created_at=datetime(2024, 1, 1), modified_at=datetime(2024, 1, 1))


class TestApiMapping:
    """Test conversion to and from the remote service's JSON."""

    def test_to_api_dict(self, sample_item: TodoItem) -> None:
        """Test every field is written under its API name."""
        data = sample_item.to_api_dict()

        assert data == {
            "id": 42,
            "appId": "app-full",
            "summary": "Renew passport",
            "notes": "Bring two photos",
            "category": "Errands",
            "priority": 3,
            "completed": True,
            "createdAt": "2024-03-01T11:00:00Z",
            "modifiedAt": "2024-03-01T11:00:00Z",
            "startDate": "2024-03-01T12:00:00Z",
            "dueDate": "2024-03-08T12:00:00Z",
            "completedAt": "2024-03-03T12:00:00Z",
        }

    def test_round_trip_preserves_every_field(self, sample_item: TodoItem) -> None:
        """Test from_api_dict inverts to_api_dict for a fully populated item."""
        restored = TodoItem.from_api_dict(sample_item.to_api_dict())

        assert restored == sample_item
        for name in TodoItem.model_fields:
            assert getattr(restored, name) == getattr(sample_item, name), name

    def test_from_api_dict_optional_fields(self) -> None:
        """Test missing and null optional fields fall back to defaults."""
        item = TodoItem.from_api_dict(
            {
                "id": None,
                "appId": "app-2",
                "createdAt": "2024-01-01T00:00:00Z",
                "modifiedAt": "2024-01-01T00:00:00+00:00",
                "notes": None,
            }
        )

        assert item.mapped_id == 0
        assert item.notes == ""
        assert item.category is None
        assert item.start_date is None


class TestDeltaResult:
    """Test DeltaResult model."""

    def test_empty(self) -> None:
        """Test a delta with no changes."""
        delta = DeltaResult()

        assert delta.is_empty is True
        assert delta.total_changes == 0

    def test_total_changes(self, sample_item: TodoItem) -> None:
        """Test counting changes across all three lists."""
        delta = DeltaResult(new_items=[sample_item], deleted_ids=[1, 2])

        assert delta.total_changes == 3
        assert delta.is_empty is False

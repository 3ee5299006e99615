"""Pydantic models for todo items and sync deltas."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Mapped IDs are persisted as unsigned 32-bit values in the ledger.
MAX_MAPPED_ID = 0xFFFFFFFF

UNMAPPED = 0


class ApplyPolicy(str, Enum):
    """How a push batch reacts to a failing item. Applies to add, modify and delete alike."""

    BEST_EFFORT = "best_effort"  # attempt every item, report failures
    ABORT_BATCH = "abort_batch"  # stop the batch at the first failure


def as_utc(value: datetime) -> datetime:
    """Return an aware datetime, treating naive values as UTC.

    Args:
        value: Datetime to normalize.

    Returns:
        Timezone-aware datetime.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _format_timestamp(value: datetime | None) -> str | None:
    if value is None:
        return None
    return as_utc(value).isoformat().replace("+00:00", "Z")


def _parse_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


class TodoItem(BaseModel):
    """A single todo as held by the local store."""

    model_config = ConfigDict(populate_by_name=True)

    app_id: str = Field(alias="appId", min_length=1)
    mapped_id: int = Field(default=UNMAPPED, alias="mappedId", ge=0, le=MAX_MAPPED_ID)
    created_at: datetime = Field(alias="createdAt")
    modified_at: datetime = Field(alias="modifiedAt")
    summary: str = ""
    notes: str = ""
    category: str | None = None
    priority: int = Field(default=0, ge=0, le=9)
    start_date: datetime | None = Field(default=None, alias="startDate")
    due_date: datetime | None = Field(default=None, alias="dueDate")
    completed_at: datetime | None = Field(default=None, alias="completedAt")
    completed: bool = False

    @field_validator(
        "created_at", "modified_at", "start_date", "due_date", "completed_at", mode="after"
    )
    @classmethod
    def _normalize_timezone(cls, value: datetime | None) -> datetime | None:
        if value is None:
            return None
        return as_utc(value)

    @property
    def is_mapped(self) -> bool:
        """Whether the remote service has acknowledged this item."""
        return self.mapped_id != UNMAPPED

    def to_api_dict(self) -> dict[str, Any]:
        """Convert to the remote service's JSON representation.

        Returns:
            Dictionary for API submission.
        """
        return {
            "id": self.mapped_id,
            "appId": self.app_id,
            "summary": self.summary,
            "notes": self.notes,
            "category": self.category,
            "priority": self.priority,
            "completed": self.completed,
            "createdAt": _format_timestamp(self.created_at),
            "modifiedAt": _format_timestamp(self.modified_at),
            "startDate": _format_timestamp(self.start_date),
            "dueDate": _format_timestamp(self.due_date),
            "completedAt": _format_timestamp(self.completed_at),
        }

    @classmethod
    def from_api_dict(cls, data: dict[str, Any]) -> "TodoItem":
        """Build an item from the remote service's JSON representation.

        Args:
            data: Dictionary as returned by the API.

        Returns:
            Parsed todo item.
        """
        return cls(
            app_id=data["appId"],
            mapped_id=data.get("id") or UNMAPPED,
            summary=data.get("summary") or "",
            notes=data.get("notes") or "",
            category=data.get("category"),
            priority=data.get("priority") or 0,
            completed=bool(data.get("completed", False)),
            created_at=_parse_timestamp(data["createdAt"]),
            modified_at=_parse_timestamp(data["modifiedAt"]),
            start_date=_parse_timestamp(data.get("startDate")),
            due_date=_parse_timestamp(data.get("dueDate")),
            completed_at=_parse_timestamp(data.get("completedAt")),
        )


class DeltaResult(BaseModel):
    """New, modified and deleted todos detected for one sync cycle."""

    new_items: list[TodoItem] = Field(
        default_factory=list, description="Unmapped items created after the cutoff"
    )
    modified_items: list[TodoItem] = Field(
        default_factory=list, description="Mapped items modified after the cutoff"
    )
    deleted_ids: list[int] = Field(
        default_factory=list, description="Ledger IDs no longer present locally"
    )

    @property
    def total_changes(self) -> int:
        """Total number of detected changes."""
        return len(self.new_items) + len(self.modified_items) + len(self.deleted_ids)

    @property
    def is_empty(self) -> bool:
        """Whether nothing changed since the cutoff."""
        return self.total_changes == 0

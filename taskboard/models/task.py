"""Domain models for the task management system."""

from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

from ..utils.due_dates import days_until, is_past_due

TITLE_MIN_LENGTH = 3
TITLE_MAX_LENGTH = 100
DESCRIPTION_MIN_LENGTH = 5
DESCRIPTION_MAX_LENGTH = 500


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


class TaskStatus(str, Enum):
    """Task status enumeration."""
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"

    @classmethod
    def values(cls) -> list:
        return [status.value for status in cls]


class Task(BaseModel):
    """Task domain model."""

    model_config = ConfigDict(str_strip_whitespace=True, validate_assignment=True)

    id: UUID = Field(default_factory=uuid4, description="Unique task identifier")
    title: str = Field(..., min_length=TITLE_MIN_LENGTH, max_length=TITLE_MAX_LENGTH, description="Task title")
    description: str = Field(
        ..., min_length=DESCRIPTION_MIN_LENGTH, max_length=DESCRIPTION_MAX_LENGTH, description="Task description"
    )
    status: TaskStatus = Field(default=TaskStatus.PENDING, description="Task status")
    due_date: date = Field(..., description="Calendar day the task is due")
    owner_id: str = Field(..., min_length=1, description="Identifier of the owning user")
    is_deleted: bool = Field(default=False, description="Soft-delete flag")
    created_at: datetime = Field(default_factory=utcnow, description="Task creation timestamp")
    updated_at: datetime = Field(default_factory=utcnow, description="Task last update timestamp")

    def update_timestamp(self) -> None:
        """Update the updated_at timestamp."""
        self.updated_at = utcnow()

    def is_overdue(self, today: Optional[date] = None) -> bool:
        """Whether the task is past its due day and not completed."""
        return is_past_due(self.due_date, today or date.today(), self.status)

    def days_until_due(self, today: Optional[date] = None) -> int:
        """Days remaining until the due date (negative if overdue)."""
        return days_until(self.due_date, today or date.today())

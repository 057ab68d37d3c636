"""Activity log entries derived from task mutations."""

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

from .task import TaskStatus, utcnow


class ActivityAction(str, Enum):
    """Kinds of task mutation recorded in the activity log."""
    TASK_CREATED = "task_created"
    TASK_UPDATED = "task_updated"
    TASK_DELETED = "task_deleted"
    STATUS_CHANGED = "status_changed"


class Activity(BaseModel):
    """Immutable audit record. Holds a copy of the task title, not a reference to the task."""

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    owner_id: str
    action: ActivityAction
    task_title: str
    details: str = ""
    old_status: Optional[TaskStatus] = None
    new_status: Optional[TaskStatus] = None
    created_at: datetime = Field(default_factory=utcnow)

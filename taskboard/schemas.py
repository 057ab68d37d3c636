"""API request/response schemas for the task management system."""

from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from .models.activity import Activity, ActivityAction
from .models.task import Task, TaskStatus
from .utils.due_dates import DueBucket, classify


# Task-related schemas
class TaskCreate(BaseModel):
    """Schema for creating a new task.

    Length and due-date rules are enforced by the task store so that they
    apply to every caller, not only HTTP requests.
    """
    title: str = Field(..., description="Task title (3-100 characters)")
    description: str = Field(..., description="Task description (5-500 characters)")
    due_date: date = Field(..., description="Due day, not before today")
    status: Optional[str] = Field(None, description="Initial status, defaults to pending")


class TaskUpdate(BaseModel):
    """Schema for updating an existing task. Only supplied fields are changed."""
    title: Optional[str] = Field(None, description="Task title")
    description: Optional[str] = Field(None, description="Task description")
    due_date: Optional[date] = Field(None, description="Due day")
    status: Optional[str] = Field(None, description="Task status")

    def changes(self) -> dict:
        """Fields explicitly supplied by the caller."""
        return self.model_dump(exclude_unset=True)


class TaskResponse(BaseModel):
    """Schema for task API responses."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(..., description="Unique task identifier")
    title: str = Field(..., description="Task title")
    description: str = Field(..., description="Task description")
    status: TaskStatus = Field(..., description="Task status")
    due_date: date = Field(..., description="Due day")
    owner_id: str = Field(..., description="Owning user")
    created_at: datetime = Field(..., description="Task creation timestamp")
    updated_at: datetime = Field(..., description="Task last update timestamp")
    due_status: Optional[DueBucket] = Field(None, description="Urgency badge, if any")
    is_overdue: bool = Field(False, description="Past due and not completed")
    days_until_due: int = Field(0, description="Days until due, negative if overdue")

    @classmethod
    def from_task(cls, task: Task, today: Optional[date] = None) -> "TaskResponse":
        """Build a response, deriving urgency fields against ``today``."""
        today = today or date.today()
        return cls(
            id=task.id,
            title=task.title,
            description=task.description,
            status=task.status,
            due_date=task.due_date,
            owner_id=task.owner_id,
            created_at=task.created_at,
            updated_at=task.updated_at,
            due_status=classify(task.due_date, today, task.status),
            is_overdue=task.is_overdue(today),
            days_until_due=task.days_until_due(today),
        )


class DeleteResponse(BaseModel):
    """Schema for soft-delete confirmations."""
    message: str = Field(default="Task deleted successfully")
    id: UUID = Field(..., description="Deleted task identifier")
    audit_degraded: bool = Field(default=False, description="Whether the activity entry failed to save")


# Activity-related schemas
class ActivityResponse(BaseModel):
    """Schema for activity feed entries."""
    id: UUID
    action: ActivityAction
    task_title: str
    details: str
    old_status: Optional[TaskStatus] = None
    new_status: Optional[TaskStatus] = None
    created_at: datetime

    @classmethod
    def from_activity(cls, activity: Activity) -> "ActivityResponse":
        return cls(**activity.model_dump(exclude={"owner_id"}))


# Health check schema
class HealthResponse(BaseModel):
    """Schema for health check responses."""
    status: str = Field(default="healthy", description="Service health status")
    timestamp: datetime = Field(..., description="Health check timestamp")
    version: str = Field(default="1.0.0", description="Application version")
    services: dict = Field(default_factory=dict, description="Wiring state of each service")

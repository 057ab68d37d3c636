"""Task service pairing every task mutation with its activity entry."""

import logging
from datetime import date
from typing import List, Optional, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from ..errors import AuditDegraded
from ..models.activity import Activity, ActivityAction
from ..models.task import Task, TaskStatus
from ..schemas import TaskCreate, TaskUpdate
from .activity_recorder import DEFAULT_RECENT_LIMIT, ActivityRecorder
from .task_store import TaskStore, parse_status

logger = logging.getLogger(__name__)


class MutationResult(BaseModel):
    """Outcome of a task mutation.

    ``audit_error`` is set when the task was saved but its activity entry was
    not; the mutation itself stands.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    task: Task
    activity: Optional[Activity] = None
    audit_error: Optional[AuditDegraded] = None

    @property
    def audit_degraded(self) -> bool:
        return self.audit_error is not None


class TaskService:
    """Sole entry point for task mutations.

    The store write happens first and the activity append second. A failed
    store write records nothing; a failed activity append is reported on the
    result instead of undoing the store write.
    """

    def __init__(self, store: TaskStore, recorder: ActivityRecorder):
        """Initialize the task service.

        Args:
            store: Authoritative task records
            recorder: Activity log
        """
        self.store = store
        self.recorder = recorder
        logger.info("Task service initialized")

    def today(self) -> date:
        """The current calendar day, as the store sees it."""
        return self.store.today()

    def list_tasks(self, owner_id: str, status: Union[TaskStatus, str, None] = None) -> List[Task]:
        return self.store.list_tasks(owner_id, status=status)

    def get_task(self, owner_id: str, task_id: Union[UUID, str]) -> Task:
        return self.store.get_task(owner_id, task_id)

    def find_overdue_tasks(self, owner_id: str) -> List[Task]:
        return self.store.find_overdue_tasks(owner_id)

    def recent_activity(self, owner_id: str, limit: int = DEFAULT_RECENT_LIMIT) -> List[Activity]:
        return self.recorder.recent(owner_id, limit=limit)

    def create_task(self, owner_id: str, task_data: TaskCreate) -> MutationResult:
        """Create a task and record ``task_created``."""
        task = self.store.create_task(
            owner_id,
            title=task_data.title,
            description=task_data.description,
            due_date=task_data.due_date,
            status=task_data.status,
        )

        return self._audit(
            task,
            action=ActivityAction.TASK_CREATED,
            task_title=task.title,
            details=f"Created task: {task.title}",
        )

    def update_task(self, owner_id: str, task_id: Union[UUID, str], task_data: TaskUpdate) -> MutationResult:
        """Update a task and record exactly one activity.

        A supplied status that differs from the current one records
        ``status_changed``; anything else records ``task_updated``.
        """
        changes = task_data.changes()

        current = self.store.get_task(owner_id, task_id)
        old_status = current.status
        task = self.store.update_task(owner_id, task_id, changes)

        requested_status = parse_status(changes.get("status"))
        if requested_status is not None and requested_status != old_status:
            return self._audit(
                task,
                action=ActivityAction.STATUS_CHANGED,
                task_title=current.title,
                details=f"Changed status from {old_status.value} to {requested_status.value}",
                old_status=old_status,
                new_status=requested_status,
            )

        return self._audit(
            task,
            action=ActivityAction.TASK_UPDATED,
            task_title=current.title,
            details=f"Updated task: {current.title}",
        )

    def delete_task(self, owner_id: str, task_id: Union[UUID, str]) -> MutationResult:
        """Soft-delete a task and record ``task_deleted`` with its last title."""
        task = self.store.get_task(owner_id, task_id)
        title = task.title

        self.store.soft_delete_task(owner_id, task_id)
        task.is_deleted = True

        return self._audit(
            task,
            action=ActivityAction.TASK_DELETED,
            task_title=title,
            details=f"Deleted task: {title}",
        )

    def _audit(
        self,
        task: Task,
        action: ActivityAction,
        task_title: str,
        details: str,
        old_status: Optional[TaskStatus] = None,
        new_status: Optional[TaskStatus] = None,
    ) -> MutationResult:
        """Record the activity for a mutation that has already been persisted."""
        try:
            activity = self.recorder.record(
                task.owner_id,
                action,
                task_title,
                details=details,
                old_status=old_status,
                new_status=new_status,
            )
        except Exception as e:
            logger.error(
                f"Task {task.id} saved but {action.value} activity could not be recorded: {str(e)}",
                exc_info=True,
            )
            return MutationResult(task=task, audit_error=AuditDegraded())

        return MutationResult(task=task, activity=activity)

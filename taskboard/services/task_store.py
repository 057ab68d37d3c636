"""In-memory task store enforcing field, ownership and lifecycle rules."""

import logging
from datetime import date
from threading import Lock
from typing import Any, Callable, Dict, List, Mapping, Optional, Union
from uuid import UUID

from pydantic import ValidationError as PydanticValidationError

from ..errors import Forbidden, NotFound, ValidationError
from ..models.task import Task, TaskStatus

logger = logging.getLogger(__name__)

TaskId = Union[UUID, str]

UPDATABLE_FIELDS = frozenset({"title", "description", "status", "due_date"})


def parse_status(value: Union[TaskStatus, str, None]) -> Optional[TaskStatus]:
    """Coerce a status value, raising ValidationError for anything outside the three states."""
    if value is None:
        return None
    try:
        return TaskStatus(value)
    except ValueError:
        raise ValidationError(
            "Invalid status. Must be: " + ", ".join(TaskStatus.values())
        ) from None


def describe_validation_error(exc: PydanticValidationError) -> str:
    """Flatten a pydantic validation error into a single readable message."""
    parts = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error.get("loc", ())) or "task"
        parts.append(f"{field}: {error.get('msg')}")
    return "; ".join(parts)


class TaskStore:
    """Owns task records.

    Every lookup is scoped by owner and excludes soft-deleted tasks. Records
    handed out are copies, so callers cannot mutate stored state.
    """

    def __init__(self, today: Callable[[], date] = date.today):
        """Initialize the task store.

        Args:
            today: Source of the current calendar day
        """
        self._tasks: Dict[UUID, Task] = {}
        self._lock = Lock()
        self._today = today
        logger.info("Task store initialized with in-memory storage")

    def today(self) -> date:
        """The current calendar day according to this store's clock."""
        return self._today()

    def create_task(
        self,
        owner_id: str,
        title: str,
        description: str,
        due_date: Union[date, str],
        status: Union[TaskStatus, str, None] = None,
    ) -> Task:
        """Create a new task.

        Args:
            owner_id: Identifier of the creating user
            title: Task title
            description: Task description
            due_date: Due day; must not be before today
            status: Initial status; None or an empty string means pending

        Returns:
            Created task

        Raises:
            ValidationError: If any field constraint is violated
        """
        fields: Dict[str, Any] = {
            "owner_id": owner_id,
            "title": title,
            "description": description,
            "due_date": due_date,
        }
        parsed_status = parse_status(status or None)
        if parsed_status is not None:
            fields["status"] = parsed_status

        try:
            task = Task(**fields)
        except PydanticValidationError as e:
            raise ValidationError(describe_validation_error(e)) from e

        if task.due_date < self.today():
            raise ValidationError("Due date cannot be in the past")

        task.updated_at = task.created_at

        with self._lock:
            self._tasks[task.id] = task
            logger.info(f"Created task {task.id} for owner {owner_id}: {task.title}")
            return task.model_copy(deep=True)

    def get_task(self, owner_id: str, task_id: TaskId) -> Task:
        """Get a non-deleted task owned by ``owner_id``.

        Raises:
            NotFound: If no non-deleted task has this id
            Forbidden: If the task belongs to another owner
        """
        with self._lock:
            return self._load(owner_id, task_id).model_copy(deep=True)

    def list_tasks(
        self,
        owner_id: str,
        status: Union[TaskStatus, str, None] = None,
    ) -> List[Task]:
        """List an owner's non-deleted tasks, newest first.

        An empty ``status`` applies no filter.

        Raises:
            ValidationError: If ``status`` is not a known status
        """
        status_filter = parse_status(status or None)

        with self._lock:
            # Newest insertion first so that equal timestamps keep creation order
            tasks = [
                task for task in reversed(list(self._tasks.values()))
                if task.owner_id == owner_id and not task.is_deleted
            ]

            if status_filter is not None:
                tasks = [task for task in tasks if task.status == status_filter]

            tasks.sort(key=lambda t: t.created_at, reverse=True)

            logger.debug(f"Listed {len(tasks)} tasks for owner {owner_id} (status={status_filter})")
            return [task.model_copy(deep=True) for task in tasks]

    def update_task(self, owner_id: str, task_id: TaskId, changes: Mapping[str, Any]) -> Task:
        """Apply a partial update.

        The due date is not checked against today here; existing tasks may be
        moved into the past.

        Raises:
            NotFound: If no non-deleted task has this id
            Forbidden: If the task belongs to another owner
            ValidationError: If a supplied field is invalid or not updatable
        """
        with self._lock:
            task = self._load(owner_id, task_id)

            unknown = set(changes) - UPDATABLE_FIELDS
            if unknown:
                raise ValidationError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")

            values = dict(changes)
            if "status" in values:
                values["status"] = parse_status(values["status"])
                if values["status"] is None:
                    raise ValidationError("status: Input should be a valid status")

            try:
                updated = Task.model_validate({**task.model_dump(), **values})
            except PydanticValidationError as e:
                raise ValidationError(describe_validation_error(e)) from e

            updated.update_timestamp()
            self._tasks[updated.id] = updated

            if updated.status != task.status:
                logger.info(f"Updated task {updated.id} status: {task.status.value} -> {updated.status.value}")
            else:
                logger.info(f"Updated task {updated.id}: {updated.title}")
            return updated.model_copy(deep=True)

    def soft_delete_task(self, owner_id: str, task_id: TaskId) -> None:
        """Flag a task as deleted. A second call fails with NotFound.

        Raises:
            NotFound: If no non-deleted task has this id
            Forbidden: If the task belongs to another owner
        """
        with self._lock:
            task = self._load(owner_id, task_id)
            task.is_deleted = True
            task.update_timestamp()
            logger.info(f"Soft-deleted task {task.id}: {task.title}")

    def find_overdue_tasks(self, owner_id: str) -> List[Task]:
        """Non-completed, non-deleted tasks whose due day is before today."""
        today = self.today()
        return [task for task in self.list_tasks(owner_id) if task.is_overdue(today)]

    def _load(self, owner_id: str, task_id: TaskId) -> Task:
        """Look up a live task and check ownership. Caller must hold the lock."""
        try:
            key = task_id if isinstance(task_id, UUID) else UUID(str(task_id))
        except ValueError:
            raise NotFound() from None

        task = self._tasks.get(key)
        if task is None or task.is_deleted:
            logger.warning(f"Task {task_id} not found")
            raise NotFound()

        if task.owner_id != owner_id:
            logger.warning(f"Owner {owner_id} is not authorized for task {task_id}")
            raise Forbidden()

        return task

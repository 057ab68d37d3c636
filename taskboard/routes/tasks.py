"""Task management CRUD routes."""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Query, Response, status

from ..deps import CurrentOwner, TaskServiceDep
from ..schemas import DeleteResponse, TaskCreate, TaskResponse, TaskUpdate
from ..services.task_service import MutationResult

logger = logging.getLogger(__name__)

router = APIRouter()

AUDIT_STATUS_HEADER = "X-Audit-Status"


def mark_audit_status(response: Response, result: MutationResult) -> None:
    """Tell the caller whether the activity entry for this mutation was saved."""
    response.headers[AUDIT_STATUS_HEADER] = "degraded" if result.audit_degraded else "ok"


@router.get("", response_model=List[TaskResponse])
async def list_tasks(
    owner_id: CurrentOwner,
    task_service: TaskServiceDep,
    status_filter: Optional[str] = Query(None, alias="status"),
) -> List[TaskResponse]:
    """List the caller's tasks, newest first.

    Args:
        owner_id: Authenticated caller
        task_service: Task service instance
        status_filter: Optional status to filter by

    Returns:
        List of task responses
    """
    logger.debug(f"Listing tasks for {owner_id} with status={status_filter}")

    tasks = task_service.list_tasks(owner_id, status=status_filter)
    today = task_service.today()
    return [TaskResponse.from_task(task, today=today) for task in tasks]


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
async def create_task(
    task_data: TaskCreate,
    response: Response,
    owner_id: CurrentOwner,
    task_service: TaskServiceDep,
) -> TaskResponse:
    """Create a new task.

    Args:
        task_data: Task creation data
        response: Outgoing response, used for the audit status header
        owner_id: Authenticated caller
        task_service: Task service instance

    Returns:
        Created task response
    """
    logger.info(f"Creating new task for {owner_id}: {task_data.title}")

    result = task_service.create_task(owner_id, task_data)
    mark_audit_status(response, result)
    return TaskResponse.from_task(result.task, today=task_service.today())


@router.get("/overdue", response_model=List[TaskResponse])
async def list_overdue_tasks(owner_id: CurrentOwner, task_service: TaskServiceDep) -> List[TaskResponse]:
    """List the caller's incomplete tasks whose due day has passed."""
    tasks = task_service.find_overdue_tasks(owner_id)
    today = task_service.today()
    return [TaskResponse.from_task(task, today=today) for task in tasks]


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(task_id: UUID, owner_id: CurrentOwner, task_service: TaskServiceDep) -> TaskResponse:
    """Get a specific task by ID.

    Args:
        task_id: Task ID
        owner_id: Authenticated caller
        task_service: Task service instance

    Returns:
        Task response
    """
    logger.debug(f"Getting task: {task_id}")

    task = task_service.get_task(owner_id, task_id)
    return TaskResponse.from_task(task, today=task_service.today())


@router.put("/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: UUID,
    task_data: TaskUpdate,
    response: Response,
    owner_id: CurrentOwner,
    task_service: TaskServiceDep,
) -> TaskResponse:
    """Update a task. Only the supplied fields change.

    Args:
        task_id: Task ID
        task_data: Task update data
        response: Outgoing response, used for the audit status header
        owner_id: Authenticated caller
        task_service: Task service instance

    Returns:
        Updated task response
    """
    logger.info(f"Updating task: {task_id}")

    result = task_service.update_task(owner_id, task_id, task_data)
    mark_audit_status(response, result)
    return TaskResponse.from_task(result.task, today=task_service.today())


@router.delete("/{task_id}", response_model=DeleteResponse)
async def delete_task(
    task_id: UUID,
    response: Response,
    owner_id: CurrentOwner,
    task_service: TaskServiceDep,
) -> DeleteResponse:
    """Soft-delete a task.

    Args:
        task_id: Task ID
        response: Outgoing response, used for the audit status header
        owner_id: Authenticated caller
        task_service: Task service instance

    Returns:
        Deletion confirmation
    """
    logger.info(f"Deleting task: {task_id}")

    result = task_service.delete_task(owner_id, task_id)
    mark_audit_status(response, result)
    return DeleteResponse(id=task_id, audit_degraded=result.audit_degraded)

"""Optimistic status moves with rollback.

A status change is applied to the local board immediately, then sent to the
server. On failure the affected task is restored exactly as it was before the
move; on success the board is optionally re-fetched so server-derived fields
replace the optimistic values.
"""

import logging
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from ..errors import NotFound, TaskboardError
from ..models.task import TaskStatus
from ..schemas import TaskResponse
from ..services.task_store import parse_status
from .gateway import TaskGateway

logger = logging.getLogger(__name__)

MOVE_FAILED_NOTICE = "Failed to update task status. Changes have been reverted."
AUDIT_DEGRADED_NOTICE = "Status saved, but the activity history may be incomplete."


class MoveResult(str, Enum):
    NOOP = "noop"
    CONFIRMED = "confirmed"
    ROLLED_BACK = "rolled_back"


class MoveOutcome(BaseModel):
    """What happened to a move request."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    result: MoveResult
    task: Optional[TaskResponse] = None
    error: Optional[TaskboardError] = None
    audit_degraded: bool = False


class LocalBoard:
    """The client's local view of the caller's tasks, in server order."""

    def __init__(self, tasks: Iterable[TaskResponse] = ()):
        self._tasks: Dict[str, TaskResponse] = {}
        self.replace_all(tasks)

    def replace_all(self, tasks: Iterable[TaskResponse]) -> None:
        self._tasks = {str(task.id): task for task in tasks}

    def get(self, task_id: Union[UUID, str]) -> Optional[TaskResponse]:
        return self._tasks.get(str(task_id))

    def put(self, task: TaskResponse) -> None:
        """Replace a task in place, keeping its position."""
        self._tasks[str(task.id)] = task

    def tasks(self) -> List[TaskResponse]:
        return list(self._tasks.values())

    def column(self, status: TaskStatus) -> List[TaskResponse]:
        return [task for task in self._tasks.values() if task.status == status]


class OptimisticSyncClient:
    """Applies status moves locally before the server confirms them."""

    def __init__(
        self,
        gateway: TaskGateway,
        notifier: Optional[Callable[[str], None]] = None,
        reconcile: bool = True,
    ):
        """Initialize the sync client.

        Args:
            gateway: Server access
            notifier: Receives user-visible notices
            reconcile: Re-fetch the board after a confirmed move
        """
        self.gateway = gateway
        self.board = LocalBoard()
        self.notifier = notifier or (lambda message: None)
        self.reconcile = reconcile

    async def refresh(self) -> List[TaskResponse]:
        """Replace the local board with the server's list."""
        tasks = await self.gateway.list_tasks()
        self.board.replace_all(tasks)
        logger.debug(f"Board refreshed with {len(tasks)} tasks")
        return tasks

    async def move_task(self, task_id: Union[UUID, str], new_status: Union[TaskStatus, str]) -> MoveOutcome:
        """Move a task to another column.

        Any failure from the gateway restores the task's snapshot and sends
        the failure notice. Taxonomy errors are reported on the outcome;
        anything else is re-raised after the rollback.

        Raises:
            NotFound: If the task is not on the local board
            ValidationError: If the target status is unknown
        """
        new_status = parse_status(new_status)
        current = self.board.get(task_id)
        if current is None:
            raise NotFound(f"Task {task_id} is not on the board")

        if current.status == new_status:
            return MoveOutcome(result=MoveResult.NOOP, task=current)

        snapshot = current.model_copy(deep=True)
        self.board.put(current.model_copy(update={"status": new_status}))
        logger.info(f"Optimistically moved task {task_id}: {snapshot.status.value} -> {new_status.value}")

        try:
            reply = await self.gateway.update_task(str(task_id), {"status": new_status.value})
        except TaskboardError as e:
            self.board.put(snapshot)
            logger.warning(f"Move of task {task_id} failed, reverted: {e.message}")
            self.notifier(MOVE_FAILED_NOTICE)
            return MoveOutcome(result=MoveResult.ROLLED_BACK, task=snapshot, error=e)
        except BaseException:
            self.board.put(snapshot)
            logger.error(f"Move of task {task_id} failed unexpectedly, reverted", exc_info=True)
            self.notifier(MOVE_FAILED_NOTICE)
            raise

        self.board.put(reply.task)
        if reply.audit_degraded:
            self.notifier(AUDIT_DEGRADED_NOTICE)

        if self.reconcile:
            try:
                await self.refresh()
            except TaskboardError as e:
                # The move itself is confirmed; keep the server's reply for this task.
                logger.warning(f"Board refresh after move failed: {e.message}")

        return MoveOutcome(
            result=MoveResult.CONFIRMED,
            task=self.board.get(task_id) or reply.task,
            audit_degraded=reply.audit_degraded,
        )

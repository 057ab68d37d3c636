"""Tests for optimistic status moves and rollback."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio

from taskboard.errors import Conflict, NotFound, StorageUnavailable, ValidationError
from taskboard.models.task import TaskStatus
from taskboard.sync.gateway import UpdateReply
from taskboard.sync.optimistic import (
    AUDIT_DEGRADED_NOTICE,
    MOVE_FAILED_NOTICE,
    LocalBoard,
    MoveResult,
    OptimisticSyncClient,
)


@pytest.fixture
def board_tasks(make_task):
    return [
        make_task(TaskStatus.PENDING, title="Ship report"),
        make_task(TaskStatus.IN_PROGRESS, title="Review budget"),
    ]


@pytest.fixture
def gateway(board_tasks):
    mock_gateway = MagicMock()
    mock_gateway.list_tasks = AsyncMock(return_value=board_tasks)
    mock_gateway.update_task = AsyncMock()
    return mock_gateway


@pytest.fixture
def notifier():
    return MagicMock()


@pytest_asyncio.fixture
async def sync_client(gateway, notifier):
    client = OptimisticSyncClient(gateway, notifier=notifier)
    await client.refresh()
    gateway.list_tasks.reset_mock()
    return client


class TestLocalBoard:
    """Test the local view."""

    def test_columns(self, board_tasks):
        board = LocalBoard(board_tasks)

        assert [t.title for t in board.column(TaskStatus.PENDING)] == ["Ship report"]
        assert [t.title for t in board.column(TaskStatus.IN_PROGRESS)] == ["Review budget"]
        assert board.column(TaskStatus.COMPLETED) == []

    def test_put_keeps_position(self, board_tasks):
        board = LocalBoard(board_tasks)
        moved = board_tasks[0].model_copy(update={"status": TaskStatus.COMPLETED})

        board.put(moved)

        assert [t.id for t in board.tasks()] == [t.id for t in board_tasks]


class TestMoveTask:
    """Test the optimistic move protocol."""

    @pytest.mark.asyncio
    async def test_same_status_sends_nothing(self, sync_client, gateway, board_tasks):
        outcome = await sync_client.move_task(board_tasks[0].id, "pending")

        assert outcome.result == MoveResult.NOOP
        gateway.update_task.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_task(self, sync_client, make_task):
        with pytest.raises(NotFound):
            await sync_client.move_task(make_task().id, "completed")

    @pytest.mark.asyncio
    async def test_applies_before_server_replies(self, sync_client, gateway, board_tasks):
        task = board_tasks[0]
        seen = {}

        async def update_task(task_id, fields):
            seen["status"] = sync_client.board.get(task_id).status
            confirmed = task.model_copy(update={"status": TaskStatus.IN_PROGRESS})
            return UpdateReply(task=confirmed)

        gateway.update_task.side_effect = update_task

        await sync_client.move_task(task.id, TaskStatus.IN_PROGRESS)

        assert seen["status"] == TaskStatus.IN_PROGRESS
        gateway.update_task.assert_awaited_once_with(str(task.id), {"status": "in-progress"})

    @pytest.mark.asyncio
    async def test_success_reconciles_with_server(self, sync_client, gateway, board_tasks):
        task = board_tasks[0]
        confirmed = task.model_copy(update={"status": TaskStatus.IN_PROGRESS})
        gateway.update_task.return_value = UpdateReply(task=confirmed)
        gateway.list_tasks.return_value = [confirmed, board_tasks[1]]

        outcome = await sync_client.move_task(task.id, "in-progress")

        assert outcome.result == MoveResult.CONFIRMED
        assert outcome.task == confirmed
        assert sync_client.board.get(task.id) == confirmed
        gateway.list_tasks.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_success_without_reconcile(self, gateway, notifier, board_tasks):
        client = OptimisticSyncClient(gateway, notifier=notifier, reconcile=False)
        await client.refresh()
        gateway.list_tasks.reset_mock()
        confirmed = board_tasks[0].model_copy(update={"status": TaskStatus.COMPLETED})
        gateway.update_task.return_value = UpdateReply(task=confirmed)

        outcome = await client.move_task(board_tasks[0].id, "completed")

        assert outcome.result == MoveResult.CONFIRMED
        assert client.board.get(board_tasks[0].id) == confirmed
        gateway.list_tasks.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [StorageUnavailable(), ValidationError(), NotFound(), Conflict()])
    async def test_failure_restores_snapshot(self, sync_client, gateway, notifier, board_tasks, error):
        task = board_tasks[0]
        before = sync_client.board.get(task.id).model_copy(deep=True)
        gateway.update_task.side_effect = error

        outcome = await sync_client.move_task(task.id, "in-progress")

        assert outcome.result == MoveResult.ROLLED_BACK
        assert outcome.error is error
        assert sync_client.board.get(task.id) == before
        assert sync_client.board.get(task.id).status == TaskStatus.PENDING
        notifier.assert_called_once_with(MOVE_FAILED_NOTICE)
        gateway.list_tasks.assert_not_called()

    @pytest.mark.asyncio
    async def test_rollback_leaves_other_tasks_alone(self, sync_client, gateway, board_tasks):
        other = board_tasks[1]
        sync_client.board.put(other.model_copy(update={"title": "Review the budget"}))
        gateway.update_task.side_effect = StorageUnavailable()

        await sync_client.move_task(board_tasks[0].id, "completed")

        assert sync_client.board.get(other.id).title == "Review the budget"

    @pytest.mark.asyncio
    async def test_audit_degraded_is_reported(self, sync_client, gateway, notifier, board_tasks):
        confirmed = board_tasks[0].model_copy(update={"status": TaskStatus.COMPLETED})
        gateway.update_task.return_value = UpdateReply(task=confirmed, audit_degraded=True)
        gateway.list_tasks.return_value = [confirmed, board_tasks[1]]

        outcome = await sync_client.move_task(board_tasks[0].id, "completed")

        assert outcome.result == MoveResult.CONFIRMED
        assert outcome.audit_degraded is True
        notifier.assert_called_once_with(AUDIT_DEGRADED_NOTICE)

    @pytest.mark.asyncio
    async def test_refresh_failure_keeps_confirmed_move(self, sync_client, gateway, notifier, board_tasks):
        confirmed = board_tasks[0].model_copy(update={"status": TaskStatus.COMPLETED})
        gateway.update_task.return_value = UpdateReply(task=confirmed)
        gateway.list_tasks.side_effect = StorageUnavailable()

        outcome = await sync_client.move_task(board_tasks[0].id, "completed")

        assert outcome.result == MoveResult.CONFIRMED
        assert sync_client.board.get(board_tasks[0].id) == confirmed
        notifier.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_status_is_rejected(self, sync_client, gateway, board_tasks):
        with pytest.raises(ValidationError):
            await sync_client.move_task(board_tasks[0].id, "archived")

        gateway.update_task.assert_not_called()
        assert sync_client.board.get(board_tasks[0].id).status == TaskStatus.PENDING

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [ValueError("malformed reply"), asyncio.CancelledError()])
    async def test_unexpected_failure_restores_snapshot(self, sync_client, gateway, notifier, board_tasks, error):
        task = board_tasks[0]
        before = sync_client.board.get(task.id).model_copy(deep=True)
        gateway.update_task.side_effect = error

        with pytest.raises(type(error)):
            await sync_client.move_task(task.id, "in-progress")

        assert sync_client.board.get(task.id) == before
        notifier.assert_called_once_with(MOVE_FAILED_NOTICE)
        gateway.list_tasks.assert_not_called()

    @pytest.mark.asyncio
    async def test_outcome_is_serializable(self, sync_client, board_tasks):
        outcome = await sync_client.move_task(board_tasks[0].id, "pending")

        dumped = outcome.model_dump(exclude={"error"})
        assert dumped["result"] == MoveResult.NOOP
        assert dumped["task"]["id"] == board_tasks[0].id
        assert dumped["audit_degraded"] is False

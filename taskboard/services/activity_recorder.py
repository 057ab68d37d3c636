"""Append-only activity log."""

import logging
from threading import Lock
from typing import List, Optional

from ..models.activity import Activity, ActivityAction
from ..models.task import TaskStatus

logger = logging.getLogger(__name__)

DEFAULT_RECENT_LIMIT = 5


class ActivityRecorder:
    """Owns activity records. Entries are only ever appended."""

    def __init__(self):
        self._activities: List[Activity] = []
        self._lock = Lock()
        logger.info("Activity recorder initialized with in-memory storage")

    def record(
        self,
        owner_id: str,
        action: ActivityAction,
        task_title: str,
        details: str = "",
        old_status: Optional[TaskStatus] = None,
        new_status: Optional[TaskStatus] = None,
    ) -> Activity:
        """Append one activity entry.

        Raises:
            StorageUnavailable: If the log cannot be written
        """
        activity = Activity(
            owner_id=owner_id,
            action=action,
            task_title=task_title,
            details=details,
            old_status=old_status,
            new_status=new_status,
        )

        with self._lock:
            self._activities.append(activity)

        logger.debug(f"Recorded {activity.action.value} for owner {owner_id}: {details}")
        return activity

    def recent(self, owner_id: str, limit: int = DEFAULT_RECENT_LIMIT) -> List[Activity]:
        """Most recent activities for an owner, newest first, at most ``limit``."""
        if limit <= 0:
            return []

        with self._lock:
            activities = [a for a in reversed(self._activities) if a.owner_id == owner_id]

        activities.sort(key=lambda a: a.created_at, reverse=True)
        return activities[:limit]

    def count(self, owner_id: Optional[str] = None) -> int:
        """Number of recorded activities, optionally for one owner."""
        with self._lock:
            if owner_id is None:
                return len(self._activities)
            return sum(1 for a in self._activities if a.owner_id == owner_id)

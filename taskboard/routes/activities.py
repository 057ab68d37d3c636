"""Recent activity feed."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from ..config import Settings
from ..deps import CurrentOwner, TaskServiceDep, get_settings_from_app
from ..schemas import ActivityResponse

router = APIRouter()


@router.get("", response_model=List[ActivityResponse])
async def recent_activities(
    owner_id: CurrentOwner,
    task_service: TaskServiceDep,
    settings: Settings = Depends(get_settings_from_app),
    limit: Optional[int] = Query(None, ge=1, le=50),
) -> List[ActivityResponse]:
    """Most recent activities for the caller, newest first."""
    activities = task_service.recent_activity(owner_id, limit=limit or settings.activity_feed_limit)
    return [ActivityResponse.from_activity(activity) for activity in activities]

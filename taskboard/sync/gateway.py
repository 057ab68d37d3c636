"""Client-side access to the task API."""

import asyncio
import logging
from typing import Any, Dict, List, Mapping, Optional, Protocol, Tuple, Type

import aiohttp
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ..config import Settings
from ..errors import Conflict, Forbidden, NotFound, StorageUnavailable, TaskboardError, ValidationError
from ..schemas import TaskResponse

logger = logging.getLogger(__name__)

AUDIT_STATUS_HEADER = "X-Audit-Status"

ERRORS_BY_STATUS: Dict[int, Type[TaskboardError]] = {
    400: ValidationError,
    401: Forbidden,
    403: Forbidden,
    404: NotFound,
    409: Conflict,
    422: ValidationError,
}


class UpdateReply(BaseModel):
    """Server reply to an update: the authoritative task and its audit status."""
    task: TaskResponse
    audit_degraded: bool = False


class TaskGateway(Protocol):
    """What the sync client needs from the server."""

    async def list_tasks(self) -> List[TaskResponse]:
        ...

    async def update_task(self, task_id: str, fields: Mapping[str, Any]) -> UpdateReply:
        ...


def error_for_status(status: int, payload: Optional[Mapping[str, Any]] = None) -> TaskboardError:
    """Map an HTTP error status back to the error taxonomy."""
    message = None
    if payload:
        message = payload.get("error") or payload.get("message")
    error_class = ERRORS_BY_STATUS.get(status)
    if error_class is None:
        error_class = StorageUnavailable if status >= 500 else TaskboardError
    return error_class(str(message) if message else None)


def parse_task(payload: Any) -> TaskResponse:
    """Validate a task body returned by the server.

    Raises:
        StorageUnavailable: If the body is not a well-formed task
    """
    try:
        return TaskResponse.model_validate(payload)
    except PydanticValidationError as e:
        logger.error(f"Task API returned a malformed task: {str(e)}")
        raise StorageUnavailable("Task API returned a malformed reply") from e


class HttpTaskGateway:
    """TaskGateway over HTTP using aiohttp."""

    def __init__(self, base_url: str, token: str, timeout: float = 10.0):
        """Initialize the gateway.

        Args:
            base_url: Root URL of the task API
            token: Bearer token for the caller
            timeout: Total request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.headers = {"Authorization": f"Bearer {token}"}
        self.timeout = aiohttp.ClientTimeout(total=timeout)

    @classmethod
    def from_settings(cls, settings: Settings, token: str) -> "HttpTaskGateway":
        """Build a gateway for the configured API base URL."""
        return cls(settings.api_base_url, token, timeout=settings.request_timeout_seconds)

    async def list_tasks(self) -> List[TaskResponse]:
        payload, _ = await self._request("GET", "/tasks")
        if not isinstance(payload, list):
            raise StorageUnavailable("Task API returned a malformed reply")
        return [parse_task(item) for item in payload]

    async def update_task(self, task_id: str, fields: Mapping[str, Any]) -> UpdateReply:
        payload, headers = await self._request("PUT", f"/tasks/{task_id}", json=dict(fields))
        return UpdateReply(
            task=parse_task(payload),
            audit_degraded=headers.get(AUDIT_STATUS_HEADER) == "degraded",
        )

    async def _request(self, method: str, path: str, json: Optional[dict] = None) -> Tuple[Any, Mapping[str, str]]:
        url = f"{self.base_url}{path}"
        try:
            async with aiohttp.ClientSession(headers=self.headers, timeout=self.timeout) as session:
                async with session.request(method, url, json=json) as response:
                    try:
                        payload = await response.json()
                    except (aiohttp.ContentTypeError, ValueError):
                        payload = None

                    if response.status >= 400:
                        logger.warning(f"{method} {path} failed with HTTP {response.status}")
                        raise error_for_status(response.status, payload if isinstance(payload, dict) else None)

                    return payload, response.headers
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"{method} {path} could not reach the server: {str(e)}")
            raise StorageUnavailable(f"Task API unreachable: {str(e)}") from e

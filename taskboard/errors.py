"""Error taxonomy shared by the task store, activity recorder and task service."""

from typing import Optional


class TaskboardError(Exception):
    """Base class for all taskboard errors.

    Each subclass carries the HTTP status code it is reported with.
    """

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(TaskboardError):
    """Malformed or out-of-range input."""

    status_code = 400
    default_message = "Invalid input"


class NotFound(TaskboardError):
    """No non-deleted record exists for the identifier."""

    status_code = 404
    default_message = "Task not found"


class Forbidden(TaskboardError):
    """The record exists but belongs to another owner."""

    status_code = 401
    default_message = "Not authorized"


class StorageUnavailable(TaskboardError):
    """The underlying persistence layer could not be reached."""

    status_code = 503
    default_message = "Storage unavailable"


class Conflict(TaskboardError):
    """The record changed since the caller last read it."""

    status_code = 409
    default_message = "Task was modified concurrently"


class AuditDegraded(TaskboardError):
    """A task mutation succeeded but its activity entry could not be written.

    Never raised by the task service; attached to the mutation result instead.
    The 200 status code only fills the shared base-class interface: the
    mutation it describes succeeded.
    """

    status_code = 200
    default_message = "Task saved, but the activity history may be incomplete"

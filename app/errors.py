"""Error types raised by the task store and service layer.

Each error carries the HTTP status it maps to; the handlers in ``app.main``
turn them into JSON bodies.
"""
from typing import List


class TaskAPIError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_body(self) -> dict:
        return {"error": self.message}


class TaskValidationError(TaskAPIError):
    """One or more field rules failed on a create or update."""

    status_code = 400

    def __init__(self, errors: List[str]):
        super().__init__("; ".join(errors))
        self.errors = list(errors)

    def to_body(self) -> dict:
        return {"errors": self.errors}


class MalformedRequestError(TaskAPIError):
    status_code = 400

    def __init__(self, message: str = "Invalid JSON in request body"):
        super().__init__(message)


class BadBulkRequestError(TaskAPIError):
    """Bulk or reorder request with a missing action or a bad id list."""

    status_code = 400


class NotFoundError(TaskAPIError):
    status_code = 404

    def __init__(self, message: str = "Task not found"):
        super().__init__(message)


class StorageError(TaskAPIError):
    """Reading or writing the tasks file failed."""

    status_code = 500

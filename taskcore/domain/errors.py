"""
Error taxonomy for the task query engine.

Core operations never raise for caller mistakes; they return a `CoreError`
value that the transport layer maps to a status code. Persistence failures
are the exception: stores raise `StoreError`, which the service logs and
surfaces as an internal error.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    STORE = "store"


class ErrorCode(str, Enum):
    INVALID_LIMIT = "INVALID_LIMIT"
    LIMIT_TOO_LARGE = "LIMIT_TOO_LARGE"
    INVALID_PAGE = "INVALID_PAGE"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    PAGE_NOT_FOUND = "PAGE_NOT_FOUND"
    TODO_NOT_FOUND = "TODO_NOT_FOUND"
    STORE_ERROR = "STORE_ERROR"


_STATUS_BY_KIND: Dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.STORE: 500,
}


class CoreError(BaseModel):
    """
    Structured rejection returned by core operations.

    `details` carries machine-readable payload such as `totalPages` for
    PAGE_NOT_FOUND or the offending positions of a rejected import batch.
    """

    kind: ErrorKind
    code: ErrorCode
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)

    model_config = {"frozen": True}

    @property
    def status_code(self) -> int:
        return _STATUS_BY_KIND[self.kind]

    def to_envelope(self) -> Dict[str, Any]:
        error: Dict[str, Any] = {"message": self.message, "code": self.code.value}
        if self.details:
            error["details"] = dict(self.details)
        return {"success": False, "error": error}


def validation_error(code: ErrorCode, message: str, **details: Any) -> CoreError:
    return CoreError(kind=ErrorKind.VALIDATION, code=code, message=message, details=details)


def not_found_error(code: ErrorCode, message: str, **details: Any) -> CoreError:
    return CoreError(kind=ErrorKind.NOT_FOUND, code=code, message=message, details=details)


def task_not_found(task_id: int) -> CoreError:
    return not_found_error(ErrorCode.TODO_NOT_FOUND, "Todo not found", id=task_id)


class StoreError(Exception):
    """
    Raised by a store when loading or persisting the collection fails.

    The original exception is chained as `__cause__`; `operation` and
    `backend` identify where it happened.
    """

    def __init__(self, message: str, *, operation: str, backend: str) -> None:
        super().__init__(message)
        self.operation = operation
        self.backend = backend

    def to_core_error(self) -> CoreError:
        return CoreError(
            kind=ErrorKind.STORE,
            code=ErrorCode.STORE_ERROR,
            message=str(self),
            details={"operation": self.operation, "backend": self.backend},
        )


__all__ = [
    "CoreError",
    "ErrorCode",
    "ErrorKind",
    "StoreError",
    "not_found_error",
    "task_not_found",
    "validation_error",
]

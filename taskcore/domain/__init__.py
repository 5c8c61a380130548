"""
Domain package for the task query engine.

Exports the task models and the error taxonomy shared by the core, the stores
and the service layer. Keep this package focused on data definitions and
validation concerns.
"""

from taskcore.domain.errors import CoreError, ErrorCode, ErrorKind, StoreError
from taskcore.domain.models import Priority, Task, TaskCollection

__all__ = [
    "CoreError",
    "ErrorCode",
    "ErrorKind",
    "Priority",
    "StoreError",
    "Task",
    "TaskCollection",
]

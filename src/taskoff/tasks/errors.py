# src/taskoff/tasks/errors.py

"""Exceptions raised by the task engine."""


class TaskoffError(Exception):
    """Base exception for task engine errors."""

    pass


class TaskNotFoundError(TaskoffError, LookupError):
    """Raised when an operation references a task id that is not stored."""

    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task not found: {task_id}")
        self.task_id = task_id


class PersistenceError(TaskoffError):
    """Raised when the task collection cannot be serialized, deserialized or stored."""

    pass


class SchedulingError(TaskoffError):
    """Raised when a notifier rejects or cannot fulfil a reminder request."""

    pass

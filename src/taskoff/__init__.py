"""Task Off: local task reminders with recurrence and notification scheduling."""

from .tasks.errors import PersistenceError, SchedulingError, TaskNotFoundError, TaskoffError
from .tasks.recurrence import next_due_date
from .tasks.task_models import Recurrence, Task, Urgency
from .tasks.task_store import TaskStore

__all__ = [
    "PersistenceError",
    "Recurrence",
    "SchedulingError",
    "Task",
    "TaskNotFoundError",
    "TaskStore",
    "TaskoffError",
    "Urgency",
    "next_due_date",
]

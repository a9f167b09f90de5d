"""
Task subsystem.

Components:
- task_models.py: data structures (Task, Recurrence, Urgency)
- recurrence.py: due-date rollover for recurring tasks
- task_store.py: TaskStore, the owner of the task collection
- errors.py: exception hierarchy
"""

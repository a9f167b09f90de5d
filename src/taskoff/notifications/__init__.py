"""
Notification subsystem.

Components:
- reminders.py: reminder / overdue-alert payload construction
- scheduler.py: in-process Notifier with a polling delivery loop
- sinks.py: where delivered notifications end up
"""

"""
Task subsystem.

Components:
- task_models.py: data structures (User, Task, TaskUpdate, Notification, enums)
- task_store.py: in-memory entity store with per-collection indexes
- lifecycle.py: create / transition / request_update
- notifications.py: single-recipient notification fan-out
- queries.py: read side (task lists, detail, notification pages, mark-read)
- notification_poller.py: polling loop that pushes new notifications outward
- task_api.py: session-aware facade used by front ends
"""

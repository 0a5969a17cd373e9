"""
Task subsystem.

Components:
- task_models.py: data structures (Task, TaskStatus)
- task_store.py: in-memory ordered store shared by every component that needs it
- task_handlers.py: task_created / task_completed subscribers (the only writers)
"""

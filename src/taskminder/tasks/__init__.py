"""
Task subsystem.

Components:
- task_models.py: data structures (Task, Priority)
- task_store.py: SQLite-backed storage with live views
- live_query.py: observable snapshots over the store
- task_repository.py: storage-only facade used by the service
- task_service.py: the command surface (write, then schedule)
- task_views.py: search/sort/filter helpers for the console
"""

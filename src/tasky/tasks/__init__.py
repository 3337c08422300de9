"""
Task subsystem.

Components:
- task_models.py: task variants (single/daily/weekly), weekday normalization, Reminder
- task_store.py: SQLite-backed reminder storage
- task_api.py: create/edit/complete/delete flows and list ordering helpers
"""

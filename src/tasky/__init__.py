"""
Tasky: personal reminders with recurrence-aware notification scheduling.
"""

__version__ = "0.1.0"

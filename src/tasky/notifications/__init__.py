"""
Recurrence and notification scheduling engine.

Components:
- occurrence.py: next occurrence of a task for display/ordering
- triggers.py: trigger specifications and notification content
- planner.py: task -> triggers, sequential registration
- registry.py: trigger blob encoding and best-effort cancellation
- scheduler.py: cancel-old / plan-new / register-new per task operation
- local_registrar.py: in-process registrar + dispatch loop
- desktop.py: plyer-backed notifier
- diagnostics.py: scheduled-vs-tracked consistency report
"""

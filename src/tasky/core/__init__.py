"""
Core wiring.

- ports.py: Protocols for the notification registrar, notifier and reminder store
- state.py: AppState shared by the front end
"""

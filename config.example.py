# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "TASKY_APP_NAME": "App display name (default: tasky).",
    "TASKY_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    # Notifications
    "TASKY_NOTIFICATIONS_ENABLED": "Notification permission (true/false, default: true). "
    "When false, reminders are saved without alerts.",
    "TASKY_DESKTOP_NOTIFICATIONS": "Show desktop notifications via plyer (true/false, default: true); "
    "false writes fired reminders to the log only.",
    "TASKY_DISPATCH_INTERVAL_SECONDS": "How often due reminders are checked (default: 15, min 0.5).",
    # Front end
    "TASKY_CONSOLE_ENABLED": "Run the console REPL (true/false, default: true).",
    # Local data (gitignored)
    "TASKY_DATA_DIR": "Local data dir (default: .local/tasky). Holds the log file too.",
    "TASKY_TASKS_DB_PATH": "SQLite reminder store (default: <data_dir>/tasky.sqlite3).",
}

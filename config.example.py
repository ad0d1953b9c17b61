# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "LAZYCAL_APP_NAME": "App display name (default: lazycal).",
    "LAZYCAL_LOG_LEVEL": "Console logging level (default: INFO).",
    # Paths (gitignored)
    "LAZYCAL_DATA_DIR": "Local data directory (default: .local/lazycal).",
    "LAZYCAL_TASKS_PATH": "Task list JSON path (default: <data_dir>/tasks.json).",
    "LAZYCAL_PREFERENCES_PATH": "User preferences JSON path (default: <data_dir>/settings.json).",
    "LAZYCAL_LOG_DIR": "Directory for lazycal.log (default: <data_dir>).",
    # Reminder
    "LAZYCAL_REMINDER_ENABLED": "Run the daily progress reminder (true/false, default: true).",
    "LAZYCAL_REMINDER_TIME": "Reminder time of day used until the user picks one (HH:MM, default: 17:00).",
    "LAZYCAL_REMINDER_INTERVAL_SECONDS": "How often the reminder checks the clock (default: 60).",
    # Persistence
    "LAZYCAL_SAVE_ON_MUTATION": "Write tasks.json after every store change (true/false, default: true).",
}

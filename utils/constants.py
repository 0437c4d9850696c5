APP_NAME = "Recurring Bills"
DB_FILE = "recurring.db"
DEFAULT_OWNER_ID = "local"
DATE_FORMAT = "%Y-%m-%d"

DUE_CHECK_INTERVAL_SECONDS = 60
REMINDER_CHECK_INTERVAL_SECONDS = 60 * 60
REMINDER_HORIZON_DAYS = 7
UPCOMING_HORIZON_DAYS = 30

KINDS = ["expense", "income"]
FREQUENCY_LABELS = {
    "weekly": "Weekly",
    "monthly": "Monthly",
    "quarterly": "Quarterly",
    "yearly": "Yearly",
}

RECURRING_TAG = "recurring"

# ── Reminders ────────────────────────────────────────────────────────────────

REMINDER_SETTINGS_KEY = "bill_reminder_settings"
PUSH_TARGET_KEY = "push_target"

# reminderTypes flag -> days until due
REMINDER_OFFSETS = {
    "dueToday": 0,
    "dueTomorrow": 1,
    "dueIn3Days": 3,
    "dueInWeek": 7,
}

REMINDER_TEMPLATES = {
    0: ("Bill Due Today", "is due today"),
    1: ("Bill Due Tomorrow", "is due tomorrow"),
    3: ("Bill Due in 3 Days", "is due in 3 days"),
    7: ("Bill Due Next Week", "is due in a week"),
}

DEFAULT_REMINDER_SETTINGS = {
    "enabled": True,
    "daysBeforeDue": 1,
    "timeOfDay": "09:00",
    "reminderTypes": {
        "dueToday": True,
        "dueTomorrow": True,
        "dueIn3Days": True,
        "dueInWeek": False,
    },
}

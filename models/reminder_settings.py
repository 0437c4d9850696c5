from dataclasses import dataclass, field

from utils.constants import DEFAULT_REMINDER_SETTINGS, REMINDER_OFFSETS


@dataclass
class ReminderTypes:
    due_today: bool = True
    due_tomorrow: bool = True
    due_in_3_days: bool = True
    due_in_week: bool = False

    def enabled_offsets(self) -> set[int]:
        flags = {
            "dueToday": self.due_today,
            "dueTomorrow": self.due_tomorrow,
            "dueIn3Days": self.due_in_3_days,
            "dueInWeek": self.due_in_week,
        }
        return {REMINDER_OFFSETS[k] for k, on in flags.items() if on}


@dataclass
class ReminderSettings:
    enabled: bool = True
    days_before_due: int = 1
    time_of_day: str = "09:00"   # 'HH:MM', 24h
    reminder_types: ReminderTypes = field(default_factory=ReminderTypes)

    @classmethod
    def from_dict(cls, data: dict) -> "ReminderSettings":
        """Merge a stored camelCase record over the defaults."""
        merged = {**DEFAULT_REMINDER_SETTINGS, **data}
        types = {**DEFAULT_REMINDER_SETTINGS["reminderTypes"], **(data.get("reminderTypes") or {})}
        return cls(
            enabled=bool(merged["enabled"]),
            days_before_due=int(merged["daysBeforeDue"]),
            time_of_day=str(merged["timeOfDay"]),
            reminder_types=ReminderTypes(
                due_today=bool(types["dueToday"]),
                due_tomorrow=bool(types["dueTomorrow"]),
                due_in_3_days=bool(types["dueIn3Days"]),
                due_in_week=bool(types["dueInWeek"]),
            ),
        )

    def to_dict(self) -> dict:
        return {
            "enabled": self.enabled,
            "daysBeforeDue": self.days_before_due,
            "timeOfDay": self.time_of_day,
            "reminderTypes": {
                "dueToday": self.reminder_types.due_today,
                "dueTomorrow": self.reminder_types.due_tomorrow,
                "dueIn3Days": self.reminder_types.due_in_3_days,
                "dueInWeek": self.reminder_types.due_in_week,
            },
        }

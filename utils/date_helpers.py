from datetime import date, datetime, time
import calendar
from utils.constants import DATE_FORMAT

SECONDS_PER_DAY = 24 * 60 * 60


def now() -> datetime:
    return datetime.now()


def parse_date(date_str: str) -> date | None:
    """Parse a date string in YYYY-MM-DD format, returning None on failure."""
    if not date_str:
        return None
    for fmt in ("%Y-%m-%d", "%Y/%m/%d", "%Y.%m.%d"):
        try:
            return datetime.strptime(date_str, fmt).date()
        except ValueError:
            continue
    return None


def format_date(d: date) -> str:
    return d.strftime(DATE_FORMAT)


def parse_timestamp(value: str) -> datetime | None:
    """Parse an ISO-8601 timestamp, returning None on failure."""
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None


def format_timestamp(dt: datetime) -> str:
    return dt.isoformat(timespec="seconds")


def as_datetime(value: date | datetime) -> datetime:
    """Promote a bare date to midnight; datetimes pass through."""
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time.min)


def as_date(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def start_of_day(value: date | datetime) -> datetime:
    return datetime.combine(as_date(value), time.min)


def last_day_of_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def clamp_day_to_month(year: int, month: int, day: int) -> int:
    """Clamp day to valid range for the given year/month."""
    return min(day, last_day_of_month(year, month))


def add_months(d: date, n: int, day: int | None = None) -> date:
    """Add n months to date d.

    The day of month is ``day`` when given, otherwise ``d.day``; either way it
    is clamped to the last day of the target month.
    """
    month = d.month - 1 + n
    year = d.year + month // 12
    month = month % 12 + 1
    target = clamp_day_to_month(year, month, day if day else d.day)
    return d.replace(year=year, month=month, day=target)


def js_weekday(d: date) -> int:
    """Weekday with 0=Sunday .. 6=Saturday."""
    return (d.weekday() + 1) % 7


def days_between(start: datetime, end: datetime) -> float:
    """Fractional days from start to end (negative when end is earlier)."""
    return (end - start).total_seconds() / SECONDS_PER_DAY

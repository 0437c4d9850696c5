"""Frequency of a recurring schedule, paired with the anchor it uses.

Each variant carries exactly the anchor that is meaningful for it, so
"which anchor field is active" is decided by the type rather than by a
convention over two nullable columns.
"""
from dataclasses import dataclass
from typing import ClassVar, Optional, Union


@dataclass(frozen=True)
class Weekly:
    name: ClassVar[str] = "weekly"
    day: Optional[int] = None   # 0=Sun..6=Sat


@dataclass(frozen=True)
class Monthly:
    name: ClassVar[str] = "monthly"
    months: ClassVar[int] = 1
    day: Optional[int] = None   # 1-31, clamped to month length


@dataclass(frozen=True)
class Quarterly:
    name: ClassVar[str] = "quarterly"
    months: ClassVar[int] = 3
    day: Optional[int] = None


@dataclass(frozen=True)
class Yearly:
    name: ClassVar[str] = "yearly"
    months: ClassVar[int] = 12
    day: Optional[int] = None


Frequency = Union[Weekly, Monthly, Quarterly, Yearly]

_BY_NAME = {cls.name: cls for cls in (Weekly, Monthly, Quarterly, Yearly)}


def frequency_from_fields(
    frequency: str,
    day_of_week: int | None = None,
    day_of_month: int | None = None,
) -> Frequency:
    """Build the variant from the flat (frequency, day_of_week, day_of_month) columns.

    The anchor that does not apply to the frequency is ignored.
    """
    try:
        cls = _BY_NAME[frequency]
    except KeyError:
        raise ValueError(f"Invalid frequency: {frequency!r}") from None
    if cls is Weekly:
        return Weekly(day_of_week)
    return cls(day_of_month)


def to_fields(frequency: Frequency) -> tuple[str, int | None, int | None]:
    """Inverse of frequency_from_fields: (frequency, day_of_week, day_of_month)."""
    if isinstance(frequency, Weekly):
        return frequency.name, frequency.day, None
    return frequency.name, None, frequency.day

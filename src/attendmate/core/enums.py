from __future__ import annotations

from datetime import date
from enum import Enum

from .exceptions import ValidationError


class AttendanceStatus(str, Enum):
    """Normalized attendance status stored in the database."""

    PRESENT = "PRESENT"
    ABSENT = "ABSENT"

    @classmethod
    def parse(cls, value: "str | AttendanceStatus") -> "AttendanceStatus":
        """Accept 'Present', ' present ', 'PRESENT'... and reject anything else."""
        if isinstance(value, cls):
            return value
        normalized = str(value or "").strip().upper()
        try:
            return cls(normalized)
        except ValueError:
            raise ValidationError(f"Invalid attendance status: {value!r}") from None


class Weekday(str, Enum):
    MONDAY = "MONDAY"
    TUESDAY = "TUESDAY"
    WEDNESDAY = "WEDNESDAY"
    THURSDAY = "THURSDAY"
    FRIDAY = "FRIDAY"
    SATURDAY = "SATURDAY"
    SUNDAY = "SUNDAY"

    @classmethod
    def of(cls, day: date) -> "Weekday":
        return list(cls)[day.weekday()]

    @classmethod
    def parse(cls, value: "str | Weekday") -> "Weekday":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value or "").strip().upper())
        except ValueError:
            raise ValidationError(f"Invalid day: {value!r}") from None

    def previous(self) -> "Weekday":
        days = list(Weekday)
        return days[days.index(self) - 1]


# Days offered by the timetable editor.
TEACHING_DAYS = (
    Weekday.MONDAY,
    Weekday.TUESDAY,
    Weekday.WEDNESDAY,
    Weekday.THURSDAY,
    Weekday.FRIDAY,
    Weekday.SATURDAY,
)


class RiskBand(str, Enum):
    """How close a subject is to the attendance requirement."""

    SAFE = "SAFE"
    RISK = "RISK"
    UNSAFE = "UNSAFE"


class DayOutcome(str, Enum):
    """Summary of all lectures recorded on one calendar day."""

    ALL_PRESENT = "ALL_PRESENT"
    ALL_ABSENT = "ALL_ABSENT"
    MIXED = "MIXED"

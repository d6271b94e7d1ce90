from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Optional

from ..common.datetime_utils import format_hhmm, minutes_of_day
from ..core.enums import Weekday


@dataclass(frozen=True)
class TimetableSlot:
    """A recurring weekly lecture: day, subject, start time and whole-hour duration."""

    slot_id: str
    day: Weekday
    subject_id: str
    start_time: time
    duration_hours: int
    subject_name: str = ""
    user_id: str = ""
    created_at: Optional[datetime] = None

    @property
    def start_minutes(self) -> int:
        return minutes_of_day(self.start_time)

    @property
    def end_minutes(self) -> int:
        return self.start_minutes + self.duration_hours * 60

    @property
    def end_time(self) -> time:
        return time(self.end_minutes // 60 % 24, self.end_minutes % 60)

    def starts_at(self, on: date) -> datetime:
        return datetime.combine(on, self.start_time)

    def ends_at(self, on: date) -> datetime:
        return self.starts_at(on) + timedelta(hours=self.duration_hours)

    def as_dict(self) -> dict:
        return {
            "slot_id": self.slot_id,
            "day": self.day.value,
            "subject_id": self.subject_id,
            "subject_name": self.subject_name,
            "start_time": format_hhmm(self.start_time),
            "end_time": format_hhmm(self.end_time),
            "duration_hours": self.duration_hours,
        }

from __future__ import annotations

import uuid
from dataclasses import replace
from datetime import datetime, time
from typing import Iterable, Mapping, Optional

from ..common.datetime_utils import now_local, parse_hhmm
from ..core.enums import TEACHING_DAYS, Weekday
from ..core.exceptions import NotFound, SubjectNotFound, ValidationError
from ..subjects.repository import SubjectRepository
from . import validator
from .model import TimetableSlot
from .repository import TimetableRepository


def _parse_duration(value) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    raise ValidationError("Duration must be a whole number of hours")


def _teaching_day(value: "Weekday | str") -> Weekday:
    day = Weekday.parse(value)
    if day not in TEACHING_DAYS:
        raise ValidationError(f"{day.value} is not a teaching day")
    return day


class TimetableService:
    """Weekly timetable editing.

    Every edit validates the affected day and then stores the whole week
    through the repository's atomic replace, the same way a bulk save does.
    """

    def __init__(self, slots: TimetableRepository, subjects: SubjectRepository):
        self._slots = slots
        self._subjects = subjects

    def get_week(self, *, user_id: str) -> dict[Weekday, list[TimetableSlot]]:
        week: dict[Weekday, list[TimetableSlot]] = {day: [] for day in TEACHING_DAYS}
        for slot in self._slots.list_for_user(user_id=user_id):
            week.setdefault(slot.day, []).append(slot)
        return {day: validator.sort_slots(slots) for day, slots in week.items()}

    def slots_for_day(self, *, user_id: str, day: "Weekday | str") -> list[TimetableSlot]:
        return validator.sort_slots(self._slots.list_for_day(user_id=user_id, day=Weekday.parse(day)))

    def _new_slot(
        self,
        *,
        user_id: str,
        day: Weekday,
        subject_id: str,
        start: "time | str",
        duration_hours,
        now: Optional[datetime] = None,
    ) -> TimetableSlot:
        subject = self._subjects.get_by_id(user_id=user_id, subject_id=subject_id)
        if not subject:
            raise SubjectNotFound("Subject not found")
        return TimetableSlot(
            slot_id=uuid.uuid4().hex,
            user_id=user_id,
            day=day,
            subject_id=subject.subject_id,
            subject_name=subject.name,
            start_time=parse_hhmm(start),
            duration_hours=_parse_duration(duration_hours),
            created_at=now or now_local(),
        )

    def _save(self, *, user_id: str, week: Mapping[Weekday, Iterable[TimetableSlot]]) -> None:
        slots = [slot for day in week for slot in week[day]]
        self._slots.replace_week(user_id=user_id, slots=slots)

    def add_slot(
        self,
        *,
        user_id: str,
        day: "Weekday | str",
        subject_id: str,
        start: "time | str",
        duration_hours,
        now: Optional[datetime] = None,
    ) -> TimetableSlot:
        day = _teaching_day(day)
        candidate = self._new_slot(
            user_id=user_id,
            day=day,
            subject_id=subject_id,
            start=start,
            duration_hours=duration_hours,
            now=now,
        )
        week = self.get_week(user_id=user_id)
        week[day] = validator.add_slot(day, candidate, week.get(day, []))
        self._save(user_id=user_id, week=week)
        return candidate

    def remove_slot(self, *, user_id: str, day: "Weekday | str", slot_id: str) -> None:
        day = _teaching_day(day)
        week = self.get_week(user_id=user_id)
        remaining = [s for s in week.get(day, []) if s.slot_id != slot_id]
        if len(remaining) == len(week.get(day, [])):
            raise NotFound("Timetable slot not found")
        week[day] = remaining
        self._save(user_id=user_id, week=week)

    def copy_previous_day(self, *, user_id: str, day: "Weekday | str") -> list[TimetableSlot]:
        """Replace ``day`` with copies of the day before it (fresh slot ids)."""
        day = _teaching_day(day)
        if day == TEACHING_DAYS[0]:
            raise ValidationError(f"{day.value} has no previous day to copy")

        week = self.get_week(user_id=user_id)
        copies = [replace(s, slot_id=uuid.uuid4().hex, day=day) for s in week.get(day.previous(), [])]
        week[day] = validator.replace_week({day: copies})[day]
        self._save(user_id=user_id, week=week)
        return week[day]

    def replace_week(
        self,
        *,
        user_id: str,
        payload: Mapping[str, Iterable[dict]],
        now: Optional[datetime] = None,
    ) -> dict[Weekday, list[TimetableSlot]]:
        """Bulk save: ``{"MONDAY": [{"subject_id", "start_time", "duration_hours"}, ...], ...}``."""
        if not isinstance(payload, Mapping):
            raise ValidationError("Timetable must be an object keyed by day")

        raw_week: dict[Weekday, list[TimetableSlot]] = {}
        for raw_day, items in payload.items():
            day = _teaching_day(raw_day)
            slots: list[TimetableSlot] = []
            for item in items or []:
                if not isinstance(item, Mapping):
                    raise ValidationError("Each lecture must be an object")
                slots.append(
                    self._new_slot(
                        user_id=user_id,
                        day=day,
                        subject_id=str(item.get("subject_id") or ""),
                        start=item.get("start_time") or "",
                        duration_hours=item.get("duration_hours"),
                        now=now,
                    )
                )
            raw_week[day] = slots

        week = validator.replace_week(raw_week)
        self._save(user_id=user_id, week=week)
        return week

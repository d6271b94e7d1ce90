"""Weekly schedule checks.

Pure functions; nothing here touches storage.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable, Mapping

from ..core.constants import MINUTES_PER_DAY
from ..core.enums import Weekday
from ..core.exceptions import InvalidTimeRange, OverlappingSlot
from .model import TimetableSlot


def validate_slot(slot: TimetableSlot) -> None:
    duration = slot.duration_hours
    if isinstance(duration, bool) or not isinstance(duration, int) or duration < 1:
        raise InvalidTimeRange("Duration must be a whole number of hours (at least 1)")
    if slot.end_minutes >= MINUTES_PER_DAY:
        raise InvalidTimeRange("Lecture must end before midnight")


def overlaps(a: TimetableSlot, b: TimetableSlot) -> bool:
    return a.start_minutes < b.end_minutes and b.start_minutes < a.end_minutes


def sort_slots(slots: Iterable[TimetableSlot]) -> list[TimetableSlot]:
    return sorted(slots, key=lambda s: (s.start_minutes, s.end_minutes))


def add_slot(day: "Weekday | str", candidate: TimetableSlot, existing: Iterable[TimetableSlot]) -> list[TimetableSlot]:
    """Return the day's slots with ``candidate`` inserted, ordered by start time."""
    day = Weekday.parse(day)
    candidate = replace(candidate, day=day)
    validate_slot(candidate)

    existing = list(existing)
    for slot in existing:
        if slot.slot_id == candidate.slot_id:
            continue
        if overlaps(candidate, slot):
            raise OverlappingSlot(
                f"Lecture {candidate.start_time:%H:%M}-{candidate.end_time:%H:%M} overlaps "
                f"{slot.subject_name or slot.subject_id} ({slot.start_time:%H:%M}-{slot.end_time:%H:%M}) on {day.value}"
            )
    return sort_slots([*existing, candidate])


def replace_week(slots_by_day: Mapping["Weekday | str", Iterable[TimetableSlot]]) -> dict[Weekday, list[TimetableSlot]]:
    """Validate a whole week before it is stored in one atomic replace."""
    week: dict[Weekday, list[TimetableSlot]] = {}
    for raw_day, slots in slots_by_day.items():
        day = Weekday.parse(raw_day)
        accepted = week.get(day, [])
        for slot in slots:
            accepted = add_slot(day, slot, accepted)
        week[day] = accepted
    return week

"""Lecture identity.

A lecture occurrence is identified by its date and time range only. The same
(date, start, end) always yields the same id, which is what makes marking
attendance idempotent.
"""

from __future__ import annotations

from datetime import date, time
from typing import Optional

from ..common.datetime_utils import parse_hhmm, parse_iso_date
from ..core.constants import FIRST_SLOT_HOUR
from ..core.enums import Weekday

SEPARATOR = "_"


def _compact(value: time) -> str:
    return value.strftime("%H%M")


def lecture_id(on: "date | str", start: "time | str", end: "time | str") -> str:
    on = parse_iso_date(on)
    start = parse_hhmm(start)
    end = parse_hhmm(end)
    return SEPARATOR.join((on.isoformat(), _compact(start), _compact(end)))


def schedule_key(on: "date | str", start: "time | str", end: "time | str") -> Optional[str]:
    """Weekday, slot index and duration in whole hours, e.g. ``MONDAY_0_1``.

    Returns None for lectures starting before the first slot hour or without a
    positive whole-hour duration. Metadata only, never used for identity.
    """
    on = parse_iso_date(on)
    start = parse_hhmm(start)
    end = parse_hhmm(end)

    slot_index = start.hour - FIRST_SLOT_HOUR
    duration_hours = end.hour - start.hour
    if slot_index < 0 or duration_hours <= 0:
        return None
    return SEPARATOR.join((Weekday.of(on).value, str(slot_index), str(duration_hours)))

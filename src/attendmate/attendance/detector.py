from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from enum import Enum
from typing import Optional

from ..common.datetime_utils import now_local, parse_hhmm, parse_iso_date
from ..core.enums import AttendanceStatus, Weekday
from ..core.exceptions import AlreadyMarked, ValidationError
from ..lectures.codec import lecture_id
from ..timetable.model import TimetableSlot
from ..timetable.repository import TimetableRepository
from ..timetable.validator import sort_slots
from .model import AttendanceRecord
from .service import AttendanceLedgerService


class DetectorState(str, Enum):
    IDLE = "IDLE"
    PENDING_CONFIRMATION = "PENDING_CONFIRMATION"


@dataclass(frozen=True)
class ActiveLecture:
    """A scheduled lecture in progress that has no attendance record yet."""

    subject_id: str
    subject_name: str
    starts_at: datetime
    ends_at: datetime
    lecture_id: str

    def as_dict(self) -> dict:
        return {
            "subject_id": self.subject_id,
            "subject_name": self.subject_name,
            "date": self.starts_at.date().isoformat(),
            "start_time": self.starts_at.strftime("%H:%M"),
            "end_time": self.ends_at.strftime("%H:%M"),
            "lecture_id": self.lecture_id,
        }


class ActiveLectureDetector:
    """Decides whether to prompt for the lecture happening right now.

    Detection only runs when ``detect`` is called (on dashboard load); there is
    no background polling. One detector serves one user.
    """

    def __init__(self, *, user_id: str, timetable: TimetableRepository, ledger: AttendanceLedgerService):
        self._user_id = user_id
        self._timetable = timetable
        self._ledger = ledger
        self._state = DetectorState.IDLE
        self._pending: Optional[ActiveLecture] = None

    @property
    def state(self) -> DetectorState:
        return self._state

    @property
    def pending(self) -> Optional[ActiveLecture]:
        return self._pending

    def _reset(self) -> None:
        self._state = DetectorState.IDLE
        self._pending = None

    def _prompt(self, slot: TimetableSlot, today: date) -> Optional[ActiveLecture]:
        starts_at = slot.starts_at(today)
        ends_at = slot.ends_at(today)
        if self._ledger.has_record(
            user_id=self._user_id,
            subject_id=slot.subject_id,
            on=today,
            start=starts_at.time(),
            end=ends_at.time(),
        ):
            return None

        self._pending = ActiveLecture(
            subject_id=slot.subject_id,
            subject_name=slot.subject_name,
            starts_at=starts_at,
            ends_at=ends_at,
            lecture_id=lecture_id(today, starts_at.time(), ends_at.time()),
        )
        self._state = DetectorState.PENDING_CONFIRMATION
        return self._pending

    def detect(self, now: Optional[datetime] = None) -> Optional[ActiveLecture]:
        now = (now or now_local()).replace(second=0, microsecond=0)
        today = now.date()
        self._reset()

        slots = sort_slots(self._timetable.list_for_day(user_id=self._user_id, day=Weekday.of(today)))
        match = next((s for s in slots if s.starts_at(today) < now < s.ends_at(today)), None)
        if match is None:
            return None
        return self._prompt(match, today)

    def restore(
        self,
        *,
        subject_id: str,
        on: "date | str",
        start: "time | str",
        end: "time | str",
        now: Optional[datetime] = None,
    ) -> Optional[ActiveLecture]:
        """Go back to the lecture a previous ``detect`` prompted for.

        The answer may arrive after that lecture has ended, so the lecture is
        looked up in today's timetable instead of being detected again.
        Returns None when it is already recorded.
        """

        now = (now or now_local()).replace(second=0, microsecond=0)
        on = parse_iso_date(on)
        start = parse_hhmm(start)
        end = parse_hhmm(end)
        self._reset()

        if on != now.date():
            raise ValidationError("Only today's lectures can be confirmed")

        slots = self._timetable.list_for_day(user_id=self._user_id, day=Weekday.of(on))
        match = next(
            (
                s
                for s in slots
                if s.subject_id == subject_id and s.start_time == start and s.end_time == end and s.starts_at(on) < now
            ),
            None,
        )
        if match is None:
            raise ValidationError("Lecture is not on today's timetable")
        return self._prompt(match, on)

    def submit(
        self,
        status: "AttendanceStatus | str",
        *,
        note: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Optional[AttendanceRecord]:
        """Record the user's answer for the pending lecture.

        Returns None when another client recorded the lecture first.
        """

        lecture = self._pending
        if self._state != DetectorState.PENDING_CONFIRMATION or lecture is None:
            raise ValidationError("No lecture is waiting for confirmation")

        try:
            record = self._ledger.mark_attendance(
                user_id=self._user_id,
                subject_id=lecture.subject_id,
                on=lecture.starts_at.date(),
                start=lecture.starts_at.time(),
                end=lecture.ends_at.time(),
                status=status,
                note=note,
                now=now,
            )
        except AlreadyMarked:
            self._reset()
            return None

        self._reset()
        return record

    def dismiss(self) -> None:
        self._reset()

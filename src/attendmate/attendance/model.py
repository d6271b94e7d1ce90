from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one ledger entry for one lecture occurrence.

    ``record_id`` is the lecture id derived from the original date and time
    range; it never changes, even when the record is edited.
    """

    record_id: str
    user_id: str
    subject_id: str
    attendance_date: date
    start_time: datetime
    end_time: datetime
    status: AttendanceStatus
    note: Optional[str] = None
    lecture_key: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def is_present(self) -> bool:
        return self.status == AttendanceStatus.PRESENT

    def as_dict(self) -> dict:
        return {
            "record_id": self.record_id,
            "subject_id": self.subject_id,
            "date": self.attendance_date.isoformat(),
            "start_time": self.start_time.strftime("%H:%M"),
            "end_time": self.end_time.strftime("%H:%M"),
            "status": self.status.value,
            "note": self.note,
            "lecture_key": self.lecture_key,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

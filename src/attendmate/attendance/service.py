from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, time
from typing import Optional

from ..common.datetime_utils import now_local, parse_hhmm, parse_iso_date
from ..common.validators import require_time_range
from ..core.enums import AttendanceStatus
from ..core.exceptions import AlreadyMarked, NotFound, SubjectNotFound
from ..lectures.codec import lecture_id, schedule_key
from .model import AttendanceRecord
from .repository import AttendanceRepository, LedgerTransaction

# Sentinel: keep the stored note when editing.
UNCHANGED = object()


def _clean_note(note: Optional[str]) -> Optional[str]:
    note = (note or "").strip()
    return note or None


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


class AttendanceLedgerService:
    """Keeps the attendance ledger and the subject counters consistent.

    Every mutation runs as one unit of work in the repository: the records and
    the counters change together or not at all.
    """

    def __init__(self, attendance: AttendanceRepository):
        self._attendance = attendance

    def mark_attendance(
        self,
        *,
        user_id: str,
        subject_id: str,
        on: "date | str",
        start: "time | str",
        end: "time | str",
        status: "AttendanceStatus | str",
        note: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        on = parse_iso_date(on)
        start = parse_hhmm(start)
        end = parse_hhmm(end)
        require_time_range(start, end)
        status = AttendanceStatus.parse(status)

        record = AttendanceRecord(
            record_id=lecture_id(on, start, end),
            user_id=user_id,
            subject_id=subject_id,
            attendance_date=on,
            start_time=datetime.combine(on, start),
            end_time=datetime.combine(on, end),
            status=status,
            note=_clean_note(note),
            lecture_key=schedule_key(on, start, end),
            created_at=now or now_local(),
        )

        def work(tx: LedgerTransaction) -> AttendanceRecord:
            if tx.get_record(user_id=user_id, subject_id=subject_id, record_id=record.record_id):
                raise AlreadyMarked("Attendance already marked for this lecture")

            subject = tx.get_subject(user_id=user_id, subject_id=subject_id)
            if not subject:
                raise SubjectNotFound("Subject not found")

            tx.insert_record(record)
            tx.set_counters(
                user_id=user_id,
                subject_id=subject_id,
                total_classes=subject.total_classes + 1,
                attended_classes=subject.attended_classes + (1 if record.is_present else 0),
            )
            return record

        return self._attendance.run_in_transaction(work)

    def edit_attendance(
        self,
        *,
        user_id: str,
        subject_id: str,
        record_id: str,
        new_date: "date | str",
        new_start: "time | str",
        new_end: "time | str",
        new_status: "AttendanceStatus | str",
        note=UNCHANGED,
    ) -> AttendanceRecord:
        """Overwrite date, time and status of a record in place.

        The record keeps its id. A status change moves ``attended_classes`` by
        one in the same unit of work, so the counter keeps matching the number
        of PRESENT records.
        """

        new_date = parse_iso_date(new_date)
        new_start = parse_hhmm(new_start)
        new_end = parse_hhmm(new_end)
        require_time_range(new_start, new_end)
        new_status = AttendanceStatus.parse(new_status)

        def work(tx: LedgerTransaction) -> AttendanceRecord:
            current = tx.get_record(user_id=user_id, subject_id=subject_id, record_id=record_id)
            if not current:
                raise NotFound("Attendance record not found")

            subject = tx.get_subject(user_id=user_id, subject_id=subject_id)
            if not subject:
                raise NotFound("Subject not found")

            updated = replace(
                current,
                attendance_date=new_date,
                start_time=datetime.combine(new_date, new_start),
                end_time=datetime.combine(new_date, new_end),
                status=new_status,
                note=current.note if note is UNCHANGED else _clean_note(note),
                lecture_key=schedule_key(new_date, new_start, new_end),
            )
            tx.update_record(updated)

            delta = int(updated.is_present) - int(current.is_present)
            if delta:
                tx.set_counters(
                    user_id=user_id,
                    subject_id=subject_id,
                    total_classes=subject.total_classes,
                    attended_classes=_clamp(subject.attended_classes + delta, 0, subject.total_classes),
                )
            return updated

        return self._attendance.run_in_transaction(work)

    def delete_attendance(self, *, user_id: str, subject_id: str, record_id: str) -> bool:
        """Delete a record and roll its counters back.

        Returns False (and changes nothing) when the subject or the record is
        already gone, so repeating a delete never pushes counters below zero.
        """

        def work(tx: LedgerTransaction) -> bool:
            subject = tx.get_subject(user_id=user_id, subject_id=subject_id)
            if not subject:
                return False

            record = tx.get_record(user_id=user_id, subject_id=subject_id, record_id=record_id)
            if not record:
                return False

            tx.delete_record(user_id=user_id, subject_id=subject_id, record_id=record_id)
            tx.set_counters(
                user_id=user_id,
                subject_id=subject_id,
                total_classes=max(0, subject.total_classes - 1),
                attended_classes=max(0, subject.attended_classes - 1)
                if record.is_present
                else subject.attended_classes,
            )
            return True

        return self._attendance.run_in_transaction(work)

    def get_record(self, *, user_id: str, subject_id: str, record_id: str) -> AttendanceRecord:
        record = self._attendance.get(user_id=user_id, subject_id=subject_id, record_id=record_id)
        if not record:
            raise NotFound("Attendance record not found")
        return record

    def has_record(
        self,
        *,
        user_id: str,
        subject_id: str,
        on: "date | str",
        start: "time | str",
        end: "time | str",
    ) -> bool:
        record_id = lecture_id(on, start, end)
        return self._attendance.get(user_id=user_id, subject_id=subject_id, record_id=record_id) is not None

    def list_records(
        self,
        *,
        user_id: str,
        subject_id: Optional[str] = None,
        status: "AttendanceStatus | str | None" = None,
        start_date: "date | str | None" = None,
        end_date: "date | str | None" = None,
        limit: Optional[int] = None,
    ) -> list[AttendanceRecord]:
        return list(
            self._attendance.list_for_user(
                user_id=user_id,
                subject_id=subject_id or None,
                status=AttendanceStatus.parse(status) if status else None,
                start_date=parse_iso_date(start_date) if start_date else None,
                end_date=parse_iso_date(end_date) if end_date else None,
                limit=limit,
            )
        )

    def list_for_date(self, *, user_id: str, on: date) -> list[AttendanceRecord]:
        rows = self._attendance.list_for_user(user_id=user_id, start_date=on, end_date=on)
        return sorted(rows, key=lambda r: r.start_time)

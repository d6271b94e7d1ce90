from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional, Sequence

from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..common.validators import require_non_negative
from ..core.enums import AttendanceStatus, DayOutcome
from ..subjects.repository import SubjectRepository
from .engine import (
    lectures_needed_to_reach_75,
    percentage,
    percentage_after_skipping,
    project,
)


@dataclass(frozen=True)
class AnalyticsReport:
    overall: dict
    subjects: list[dict]
    days: list[dict]

    def as_dict(self) -> dict:
        return {"overall": self.overall, "subjects": self.subjects, "days": self.days}


def count_present(records: Iterable[AttendanceRecord]) -> tuple[int, int]:
    """(present, total) for a slice of the ledger."""
    present = 0
    total = 0
    for r in records:
        total += 1
        if r.status == AttendanceStatus.PRESENT:
            present += 1
    return present, total


def ledger_stats(records: Sequence[AttendanceRecord]) -> dict:
    present, total = count_present(records)
    return {
        "total": total,
        "present": present,
        "absent": total - present,
        "percentage": percentage(present, total),
    }


def day_outcome(records: Sequence[AttendanceRecord]) -> DayOutcome:
    statuses = {r.status for r in records}
    if statuses == {AttendanceStatus.PRESENT}:
        return DayOutcome.ALL_PRESENT
    if statuses == {AttendanceStatus.ABSENT}:
        return DayOutcome.ALL_ABSENT
    return DayOutcome.MIXED


class AnalyticsService:
    """Projections computed from the ledger itself, never stored."""

    def __init__(self, attendance: AttendanceRepository, subjects: SubjectRepository):
        self._attendance = attendance
        self._subjects = subjects

    def _records(self, *, user_id: str, subject_id: Optional[str] = None, start: Optional[date] = None, end: Optional[date] = None):
        return list(
            self._attendance.list_for_user(user_id=user_id, subject_id=subject_id, start_date=start, end_date=end)
        )

    def build_report(self, *, user_id: str, start: Optional[date] = None, end: Optional[date] = None) -> AnalyticsReport:
        records = self._records(user_id=user_id, start=start, end=end)
        present, total = count_present(records)

        by_subject: dict[str, list[AttendanceRecord]] = {}
        for r in records:
            by_subject.setdefault(r.subject_id, []).append(r)

        names = {s.subject_id: s.name for s in self._subjects.list_for_user(user_id=user_id)}
        subjects: list[dict] = []
        for subject_id, rows in by_subject.items():
            sp, st = count_present(rows)
            row = {"subject_id": subject_id, "name": names.get(subject_id, "Unknown Subject")}
            row.update(project(sp, st).as_dict())
            subjects.append(row)
        subjects.sort(key=lambda x: (x["percentage"], x["name"]))

        by_day: dict[date, list[AttendanceRecord]] = {}
        for r in records:
            by_day.setdefault(r.attendance_date, []).append(r)

        days: list[dict] = []
        for day in sorted(by_day):
            rows = by_day[day]
            stats = ledger_stats(rows)
            days.append(
                {
                    "date": day.isoformat(),
                    "present": stats["present"],
                    "absent": stats["absent"],
                    "outcome": day_outcome(rows).value,
                }
            )

        return AnalyticsReport(overall=project(present, total).as_dict(), subjects=subjects, days=days)

    def simulate_skip(self, *, user_id: str, skip: int, subject_id: Optional[str] = None) -> dict:
        """What happens to the percentage if the next ``skip`` lectures are missed."""
        require_non_negative(skip, "skip")
        present, total = count_present(self._records(user_id=user_id, subject_id=subject_id))
        return {
            "skip": skip,
            "current_percentage": percentage(present, total),
            "percentage_after_skipping": percentage_after_skipping(present, total, skip),
            "lectures_needed_to_reach_75": lectures_needed_to_reach_75(present, total, skip),
        }

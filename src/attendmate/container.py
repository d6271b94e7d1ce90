from __future__ import annotations

from dataclasses import dataclass

from .attendance.detector import ActiveLectureDetector
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceLedgerService
from .core.constants import DEFAULT_TRANSACTION_ATTEMPTS, DEFAULT_TRANSACTION_RETRY_DELAY_MS
from .database.connection import DBConfig, DatabaseConnection
from .projection.service import AnalyticsService
from .subjects.mysql_subject_repository import MySQLSubjectRepository
from .subjects.repository import SubjectRepository
from .subjects.service import SubjectService
from .timetable.mysql_timetable_repository import MySQLTimetableRepository
from .timetable.repository import TimetableRepository
from .timetable.service import TimetableService


@dataclass(frozen=True)
class Container:
    subjects_repo: SubjectRepository
    attendance_repo: AttendanceRepository
    timetable_repo: TimetableRepository

    subject_service: SubjectService
    ledger_service: AttendanceLedgerService
    timetable_service: TimetableService
    analytics_service: AnalyticsService

    def detector_for(self, user_id: str) -> ActiveLectureDetector:
        return ActiveLectureDetector(user_id=user_id, timetable=self.timetable_repo, ledger=self.ledger_service)


def wire(
    *,
    subjects_repo: SubjectRepository,
    attendance_repo: AttendanceRepository,
    timetable_repo: TimetableRepository,
) -> Container:
    return Container(
        subjects_repo=subjects_repo,
        attendance_repo=attendance_repo,
        timetable_repo=timetable_repo,
        subject_service=SubjectService(subjects_repo),
        ledger_service=AttendanceLedgerService(attendance_repo),
        timetable_service=TimetableService(timetable_repo, subjects_repo),
        analytics_service=AnalyticsService(attendance_repo, subjects_repo),
    )


def build_container(
    *,
    db_config: dict,
    max_attempts: int = DEFAULT_TRANSACTION_ATTEMPTS,
    retry_delay_ms: int = DEFAULT_TRANSACTION_RETRY_DELAY_MS,
) -> Container:
    conn = DatabaseConnection(DBConfig.from_dict(db_config))

    return wire(
        subjects_repo=MySQLSubjectRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn, max_attempts=max_attempts, retry_delay_ms=retry_delay_ms),
        timetable_repo=MySQLTimetableRepository(conn, max_attempts=max_attempts, retry_delay_ms=retry_delay_ms),
    )

from __future__ import annotations

from datetime import date
from typing import Callable, Optional, Sequence, TypeVar

from ..core.constants import DEFAULT_TRANSACTION_ATTEMPTS, DEFAULT_TRANSACTION_RETRY_DELAY_MS
from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, run_transaction
from ..subjects.model import Subject
from ..subjects.mysql_subject_repository import SUBJECT_COLUMNS, row_to_subject
from .model import AttendanceRecord
from .repository import AttendanceRepository, LedgerTransaction

T = TypeVar("T")

RECORD_COLUMNS = (
    "record_id, user_id, subject_id, attendance_date, start_time, end_time, "
    "status, note, lecture_key, created_at"
)


def row_to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        record_id=str(r["record_id"]),
        user_id=str(r["user_id"]),
        subject_id=str(r["subject_id"]),
        attendance_date=r["attendance_date"],
        start_time=r["start_time"],
        end_time=r["end_time"],
        status=AttendanceStatus.parse(r["status"]),
        note=r.get("note"),
        lecture_key=r.get("lecture_key"),
        created_at=r.get("created_at"),
    )


class MySQLLedgerTransaction(LedgerTransaction):
    """Rows are read with FOR UPDATE so a concurrent writer blocks or deadlocks."""

    def __init__(self, cur):
        super().__init__()
        self._cur = cur

    def _get_record(self, *, user_id: str, subject_id: str, record_id: str) -> Optional[AttendanceRecord]:
        self._cur.execute(
            f"""
            SELECT {RECORD_COLUMNS}
            FROM attendance_records
            WHERE user_id=%s AND subject_id=%s AND record_id=%s
            FOR UPDATE
            """,
            (user_id, subject_id, record_id),
        )
        r = fetchone(self._cur)
        return row_to_record(r) if r else None

    def _get_subject(self, *, user_id: str, subject_id: str) -> Optional[Subject]:
        self._cur.execute(
            f"SELECT {SUBJECT_COLUMNS} FROM subjects WHERE user_id=%s AND subject_id=%s FOR UPDATE",
            (user_id, subject_id),
        )
        r = fetchone(self._cur)
        return row_to_subject(r) if r else None

    def _insert_record(self, record: AttendanceRecord) -> None:
        self._cur.execute(
            """
            INSERT INTO attendance_records(
                record_id, user_id, subject_id, attendance_date, start_time, end_time,
                status, note, lecture_key, created_at
            )
            VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
            """,
            (
                record.record_id,
                record.user_id,
                record.subject_id,
                record.attendance_date,
                record.start_time,
                record.end_time,
                record.status.value,
                record.note,
                record.lecture_key,
                record.created_at,
            ),
        )

    def _update_record(self, record: AttendanceRecord) -> None:
        self._cur.execute(
            """
            UPDATE attendance_records
            SET attendance_date=%s, start_time=%s, end_time=%s, status=%s, note=%s, lecture_key=%s
            WHERE user_id=%s AND subject_id=%s AND record_id=%s
            """,
            (
                record.attendance_date,
                record.start_time,
                record.end_time,
                record.status.value,
                record.note,
                record.lecture_key,
                record.user_id,
                record.subject_id,
                record.record_id,
            ),
        )

    def _delete_record(self, *, user_id: str, subject_id: str, record_id: str) -> None:
        self._cur.execute(
            "DELETE FROM attendance_records WHERE user_id=%s AND subject_id=%s AND record_id=%s",
            (user_id, subject_id, record_id),
        )

    def _set_counters(self, *, user_id: str, subject_id: str, total_classes: int, attended_classes: int) -> None:
        self._cur.execute(
            """
            UPDATE subjects
            SET total_classes=%s, attended_classes=%s
            WHERE user_id=%s AND subject_id=%s
            """,
            (int(total_classes), int(attended_classes), user_id, subject_id),
        )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(
        self,
        conn_factory: DatabaseConnection,
        *,
        max_attempts: int = DEFAULT_TRANSACTION_ATTEMPTS,
        retry_delay_ms: int = DEFAULT_TRANSACTION_RETRY_DELAY_MS,
    ):
        self._conn_factory = conn_factory
        self._max_attempts = int(max_attempts)
        self._retry_delay_ms = int(retry_delay_ms)

    def run_in_transaction(self, work: Callable[[LedgerTransaction], T]) -> T:
        return run_transaction(
            self._conn_factory,
            lambda cur: work(MySQLLedgerTransaction(cur)),
            attempts=self._max_attempts,
            retry_delay_ms=self._retry_delay_ms,
        )

    def get(self, *, user_id: str, subject_id: str, record_id: str) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {RECORD_COLUMNS}
                FROM attendance_records
                WHERE user_id=%s AND subject_id=%s AND record_id=%s
                """,
                (user_id, subject_id, record_id),
            )
            r = fetchone(cur)
            return row_to_record(r) if r else None

    def list_for_user(
        self,
        *,
        user_id: str,
        subject_id: Optional[str] = None,
        status: Optional[AttendanceStatus] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: Optional[int] = None,
    ) -> Sequence[AttendanceRecord]:
        clauses = ["user_id=%s"]
        params: list[object] = [user_id]

        if subject_id is not None:
            clauses.append("subject_id=%s")
            params.append(subject_id)
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)
        if start_date is not None:
            clauses.append("attendance_date >= %s")
            params.append(start_date)
        if end_date is not None:
            clauses.append("attendance_date <= %s")
            params.append(end_date)

        where = " AND ".join(clauses)
        limit_sql = ""
        if limit is not None:
            limit_sql = "LIMIT %s"
            params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {RECORD_COLUMNS}
                FROM attendance_records
                WHERE {where}
                ORDER BY attendance_date DESC, start_time DESC
                {limit_sql}
                """,
                tuple(params),
            )
            return [row_to_record(r) for r in fetchall(cur)]

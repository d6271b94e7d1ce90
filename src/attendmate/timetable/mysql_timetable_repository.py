from __future__ import annotations

from typing import Sequence

from ..core.constants import DEFAULT_TRANSACTION_ATTEMPTS, DEFAULT_TRANSACTION_RETRY_DELAY_MS
from ..core.enums import Weekday
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, normalize_mysql_time, run_transaction
from .model import TimetableSlot
from .repository import TimetableRepository

SLOT_COLUMNS = "slot_id, user_id, day, subject_id, subject_name, start_time, duration_hours, created_at"


def row_to_slot(r: dict) -> TimetableSlot:
    return TimetableSlot(
        slot_id=str(r["slot_id"]),
        user_id=str(r["user_id"]),
        day=Weekday(r["day"]),
        subject_id=str(r["subject_id"]),
        subject_name=r.get("subject_name") or "",
        start_time=normalize_mysql_time(r["start_time"]),
        duration_hours=int(r["duration_hours"]),
        created_at=r.get("created_at"),
    )


class MySQLTimetableRepository(TimetableRepository):
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

    def list_for_user(self, *, user_id: str) -> Sequence[TimetableSlot]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {SLOT_COLUMNS}
                FROM timetable_slots
                WHERE user_id=%s
                ORDER BY day ASC, start_time ASC
                """,
                (user_id,),
            )
            return [row_to_slot(r) for r in fetchall(cur)]

    def list_for_day(self, *, user_id: str, day: Weekday) -> Sequence[TimetableSlot]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {SLOT_COLUMNS}
                FROM timetable_slots
                WHERE user_id=%s AND day=%s
                ORDER BY start_time ASC
                """,
                (user_id, day.value),
            )
            return [row_to_slot(r) for r in fetchall(cur)]

    def replace_week(self, *, user_id: str, slots: Sequence[TimetableSlot]) -> None:
        rows = [
            (
                s.slot_id,
                user_id,
                s.day.value,
                s.subject_id,
                s.subject_name,
                s.start_time,
                int(s.duration_hours),
                s.created_at,
            )
            for s in slots
        ]

        def work(cur) -> None:
            cur.execute("DELETE FROM timetable_slots WHERE user_id=%s", (user_id,))
            if rows:
                cur.executemany(
                    f"INSERT INTO timetable_slots({SLOT_COLUMNS}) VALUES(%s,%s,%s,%s,%s,%s,%s,%s)",
                    rows,
                )

        run_transaction(
            self._conn_factory,
            work,
            attempts=self._max_attempts,
            retry_delay_ms=self._retry_delay_ms,
        )

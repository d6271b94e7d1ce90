from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Subject
from .repository import SubjectRepository

SUBJECT_COLUMNS = "subject_id, user_id, name, total_classes, attended_classes, created_at"


def row_to_subject(r: dict) -> Subject:
    return Subject(
        subject_id=str(r["subject_id"]),
        user_id=str(r["user_id"]),
        name=r["name"],
        total_classes=int(r["total_classes"] or 0),
        attended_classes=int(r["attended_classes"] or 0),
        created_at=r.get("created_at"),
    )


class MySQLSubjectRepository(SubjectRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, *, user_id: str, subject_id: str) -> Optional[Subject]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {SUBJECT_COLUMNS} FROM subjects WHERE user_id=%s AND subject_id=%s",
                (user_id, subject_id),
            )
            r = fetchone(cur)
            return row_to_subject(r) if r else None

    def list_for_user(self, *, user_id: str) -> Sequence[Subject]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {SUBJECT_COLUMNS}
                FROM subjects
                WHERE user_id=%s
                ORDER BY created_at ASC, name ASC
                """,
                (user_id,),
            )
            return [row_to_subject(r) for r in fetchall(cur)]

    def create(self, subject: Subject) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO subjects(subject_id, user_id, name, total_classes, attended_classes, created_at)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (
                    subject.subject_id,
                    subject.user_id,
                    subject.name,
                    int(subject.total_classes),
                    int(subject.attended_classes),
                    subject.created_at,
                ),
            )

    def delete(self, *, user_id: str, subject_id: str) -> bool:
        # attendance_records and timetable_slots go with it (ON DELETE CASCADE).
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM subjects WHERE user_id=%s AND subject_id=%s", (user_id, subject_id))
            return cur.rowcount > 0

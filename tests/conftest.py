from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Optional

import pytest

from attendmate.attendance.model import AttendanceRecord
from attendmate.attendance.repository import LedgerTransaction
from attendmate.container import wire
from attendmate.core.exceptions import TransactionConflict
from attendmate.subjects.model import Subject


class InMemoryStore:
    """Shared state behind the in-memory repositories."""

    def __init__(self):
        self.subjects: dict[tuple[str, str], Subject] = {}
        self.records: dict[tuple[str, str, str], AttendanceRecord] = {}
        self.slots: dict[str, list] = {}


class InMemorySubjects:
    def __init__(self, store: InMemoryStore):
        self._store = store

    def get_by_id(self, *, user_id: str, subject_id: str) -> Optional[Subject]:
        return self._store.subjects.get((user_id, subject_id))

    def list_for_user(self, *, user_id: str):
        items = [s for (uid, _), s in self._store.subjects.items() if uid == user_id]
        items.sort(key=lambda s: (s.created_at or datetime.min, s.name))
        return items

    def create(self, subject: Subject) -> None:
        self._store.subjects[(subject.user_id, subject.subject_id)] = subject

    def delete(self, *, user_id: str, subject_id: str) -> bool:
        if self._store.subjects.pop((user_id, subject_id), None) is None:
            return False
        for key in [k for k in self._store.records if k[0] == user_id and k[1] == subject_id]:
            del self._store.records[key]
        self._store.slots[user_id] = [s for s in self._store.slots.get(user_id, []) if s.subject_id != subject_id]
        return True


class InMemoryLedgerTransaction(LedgerTransaction):
    """Works on copies; the repository publishes them only if ``work`` returns."""

    def __init__(self, store: InMemoryStore):
        super().__init__()
        self.subjects = dict(store.subjects)
        self.records = dict(store.records)

    def _get_record(self, *, user_id, subject_id, record_id):
        return self.records.get((user_id, subject_id, record_id))

    def _get_subject(self, *, user_id, subject_id):
        return self.subjects.get((user_id, subject_id))

    def _insert_record(self, record):
        self.records[(record.user_id, record.subject_id, record.record_id)] = record

    def _update_record(self, record):
        self.records[(record.user_id, record.subject_id, record.record_id)] = record

    def _delete_record(self, *, user_id, subject_id, record_id):
        self.records.pop((user_id, subject_id, record_id), None)

    def _set_counters(self, *, user_id, subject_id, total_classes, attended_classes):
        assert 0 <= attended_classes <= total_classes
        key = (user_id, subject_id)
        self.subjects[key] = replace(self.subjects[key], total_classes=total_classes, attended_classes=attended_classes)


class InMemoryAttendance:
    def __init__(self, store: InMemoryStore):
        self._store = store
        # Number of upcoming transactions that fail as if the retry budget ran out.
        self.conflicts = 0

    def run_in_transaction(self, work):
        if self.conflicts:
            self.conflicts -= 1
            raise TransactionConflict("Could not commit attendance change, please retry")

        tx = InMemoryLedgerTransaction(self._store)
        result = work(tx)
        self._store.subjects = tx.subjects
        self._store.records = tx.records
        return result

    def get(self, *, user_id, subject_id, record_id):
        return self._store.records.get((user_id, subject_id, record_id))

    def list_for_user(self, *, user_id, subject_id=None, status=None, start_date=None, end_date=None, limit=None):
        items = [
            r
            for r in self._store.records.values()
            if r.user_id == user_id
            and (subject_id is None or r.subject_id == subject_id)
            and (status is None or r.status == status)
            and (start_date is None or r.attendance_date >= start_date)
            and (end_date is None or r.attendance_date <= end_date)
        ]
        items.sort(key=lambda r: r.start_time, reverse=True)
        return items[:limit] if limit is not None else items


class InMemoryTimetable:
    def __init__(self, store: InMemoryStore):
        self._store = store
        self.replace_calls = 0

    def list_for_user(self, *, user_id):
        return list(self._store.slots.get(user_id, []))

    def list_for_day(self, *, user_id, day):
        slots = [s for s in self._store.slots.get(user_id, []) if s.day == day]
        return sorted(slots, key=lambda s: s.start_time)

    def replace_week(self, *, user_id, slots):
        self.replace_calls += 1
        self._store.slots[user_id] = list(slots)


@pytest.fixture
def fixed_now() -> datetime:
    # Friday
    return datetime(2024, 3, 1, 9, 30)


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def container(store):
    return wire(
        subjects_repo=InMemorySubjects(store),
        attendance_repo=InMemoryAttendance(store),
        timetable_repo=InMemoryTimetable(store),
    )


@pytest.fixture
def subject(container, fixed_now) -> Subject:
    return container.subject_service.create(user_id="u1", name="Maths", now=fixed_now)

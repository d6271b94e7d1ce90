from datetime import date, datetime, time, timedelta

import mysql.connector
import pytest

from attendmate.attendance.mysql_attendance_repository import MySQLAttendanceRepository
from attendmate.core.exceptions import AlreadyMarked, TransactionConflict
from attendmate.database.mysql_base import normalize_mysql_time, run_transaction


class FakeCursor:
    def __init__(self, conn):
        self._conn = conn
        self.closed = False

    def execute(self, sql, params=None):
        self._conn.executed.append((" ".join(sql.split()), params))

    def fetchone(self):
        return self._conn.rows.pop(0) if self._conn.rows else None

    def fetchall(self):
        rows, self._conn.rows = self._conn.rows, []
        return rows

    def close(self):
        self.closed = True


class FakeConnection:
    def __init__(self, rows=None):
        self.rows = list(rows or [])
        self.executed = []
        self.isolation_level = None
        self.committed = False
        self.rolled_back = False
        self.closed = False

    def start_transaction(self, isolation_level=None):
        self.isolation_level = isolation_level

    def cursor(self, dictionary=False):
        return FakeCursor(self)

    def commit(self):
        self.committed = True

    def rollback(self):
        self.rolled_back = True

    def close(self):
        self.closed = True


class FakeConnectionFactory:
    def __init__(self, rows=None):
        self._rows = rows
        self.connections = []

    def connect(self, *, database=True):
        conn = FakeConnection(self._rows)
        self.connections.append(conn)
        return conn


def deadlock():
    return mysql.connector.errors.DatabaseError(msg="Deadlock found", errno=1213)


def test_commits_serializable_unit():
    factory = FakeConnectionFactory()

    result = run_transaction(factory, lambda cur: "done", attempts=3, retry_delay_ms=0)

    assert result == "done"
    (conn,) = factory.connections
    assert conn.isolation_level == "SERIALIZABLE"
    assert conn.committed and conn.closed and not conn.rolled_back


def test_retries_deadlock_then_succeeds():
    factory = FakeConnectionFactory()
    calls = []

    def work(cur):
        calls.append(cur)
        if len(calls) < 3:
            raise deadlock()
        return len(calls)

    assert run_transaction(factory, work, attempts=5, retry_delay_ms=0) == 3
    assert [c.rolled_back for c in factory.connections] == [True, True, False]


def test_gives_up_with_transaction_conflict():
    factory = FakeConnectionFactory()

    def work(cur):
        raise deadlock()

    with pytest.raises(TransactionConflict):
        run_transaction(factory, work, attempts=2, retry_delay_ms=0)

    assert len(factory.connections) == 2
    assert all(c.closed for c in factory.connections)


def test_other_errors_roll_back_without_retry():
    factory = FakeConnectionFactory()

    def work(cur):
        raise mysql.connector.errors.IntegrityError(msg="Duplicate entry", errno=1062)

    with pytest.raises(mysql.connector.errors.IntegrityError):
        run_transaction(factory, work, attempts=5, retry_delay_ms=0)

    assert len(factory.connections) == 1
    assert factory.connections[0].rolled_back


def test_domain_errors_are_not_retried():
    factory = FakeConnectionFactory()

    def work(cur):
        raise AlreadyMarked("Attendance already marked for this lecture")

    with pytest.raises(AlreadyMarked):
        run_transaction(factory, work, attempts=5, retry_delay_ms=0)

    assert len(factory.connections) == 1


def test_ledger_transaction_locks_rows_it_reads():
    subject_row = {
        "subject_id": "s1",
        "user_id": "u1",
        "name": "Maths",
        "total_classes": 2,
        "attended_classes": 1,
        "created_at": datetime(2024, 1, 1),
    }
    factory = FakeConnectionFactory(rows=[subject_row])
    repo = MySQLAttendanceRepository(factory, max_attempts=1, retry_delay_ms=0)

    subject = repo.run_in_transaction(lambda tx: tx.get_subject(user_id="u1", subject_id="s1"))

    assert subject.total_classes == 2
    sql, params = factory.connections[0].executed[0]
    assert sql.endswith("FOR UPDATE")
    assert params == ("u1", "s1")


def test_list_for_user_builds_filters():
    factory = FakeConnectionFactory()
    repo = MySQLAttendanceRepository(factory)

    assert repo.list_for_user(user_id="u1", start_date=date(2024, 3, 1), limit=10) == []

    sql, params = factory.connections[0].executed[0]
    assert "attendance_date >= %s" in sql
    assert sql.endswith("LIMIT %s")
    assert params == ("u1", date(2024, 3, 1), 10)


@pytest.mark.parametrize(
    "value, expected",
    [
        (time(8, 30), time(8, 30)),
        (timedelta(hours=13, minutes=5), time(13, 5)),
        ("09:15:00", time(9, 15)),
        (None, None),
    ],
)
def test_normalize_mysql_time(value, expected):
    assert normalize_mysql_time(value) == expected

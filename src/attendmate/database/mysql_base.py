from __future__ import annotations

import logging
import time as _time
from contextlib import contextmanager
from datetime import time, timedelta
from typing import Any, Callable, Dict, List, Optional, TypeVar

import mysql.connector

from ..core.constants import DEFAULT_TRANSACTION_ATTEMPTS, DEFAULT_TRANSACTION_RETRY_DELAY_MS
from ..core.exceptions import TransactionConflict
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)

T = TypeVar("T")

# ER_LOCK_DEADLOCK, ER_LOCK_WAIT_TIMEOUT
RETRYABLE_ERRNOS = frozenset({1213, 1205})


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def run_transaction(
    conn_factory: DatabaseConnection,
    work: Callable[[Any], T],
    *,
    attempts: int = DEFAULT_TRANSACTION_ATTEMPTS,
    retry_delay_ms: int = DEFAULT_TRANSACTION_RETRY_DELAY_MS,
) -> T:
    """Run ``work(cursor)`` as one serializable transaction.

    The whole unit is re-run when MySQL reports a deadlock or a lock wait
    timeout. Any other exception rolls back and propagates unchanged. When
    the retry budget is spent, TransactionConflict is raised.
    """

    attempts = max(1, int(attempts))
    last_error: Optional[Exception] = None

    for attempt in range(1, attempts + 1):
        conn = conn_factory.connect()
        try:
            conn.start_transaction(isolation_level="SERIALIZABLE")
            cur = conn.cursor(dictionary=True)
            try:
                result = work(cur)
            finally:
                cur.close()
            conn.commit()
            return result
        except mysql.connector.Error as e:
            conn.rollback()
            if e.errno not in RETRYABLE_ERRNOS:
                raise
            last_error = e
            logger.warning("Transaction conflict (errno=%s), attempt %s/%s", e.errno, attempt, attempts)
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

        if attempt < attempts and retry_delay_ms > 0:
            _time.sleep(retry_delay_ms * attempt / 1000)

    logger.error("Transaction gave up after %s attempts", attempts)
    raise TransactionConflict("Could not save changes, please retry") from last_error


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def normalize_mysql_time(value: Any) -> Optional[time]:
    """Normalize MySQL TIME values across connector implementations.

    mysql-connector can return TIME as:
    - datetime.time
    - datetime.timedelta
    - string (e.g. '08:30:00')
    """

    if value is None:
        return None

    if isinstance(value, time):
        return value

    if isinstance(value, timedelta):
        total_seconds = int(value.total_seconds()) % 86400
        hours = total_seconds // 3600
        minutes = (total_seconds % 3600) // 60
        return time(hour=hours, minute=minutes)

    if isinstance(value, str):
        parts = value.strip().split(":")
        if len(parts) < 2:
            raise ValueError(f"Invalid time string: {value!r}")
        return time(hour=int(parts[0]), minute=int(parts[1]))

    raise TypeError(f"Unsupported MySQL TIME value type: {type(value)!r}")

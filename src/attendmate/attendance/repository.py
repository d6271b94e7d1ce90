from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from typing import Callable, Optional, Protocol, Sequence, TypeVar

from ..core.enums import AttendanceStatus
from ..subjects.model import Subject
from .model import AttendanceRecord

T = TypeVar("T")


class LedgerTransaction(ABC):
    """One atomic unit of work over the ledger and the subject counters.

    All reads must be issued before the first write; the store only gives
    snapshot guarantees for that ordering, so breaking it raises RuntimeError.
    """

    def __init__(self):
        self._has_written = False

    def _before_read(self) -> None:
        if self._has_written:
            raise RuntimeError("Transaction reads must be issued before any write")

    def _before_write(self) -> None:
        self._has_written = True

    def get_record(self, *, user_id: str, subject_id: str, record_id: str) -> Optional[AttendanceRecord]:
        self._before_read()
        return self._get_record(user_id=user_id, subject_id=subject_id, record_id=record_id)

    def get_subject(self, *, user_id: str, subject_id: str) -> Optional[Subject]:
        self._before_read()
        return self._get_subject(user_id=user_id, subject_id=subject_id)

    def insert_record(self, record: AttendanceRecord) -> None:
        self._before_write()
        self._insert_record(record)

    def update_record(self, record: AttendanceRecord) -> None:
        self._before_write()
        self._update_record(record)

    def delete_record(self, *, user_id: str, subject_id: str, record_id: str) -> None:
        self._before_write()
        self._delete_record(user_id=user_id, subject_id=subject_id, record_id=record_id)

    def set_counters(self, *, user_id: str, subject_id: str, total_classes: int, attended_classes: int) -> None:
        self._before_write()
        self._set_counters(
            user_id=user_id,
            subject_id=subject_id,
            total_classes=total_classes,
            attended_classes=attended_classes,
        )

    @abstractmethod
    def _get_record(self, *, user_id: str, subject_id: str, record_id: str) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    @abstractmethod
    def _get_subject(self, *, user_id: str, subject_id: str) -> Optional[Subject]:
        raise NotImplementedError

    @abstractmethod
    def _insert_record(self, record: AttendanceRecord) -> None:
        raise NotImplementedError

    @abstractmethod
    def _update_record(self, record: AttendanceRecord) -> None:
        raise NotImplementedError

    @abstractmethod
    def _delete_record(self, *, user_id: str, subject_id: str, record_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def _set_counters(self, *, user_id: str, subject_id: str, total_classes: int, attended_classes: int) -> None:
        raise NotImplementedError


class AttendanceRepository(Protocol):
    def run_in_transaction(self, work: Callable[[LedgerTransaction], T]) -> T:
        """Run ``work`` atomically; retried on write conflicts by the store."""

        raise NotImplementedError

    def get(self, *, user_id: str, subject_id: str, record_id: str) -> Optional[AttendanceRecord]:
        raise NotImplementedError

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
        """Newest first."""

        raise NotImplementedError

from __future__ import annotations

from typing import Protocol, Sequence

from ..core.enums import Weekday
from .model import TimetableSlot


class TimetableRepository(Protocol):
    def list_for_user(self, *, user_id: str) -> Sequence[TimetableSlot]:
        raise NotImplementedError

    def list_for_day(self, *, user_id: str, day: Weekday) -> Sequence[TimetableSlot]:
        """Ordered by start time."""

        raise NotImplementedError

    def replace_week(self, *, user_id: str, slots: Sequence[TimetableSlot]) -> None:
        """Delete every slot of the user and insert ``slots``, all or nothing."""

        raise NotImplementedError

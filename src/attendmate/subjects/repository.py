from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Subject


class SubjectRepository(Protocol):
    def get_by_id(self, *, user_id: str, subject_id: str) -> Optional[Subject]:
        raise NotImplementedError

    def list_for_user(self, *, user_id: str) -> Sequence[Subject]:
        """Oldest first."""

        raise NotImplementedError

    def create(self, subject: Subject) -> None:
        raise NotImplementedError

    def delete(self, *, user_id: str, subject_id: str) -> bool:
        """Delete the subject together with its attendance records and slots."""

        raise NotImplementedError

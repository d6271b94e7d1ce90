from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from ..common.validators import require_non_empty
from ..core.exceptions import NotFound, SubjectNotFound
from ..projection.engine import project
from .model import Subject
from .repository import SubjectRepository


class SubjectService:
    def __init__(self, subjects: SubjectRepository):
        self._subjects = subjects

    def create(self, *, user_id: str, name: str, now: Optional[datetime] = None) -> Subject:
        subject = Subject(
            subject_id=uuid.uuid4().hex,
            user_id=user_id,
            name=require_non_empty(name, "Subject name"),
            total_classes=0,
            attended_classes=0,
            created_at=now or datetime.now(),
        )
        self._subjects.create(subject)
        return subject

    def get(self, *, user_id: str, subject_id: str) -> Subject:
        subject = self._subjects.get_by_id(user_id=user_id, subject_id=subject_id)
        if not subject:
            raise SubjectNotFound("Subject not found")
        return subject

    def list_with_projection(self, *, user_id: str) -> list[dict]:
        out: list[dict] = []
        for s in self._subjects.list_for_user(user_id=user_id):
            row = {"subject_id": s.subject_id, "name": s.name}
            # present/total here are the stored counters, not a recount of records.
            row.update(project(s.attended_classes, s.total_classes).as_dict())
            out.append(row)
        return out

    def delete(self, *, user_id: str, subject_id: str) -> None:
        if not self._subjects.delete(user_id=user_id, subject_id=subject_id):
            raise NotFound("Subject not found")

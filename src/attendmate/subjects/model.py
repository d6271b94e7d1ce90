from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Subject:
    """Domain entity: a tracked course with its running attendance counters."""

    subject_id: str
    user_id: str
    name: str
    total_classes: int = 0
    attended_classes: int = 0
    created_at: Optional[datetime] = None

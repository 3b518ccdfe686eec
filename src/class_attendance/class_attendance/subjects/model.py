from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class LabBatch:
    """Named subset of a class's students for a lab subject."""

    name: str
    member_ids: frozenset[int] = field(default_factory=frozenset)

    def __contains__(self, student_id: object) -> bool:
        return student_id in self.member_ids


@dataclass(frozen=True)
class Subject:
    """Domain entity: a subject taught to one class.

    ``sessions`` is the free-form session-count hint entered by admins;
    ``batches`` is only meaningful when ``is_lab`` is set.
    """

    subject_id: int
    class_id: int
    name: str
    code: str
    sessions: str = ""
    is_lab: bool = False
    batches: tuple[LabBatch, ...] = ()

    def batch_named(self, batch_name: str) -> Optional[LabBatch]:
        for batch in self.batches:
            if batch.name == batch_name:
                return batch
        return None

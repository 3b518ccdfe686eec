from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Iterable, Optional

from ..core.exceptions import NotFoundError
from ..students.model import Student
from ..subjects.model import LabBatch, Subject

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchPolicy:
    # D2D students are visible in every lab batch.
    exempt_d2d: bool = True


class BatchMembershipFilter:
    """Decide which students a lab-batch report or mark may touch.

    Students outside the selected batch are not applicable: reports render
    their cells blank instead of counting them as absent.
    """

    def __init__(self, policy: BatchPolicy | None = None):
        self._policy = policy or BatchPolicy()

    @property
    def policy(self) -> BatchPolicy:
        return self._policy

    def is_visible(self, student: Student, subject: Subject, selected_batch: Optional[LabBatch]) -> bool:
        if not subject.is_lab or selected_batch is None:
            return True
        if student.is_d2d and self._policy.exempt_d2d:
            return True
        return student.student_id in selected_batch

    def visible_students(
        self, students: Iterable[Student], subject: Subject, selected_batch: Optional[LabBatch]
    ) -> list[Student]:
        return [s for s in students if self.is_visible(s, subject, selected_batch)]


def find_batch(subject: Subject, batch_name: Optional[str]) -> Optional[LabBatch]:
    """Resolve a batch selector for ``subject``.

    No name, or a non-lab subject, means no batch filtering.
    """

    if not batch_name or not subject.is_lab:
        return None
    batch = subject.batch_named(batch_name)
    if batch is None:
        raise NotFoundError(f"Batch {batch_name!r} not found for subject {subject.name}")

    conflicts = multi_batch_members(subject.batches)
    if conflicts:
        logger.warning(
            "Subject %s has students in more than one batch: %s", subject.subject_id, sorted(conflicts)
        )
    return batch


def multi_batch_members(batches: Iterable[LabBatch]) -> dict[int, list[str]]:
    """Students listed in more than one batch, with the batch names."""

    seen: dict[int, list[str]] = defaultdict(list)
    for batch in batches:
        for student_id in batch.member_ids:
            seen[student_id].append(batch.name)
    return {sid: names for sid, names in seen.items() if len(names) > 1}

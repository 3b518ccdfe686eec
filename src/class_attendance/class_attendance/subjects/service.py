from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

from ..attendance.batches import multi_batch_members
from ..common.validators import require_int, require_non_empty
from ..core.enums import Cohort
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..students.repository import StudentRepository
from .model import LabBatch, Subject
from .repository import SubjectRepository

logger = logging.getLogger(__name__)


class SubjectService:
    def __init__(self, subjects: SubjectRepository, students: StudentRepository):
        self._subjects = subjects
        self._students = students

    def get_subject(self, subject_id: int) -> Subject:
        subject = self._subjects.get_by_id(int(subject_id))
        if not subject:
            raise NotFoundError("Subject not found")
        return subject

    def assign_batches(self, subject_id: int, batches_payload: Sequence[Mapping[str, Any]]) -> Subject:
        """Replace the lab batches of a subject.

        Payload items look like ``{"batchName": "B1", "students": [1, 2]}``.
        A student may belong to at most one batch of the subject.
        """

        subject = self.get_subject(subject_id)
        if not subject.is_lab:
            raise ValidationError("Batches can only be assigned to lab subjects")

        class_ids = {
            s.student_id
            for cohort in Cohort
            for s in self._students.list_by_class(subject.class_id, cohort)
        }

        batches: list[LabBatch] = []
        seen_names: set[str] = set()
        for item in batches_payload or []:
            if not isinstance(item, Mapping):
                raise ValidationError("Each batch must be an object")
            name = require_non_empty(item.get("batchName", ""), "batchName")
            if name.lower() in seen_names:
                raise ValidationError(f"Duplicate batch name: {name}")
            seen_names.add(name.lower())

            raw_members = item.get("students", [])
            if not isinstance(raw_members, list):
                raise ValidationError(f"students of batch {name} must be a list")
            members = frozenset(require_int(v, "students") for v in raw_members)
            outsiders = sorted(members - class_ids)
            if outsiders:
                raise ValidationError(f"Students {outsiders} are not in the subject's class")
            batches.append(LabBatch(name=name, member_ids=members))

        conflicts = multi_batch_members(batches)
        if conflicts:
            detail = ", ".join(f"{sid} ({'/'.join(names)})" for sid, names in sorted(conflicts.items()))
            raise ConflictError(f"Students assigned to more than one batch: {detail}")

        self._subjects.replace_batches(subject.subject_id, batches)
        logger.info("Subject %s now has %d batch(es)", subject.subject_id, len(batches))
        return self.get_subject(subject.subject_id)

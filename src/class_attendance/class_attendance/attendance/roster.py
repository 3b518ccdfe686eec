from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from ..classes.model import SchoolClass
from ..classes.repository import ClassRepository
from ..core.enums import Cohort
from ..core.exceptions import NotFoundError, ValidationError
from ..students.model import Student
from ..students.repository import StudentRepository
from ..subjects.model import Subject
from ..subjects.repository import SubjectRepository


@dataclass(frozen=True)
class ClassRoster:
    """Everything the reports need about one class, read once per request."""

    school_class: SchoolClass
    subjects: tuple[Subject, ...]
    regular: tuple[Student, ...]
    d2d: tuple[Student, ...]

    @property
    def students(self) -> tuple[Student, ...]:
        # Regular rows first, then D2D, each in store order.
        return self.regular + self.d2d


class RosterLoader:
    def __init__(self, classes: ClassRepository, subjects: SubjectRepository, students: StudentRepository):
        self._classes = classes
        self._subjects = subjects
        self._students = students

    def get_class(self, class_id: int) -> SchoolClass:
        school_class = self._classes.get_by_id(int(class_id))
        if not school_class:
            raise NotFoundError("Class not found")
        return school_class

    def get_subject(self, subject_id: int) -> Subject:
        subject = self._subjects.get_by_id(int(subject_id))
        if not subject:
            raise NotFoundError("Subject not found")
        return subject

    def load(self, class_id: int, *, school_id: Optional[int] = None) -> ClassRoster:
        school_class = self.get_class(class_id)
        subjects: Sequence[Subject] = self._subjects.list_by_class(school_class.class_id)
        regular = self._students.list_by_class(school_class.class_id, Cohort.REGULAR, school_id=school_id)
        d2d = self._students.list_by_class(school_class.class_id, Cohort.D2D, school_id=school_id)
        return ClassRoster(
            school_class=school_class,
            subjects=tuple(subjects),
            regular=tuple(regular),
            d2d=tuple(d2d),
        )

    def resolve_subject(self, roster: ClassRoster, subject_id: int) -> Subject:
        """Subject of ``roster``'s class; NotFound when it does not exist at all."""

        for s in roster.subjects:
            if s.subject_id == int(subject_id):
                return s
        self.get_subject(subject_id)
        raise ValidationError(f"Subject {subject_id} does not belong to class {roster.school_class.name}")

from __future__ import annotations

from dataclasses import replace
from typing import Optional, Sequence

import pytest

from src.class_attendance.class_attendance.attendance.roster import RosterLoader
from src.class_attendance.class_attendance.classes.model import SchoolClass
from src.class_attendance.class_attendance.core.enums import Cohort
from src.class_attendance.class_attendance.students.model import AttendanceEntry, Student
from src.class_attendance.class_attendance.subjects.model import LabBatch, Subject


class FakeClassesRepo:
    def __init__(self):
        self.rows: dict[int, SchoolClass] = {}

    def get_by_id(self, class_id):
        return self.rows.get(int(class_id))


class FakeSubjectsRepo:
    def __init__(self):
        self.rows: dict[int, Subject] = {}

    def list_by_class(self, class_id):
        return [s for s in self.rows.values() if s.class_id == int(class_id)]

    def get_by_id(self, subject_id):
        return self.rows.get(int(subject_id))

    def replace_batches(self, subject_id, batches):
        self.rows[subject_id] = replace(self.rows[subject_id], batches=tuple(batches))


class FakeStudentsRepo:
    """Keeps insertion order like the MySQL adapter's ORDER BY recorded_at, entry_id."""

    def __init__(self):
        self.rows: dict[int, Student] = {}
        self.exists_calls: list[tuple[int, Cohort]] = []
        self.append_calls = 0
        self._next_entry_id = 1

    def list_by_class(self, class_id, cohort, *, school_id=None):
        return [
            s for s in self.rows.values()
            if s.class_id == int(class_id) and s.cohort is cohort
            and (school_id is None or s.school_id == school_id)
        ]

    def get_by_id(self, student_id, cohort=None):
        s = self.rows.get(int(student_id))
        if s is None or (cohort is not None and s.cohort is not cohort):
            return None
        return s

    def exists(self, student_id, cohort):
        self.exists_calls.append((int(student_id), cohort))
        return self.get_by_id(student_id, cohort) is not None

    def append_entries(self, items):
        self.append_calls += 1
        for student_id, entry in items:
            entry = replace(entry, entry_id=self._next_entry_id)
            self._next_entry_id += 1
            s = self.rows[student_id]
            self.rows[student_id] = replace(s, attendance=s.attendance + (entry,))
        return len(items)

    def remove_matching_entries(self, student_id, subject_id, day):
        s = self.rows[student_id]
        kept = tuple(e for e in s.attendance if not (e.subject_id == subject_id and e.day == day))
        self.rows[student_id] = replace(s, attendance=kept)
        return len(s.attendance) - len(kept)

    def remove_subject_entries(self, subject_id, *, student_id=None):
        removed = 0
        for sid, s in list(self.rows.items()):
            if student_id is not None and sid != student_id:
                continue
            kept = tuple(e for e in s.attendance if e.subject_id != subject_id)
            removed += len(s.attendance) - len(kept)
            self.rows[sid] = replace(s, attendance=kept)
        return removed

    def remove_all_entries(self, *, student_id=None, class_id=None):
        removed = 0
        for sid, s in list(self.rows.items()):
            if student_id is not None and sid != student_id:
                continue
            if class_id is not None and s.class_id != class_id:
                continue
            removed += len(s.attendance)
            self.rows[sid] = replace(s, attendance=())
        return removed

    def entries_of(self, student_id) -> tuple[AttendanceEntry, ...]:
        return self.rows[student_id].attendance


class FakeStore:
    def __init__(self):
        self.classes = FakeClassesRepo()
        self.subjects = FakeSubjectsRepo()
        self.students = FakeStudentsRepo()

    def roster_loader(self) -> RosterLoader:
        return RosterLoader(self.classes, self.subjects, self.students)

    def add_class(self, class_id: int = 1, name: str = "SE-A") -> SchoolClass:
        c = SchoolClass(class_id=class_id, name=name)
        self.classes.rows[class_id] = c
        return c

    def add_subject(
        self,
        subject_id: int,
        name: str,
        *,
        class_id: int = 1,
        is_lab: bool = False,
        batches: Sequence[LabBatch] = (),
    ) -> Subject:
        s = Subject(
            subject_id=subject_id,
            class_id=class_id,
            name=name,
            code=f"S{subject_id}",
            is_lab=is_lab,
            batches=tuple(batches),
        )
        self.subjects.rows[subject_id] = s
        return s

    def add_student(
        self,
        student_id: int,
        roll_num: str,
        name: Optional[str] = None,
        *,
        class_id: int = 1,
        cohort: Cohort = Cohort.REGULAR,
        attendance: Sequence[AttendanceEntry] = (),
    ) -> Student:
        s = Student(
            student_id=student_id,
            roll_num=roll_num,
            name=name or f"Student {roll_num}",
            email=f"{roll_num}@example.com",
            class_id=class_id,
            cohort=cohort,
            attendance=tuple(attendance),
        )
        self.students.rows[student_id] = s
        return s


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


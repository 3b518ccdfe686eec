from __future__ import annotations

from typing import Any

from ..core.enums import OverallMode
from ..students.model import Student
from ..subjects.model import Subject
from . import occurrences
from .roster import RosterLoader
from .stats import class_average, compute_stats


class AttendanceStatsService:
    """JSON-shaped attendance statistics for the HTTP layer."""

    def __init__(self, roster: RosterLoader):
        self._roster = roster

    @staticmethod
    def _student_payload(student: Student, subjects: tuple[Subject, ...]) -> dict[str, Any]:
        stats = compute_stats(student.attendance, subjects, mode=OverallMode.SUBJECT_AVERAGE)
        return {
            "_id": student.student_id,
            "name": student.name,
            "rollNum": student.roll_num,
            "type": student.cohort.value,
            "attendance": {
                "overallPercentage": stats.overall,
                "subjectWise": [
                    {"subject": subject.name, "percentage": pct}
                    for subject, pct in zip(subjects, stats.per_subject)
                ],
            },
        }

    def get_class_attendance(self, class_id: int) -> dict[str, Any]:
        roster = self._roster.load(class_id)
        students = [self._student_payload(s, roster.subjects) for s in roster.students]

        return {
            "students": students,
            "classStats": {
                "totalStudents": len(students),
                "averageAttendance": class_average(
                    [s["attendance"]["overallPercentage"] for s in students]
                ),
                "subjects": [s.name for s in roster.subjects],
            },
        }

    def get_lecture_summary(self, class_id: int, subject_id: int) -> dict[str, Any]:
        """Lectures taught for one subject: distinct dates and individual sessions."""

        roster = self._roster.load(class_id)
        subject = self._roster.resolve_subject(roster, subject_id)
        all_attendance = [s.attendance for s in roster.students]
        slots = occurrences.resolve_occurrences(all_attendance, subject.subject_id)

        return {
            "subject": subject.name,
            "lectureDates": occurrences.count_lecture_dates(all_attendance, subject.subject_id),
            "lectureSlots": len(slots),
            "slots": [{"date": slot.day.isoformat(), "occurrence": slot.occurrence} for slot in slots],
        }

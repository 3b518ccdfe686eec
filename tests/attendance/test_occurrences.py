from __future__ import annotations

from datetime import date, datetime

from src.class_attendance.class_attendance.attendance.occurrences import (
    LectureSlot,
    count_lecture_dates,
    count_lecture_slots,
    resolve_occurrences,
    same_day_groups,
    status_at,
)
from src.class_attendance.class_attendance.core.enums import AttendanceStatus
from src.class_attendance.class_attendance.students.model import AttendanceEntry

S = 7
DAY = date(2024, 1, 10)


def _entry(day: date, status: AttendanceStatus, hour: int, subject_id: int = S) -> AttendanceEntry:
    return AttendanceEntry(
        subject_id=subject_id,
        day=day,
        status=status,
        recorded_at=datetime(day.year, day.month, day.day, hour),
    )


def test_max_same_day_count_decides_columns():
    student_a = [
        _entry(DAY, AttendanceStatus.PRESENT, 9),
        _entry(DAY, AttendanceStatus.ABSENT, 14),
    ]
    student_b = [_entry(DAY, AttendanceStatus.PRESENT, 9)]

    slots = resolve_occurrences([student_a, student_b], S)

    assert slots == [LectureSlot(DAY, 1), LectureSlot(DAY, 2)]

    groups_b = same_day_groups(student_b, S)
    assert status_at(groups_b, slots[0]) is AttendanceStatus.PRESENT
    assert status_at(groups_b, slots[1]) is None

    groups_a = same_day_groups(student_a, S)
    assert status_at(groups_a, slots[1]) is AttendanceStatus.ABSENT


def test_same_day_entries_ordered_by_timestamp():
    late_first = [
        _entry(DAY, AttendanceStatus.ABSENT, 15),
        _entry(DAY, AttendanceStatus.PRESENT, 8),
    ]

    groups = same_day_groups(late_first, S)

    assert [e.status for e in groups[DAY]] == [AttendanceStatus.PRESENT, AttendanceStatus.ABSENT]


def test_lecture_dates_count_each_day_once():
    d1, d2, d3 = date(2024, 1, 8), date(2024, 1, 9), date(2024, 1, 10)
    student_a = [
        _entry(d1, AttendanceStatus.PRESENT, 9),
        _entry(d2, AttendanceStatus.PRESENT, 9),
        _entry(d2, AttendanceStatus.PRESENT, 14),
    ]
    student_b = [
        _entry(d3, AttendanceStatus.ABSENT, 9),
        _entry(d3, AttendanceStatus.ABSENT, 9, subject_id=99),
    ]

    assert count_lecture_dates([student_a, student_b], S) == 3
    assert count_lecture_slots([student_a, student_b], S) == 4


def test_other_subjects_are_ignored():
    entries = [_entry(DAY, AttendanceStatus.PRESENT, 9, subject_id=1)]

    assert resolve_occurrences([entries], S) == []

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, Mapping, Optional, Sequence

from ..core.enums import AttendanceStatus
from ..students.model import AttendanceEntry


@dataclass(frozen=True, order=True)
class LectureSlot:
    """One report column: a day and the 1-based session index on that day."""

    day: date
    occurrence: int = 1


def _entry_order(entry: AttendanceEntry) -> datetime:
    return entry.recorded_at or datetime.min


def same_day_groups(entries: Iterable[AttendanceEntry], subject_id: int) -> dict[date, list[AttendanceEntry]]:
    """Group one student's entries for a subject by day.

    Within a day entries are ordered by ``recorded_at``; the sort is stable,
    so entries without a timestamp keep their insertion order.
    """

    groups: dict[date, list[AttendanceEntry]] = defaultdict(list)
    for e in entries:
        if e.subject_id == subject_id:
            groups[e.day].append(e)
    for day_entries in groups.values():
        day_entries.sort(key=_entry_order)
    return dict(groups)


def occurrences_per_day(all_attendance: Iterable[Sequence[AttendanceEntry]], subject_id: int) -> dict[date, int]:
    """Highest same-day entry count any single student has, per day."""

    counts: dict[date, int] = {}
    for entries in all_attendance:
        for day, day_entries in same_day_groups(entries, subject_id).items():
            counts[day] = max(counts.get(day, 0), len(day_entries))
    return counts


def resolve_occurrences(all_attendance: Iterable[Sequence[AttendanceEntry]], subject_id: int) -> list[LectureSlot]:
    counts = occurrences_per_day(all_attendance, subject_id)
    return [
        LectureSlot(day=day, occurrence=n)
        for day in sorted(counts)
        for n in range(1, counts[day] + 1)
    ]


def status_at(groups: Mapping[date, Sequence[AttendanceEntry]], slot: LectureSlot) -> Optional[AttendanceStatus]:
    """Status recorded for ``slot``, or None when the student has no such session.

    ``groups`` is one student's :func:`same_day_groups` for the subject.
    """

    day_entries = groups.get(slot.day, [])
    if slot.occurrence > len(day_entries):
        return None
    return day_entries[slot.occurrence - 1].status


def count_lecture_dates(all_attendance: Iterable[Sequence[AttendanceEntry]], subject_id: int) -> int:
    """Distinct days with at least one entry (a day with 2 sessions counts once)."""

    days: set[date] = set()
    for entries in all_attendance:
        days.update(e.day for e in entries if e.subject_id == subject_id)
    return len(days)


def count_lecture_slots(all_attendance: Iterable[Sequence[AttendanceEntry]], subject_id: int) -> int:
    return sum(occurrences_per_day(all_attendance, subject_id).values())

"""Attendance percentages for one student.

Every report and the stats query go through this module so that all call
sites agree on filtering, the two overall formulas and rounding.

Percentages returned for display are rounded to one decimal with
round-half-away-from-zero (``round(x * 10) / 10``). Raw values are kept on
``AttendanceStats`` for callers that aggregate further.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from ..core.enums import OverallMode
from ..students.model import AttendanceEntry
from ..subjects.model import Subject


def round_percentage(value: float) -> float:
    scaled = math.floor(abs(value) * 10 + 0.5) / 10
    return math.copysign(scaled, value) if value else 0.0


def mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


@dataclass(frozen=True)
class SubjectTally:
    present: int = 0
    total: int = 0

    @property
    def percentage(self) -> float:
        if self.total == 0:
            return 0.0
        return self.present * 100 / self.total

    def __add__(self, other: "SubjectTally") -> "SubjectTally":
        return SubjectTally(present=self.present + other.present, total=self.total + other.total)


@dataclass(frozen=True)
class AttendanceStats:
    per_subject: tuple[float, ...]
    overall: float
    raw_per_subject: tuple[float, ...]
    raw_overall: float
    tallies: tuple[SubjectTally, ...]


def tally(entries: Iterable[AttendanceEntry], subject_id: Optional[int] = None) -> SubjectTally:
    """Count present/total entries, optionally for one subject only."""

    present = total = 0
    for e in entries:
        if subject_id is not None and e.subject_id != subject_id:
            continue
        total += 1
        if e.is_present:
            present += 1
    return SubjectTally(present=present, total=total)


def overall_by_subject_average(
    entries: Sequence[AttendanceEntry],
    subjects: Sequence[Subject],
    *,
    include_empty_subjects: bool = False,
) -> float:
    """Mean of per-subject percentages, each subject weighted equally.

    Subjects without entries are left out unless ``include_empty_subjects``
    is set, in which case they count as 0%.
    """

    tallies = [tally(entries, s.subject_id) for s in subjects]
    if not include_empty_subjects:
        tallies = [t for t in tallies if t.total]
    return mean([t.percentage for t in tallies])


def overall_by_entry_weighted(
    entries: Sequence[AttendanceEntry],
    subjects: Optional[Sequence[Subject]] = None,
) -> float:
    """Present entries over all entries, each entry weighted equally."""

    if subjects is not None:
        wanted = {s.subject_id for s in subjects}
        entries = [e for e in entries if e.subject_id in wanted]
    return tally(entries).percentage


def compute_stats(
    entries: Sequence[AttendanceEntry],
    subjects: Sequence[Subject],
    *,
    mode: OverallMode = OverallMode.SUBJECT_AVERAGE,
    include_empty_subjects: bool = False,
) -> AttendanceStats:
    tallies = tuple(tally(entries, s.subject_id) for s in subjects)
    raw_per_subject = tuple(t.percentage for t in tallies)

    if mode is OverallMode.ENTRY_WEIGHTED:
        raw_overall = overall_by_entry_weighted(entries, subjects)
    else:
        raw_overall = overall_by_subject_average(
            entries, subjects, include_empty_subjects=include_empty_subjects
        )

    return AttendanceStats(
        per_subject=tuple(round_percentage(p) for p in raw_per_subject),
        overall=round_percentage(raw_overall),
        raw_per_subject=raw_per_subject,
        raw_overall=raw_overall,
        tallies=tallies,
    )


def class_average(overalls: Sequence[float]) -> float:
    """Average of already-rounded per-student overalls, rounded again."""

    return round_percentage(mean(overalls))

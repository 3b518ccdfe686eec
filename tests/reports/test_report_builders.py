from __future__ import annotations

from datetime import date, datetime

import pytest

from src.class_attendance.class_attendance.attendance.batches import BatchMembershipFilter
from src.class_attendance.class_attendance.core.enums import AttendanceStatus, Cohort, ReportKind
from src.class_attendance.class_attendance.core.exceptions import ValidationError
from src.class_attendance.class_attendance.reports.builders.base import ReportRequest
from src.class_attendance.class_attendance.reports.builders.sheets import sheet_name_for
from src.class_attendance.class_attendance.reports.factory import ReportBuilderFactory
from src.class_attendance.class_attendance.students.model import AttendanceEntry
from src.class_attendance.class_attendance.subjects.model import LabBatch

P, A = AttendanceStatus.PRESENT, AttendanceStatus.ABSENT
JAN_10 = date(2024, 1, 10)
JAN_11 = date(2024, 1, 11)
FEB_02 = date(2024, 2, 2)


def _entry(subject_id, day, status, hour=9):
    return AttendanceEntry(
        subject_id=subject_id,
        day=day,
        status=status,
        recorded_at=datetime(day.year, day.month, day.day, hour),
    )


@pytest.fixture
def roster(store):
    store.add_class(1, "SE-A")
    store.add_subject(1, "Maths")
    store.add_subject(2, "Chem Lab", is_lab=True, batches=[LabBatch("X", frozenset({1}))])
    store.add_student(1, "9", "Asha", attendance=[
        _entry(1, JAN_10, P),
        _entry(1, JAN_10, A, hour=14),
        _entry(2, JAN_11, P),
        _entry(1, FEB_02, P),
    ])
    store.add_student(2, "10", "Rohan", attendance=[
        _entry(1, JAN_10, P),
        _entry(2, JAN_11, A),
    ])
    store.add_student(3, "D01", "Tanvi", cohort=Cohort.D2D, attendance=[
        _entry(2, JAN_11, P),
    ])
    return store.roster_loader().load(1)


@pytest.fixture
def factory():
    return ReportBuilderFactory(batch_filter=BatchMembershipFilter())


def _row(table, name):
    for row in table.rows:
        if row["name"].startswith(name):
            return row
    raise AssertionError(name)


def test_date_grid_has_one_column_per_session(roster, factory):
    maths = roster.subjects[0]
    (table,) = factory.for_kind(ReportKind.SUBJECT_DATE_GRID).build(ReportRequest(roster=roster, subject=maths))

    assert table.header_labels == [
        "Roll No", "Name", "10/01/2024 #1", "10/01/2024 #2", "02/02/2024", "% Attendance",
    ]
    asha, rohan = _row(table, "Asha"), _row(table, "Rohan")
    assert [asha[c.key] for c in table.columns[2:5]] == ["P", "A", "P"]
    # Rohan had only one session that day: the second slot is empty, not absent.
    assert [rohan[c.key] for c in table.columns[2:5]] == ["P", "", ""]
    assert asha["percentage"] == 66.7
    assert rohan["percentage"] == 100.0
    assert _row(table, "Tanvi")["name"] == "Tanvi (D2D)"
    assert table.title_block == ("Class: SE-A | Subject: Maths",)


def test_date_grid_blanks_students_outside_batch(roster, factory):
    lab = roster.subjects[1]
    batch = lab.batch_named("X")
    (table,) = factory.for_kind(ReportKind.SUBJECT_DATE_GRID).build(
        ReportRequest(roster=roster, subject=lab, batch=batch)
    )

    slot_key = table.columns[2].key
    assert _row(table, "Asha")[slot_key] == "P"
    rohan = _row(table, "Rohan")
    assert rohan[slot_key] == ""
    assert rohan["percentage"] is None
    # D2D students are exempt from batch filtering.
    assert _row(table, "Tanvi")[slot_key] == "P"

    (summary,) = table.summary_rows
    assert summary["name"] == "Class Average"
    assert summary["percentage"] == 100.0
    assert "Batch: X" in table.title_block[0]


def test_date_grid_requires_a_subject(roster, factory):
    with pytest.raises(ValidationError):
        factory.for_kind(ReportKind.SUBJECT_DATE_GRID).build(ReportRequest(roster=roster))


def test_overview_uses_subject_average(roster, factory):
    (table,) = factory.for_kind(ReportKind.SUBJECT_OVERVIEW).build(ReportRequest(roster=roster))

    assert table.header_labels == ["Roll No", "Name", "Type", "Maths", "Chem Lab", "Overall %"]
    asha = _row(table, "Asha")
    assert (asha["subject:1"], asha["subject:2"], asha["overall"]) == (66.7, 100.0, 83.3)
    assert _row(table, "Tanvi")["type"] == "D2D"
    # Query order is kept for the overview.
    assert [r["name"] for r in table.rows] == ["Asha", "Rohan", "Tanvi"]
    assert table.summary_rows[0]["subject:1"] == 55.6


def test_monthly_marks_missing_months_not_available(roster, factory):
    (table,) = factory.for_kind(ReportKind.MONTHLY).build(ReportRequest(roster=roster))

    assert table.header_labels == ["Roll No", "Name", "Type", "January 2024", "February 2024", "Overall %"]
    # Roll numbers sort as strings.
    assert [r["roll_num"] for r in table.rows] == ["10", "9", "D01"]
    rohan = _row(table, "Rohan")
    assert rohan["month:2024-01"] == 50.0
    assert rohan["month:2024-02"] == "N/A"
    asha = _row(table, "Asha")
    assert asha["month:2024-01"] == 66.7
    assert asha["overall"] == 75.0
    # "N/A" cells are left out of the column average.
    assert table.summary_rows[0]["month:2024-02"] == 100.0


def test_date_range_is_inclusive_by_day(roster, factory):
    builder = factory.for_kind(ReportKind.DATE_RANGE)
    (table,) = builder.build(ReportRequest(roster=roster, start=JAN_10, end=JAN_10))

    asha = _row(table, "Asha")
    assert asha["subject:1"] == 50.0
    assert asha["subject:2"] == 0.0
    assert asha["overall"] == 50.0
    assert "From 10/01/2024 to 10/01/2024" in table.title_block[0]


def test_date_range_validates_bounds(roster, factory):
    builder = factory.for_kind(ReportKind.DATE_RANGE)

    with pytest.raises(ValidationError):
        builder.build(ReportRequest(roster=roster, start=JAN_10))
    with pytest.raises(ValidationError):
        builder.build(ReportRequest(roster=roster, start=FEB_02, end=JAN_10))


def test_subject_sheets_one_table_per_subject(roster, factory):
    tables = factory.for_kind(ReportKind.SUBJECT_SHEETS).build(ReportRequest(roster=roster))

    assert [t.sheet_name for t in tables] == ["Maths", "Chem Lab"]
    assert all(t.kind is ReportKind.SUBJECT_SHEETS for t in tables)
    lab = tables[1]
    assert lab.header_labels == ["Roll No", "Name", "11/01/2024", "% Attendance"]
    # No batch selected: everyone is visible.
    assert _row(lab, "Rohan")[lab.columns[2].key] == "A"


def test_sheet_names_are_sanitised_and_unique():
    taken: set[str] = set()

    assert sheet_name_for("Maths/Stats", taken) == "Maths-Stats"
    assert sheet_name_for("maths-stats", taken) == "maths-stats (2)"
    assert len(sheet_name_for("x" * 40, taken)) == 31

from __future__ import annotations

from datetime import date

import pytest

from src.class_attendance.class_attendance.core.enums import AttendanceStatus, Cohort, WriteMode
from src.class_attendance.class_attendance.core.exceptions import NotFoundError, ValidationError
from src.class_attendance.class_attendance.marking.service import AttendanceMarkingService
from src.class_attendance.class_attendance.students.model import AttendanceEntry
from src.class_attendance.class_attendance.subjects.model import LabBatch

DAY = date(2024, 3, 4)


@pytest.fixture
def seeded(store):
    store.add_class(1, "SE-A")
    store.add_class(2, "SE-B")
    store.add_subject(1, "Maths")
    store.add_subject(2, "Chem Lab", is_lab=True, batches=[LabBatch("X", frozenset({1, 2}))])
    store.add_subject(3, "History", class_id=2)
    store.add_student(1, "2301", "Asha")
    store.add_student(2, "2307", "Kabir")
    store.add_student(3, "2308", "Meera")
    store.add_student(4, "D07", "Tanvi", cohort=Cohort.D2D)
    return store


@pytest.fixture
def service(seeded):
    return AttendanceMarkingService(seeded.students, seeded.subjects, seeded.roster_loader())


def _record(student_id, **overrides):
    record = {"studentId": student_id, "date": "2024-03-04", "status": "Present", "subjectId": 1}
    record.update(overrides)
    return record


def test_bulk_mark_skips_invalid_record(service, seeded):
    records = [_record(1), _record(2, status="Absent"), _record(3, date=None), _record(4)]

    result = service.plan_and_apply(records)

    assert (result.success_count, result.total_count) == (3, 4)
    assert [o.success for o in result.outcomes] == [True, True, False, True]
    assert "date" in result.outcomes[2].error
    assert seeded.students.entries_of(3) == ()
    assert seeded.students.entries_of(2)[0].status is AttendanceStatus.ABSENT
    assert seeded.students.append_calls == 1
    assert result.to_dict()["successCount"] == 3


def test_bulk_mark_per_record_lookup_failures(service, seeded):
    records = [
        _record(99),
        _record(1, subjectId=3),
        _record(2, subjectId=None, subName="2"),
        _record(3, status="Late"),
    ]

    result = service.plan_and_apply(records)

    assert [o.success for o in result.outcomes] == [False, False, True, False]
    assert result.outcomes[0].error == "Student not found"
    assert seeded.students.entries_of(2)[0].subject_id == 2


def test_cohort_lookup_is_cached_within_a_call(service, seeded):
    service.plan_and_apply([_record(4), _record(4, subjectId=2), _record(1, isDtod=False)])

    assert seeded.students.exists_calls == [(4, Cohort.D2D)]
    assert len(seeded.students.entries_of(4)) == 2


def test_bulk_mark_accepts_subname_subject_reference(service, seeded):
    result = service.plan_and_apply([
        {"studentId": 1, "isDtod": False, "date": "2024-03-04", "status": "Present", "subName": "2"},
    ])

    assert result.success_count == 1
    assert seeded.students.entries_of(1)[0].subject_id == 2


def test_unknown_cohort_is_resolved_by_one_lookup(service, seeded):
    result = service.plan_and_apply([_record(1, cohort="unknown"), _record(1, cohort="unknown", subjectId=2)])

    assert result.success_count == 2
    assert seeded.students.exists_calls == [(1, Cohort.D2D)]


def test_append_keeps_same_day_entries(service, seeded):
    service.plan_and_apply([_record(1)])
    service.plan_and_apply([_record(1, status="Absent")])

    assert [e.status for e in seeded.students.entries_of(1)] == [AttendanceStatus.PRESENT, AttendanceStatus.ABSENT]


def test_overwrite_replaces_same_day_entry(service, seeded):
    service.plan_and_apply([_record(1)])
    service.plan_and_apply([_record(1, status="Absent"), _record(1, status="P")], mode=WriteMode.OVERWRITE)

    (entry,) = seeded.students.entries_of(1)
    assert entry.status is AttendanceStatus.PRESENT


def test_unknown_write_mode_is_rejected(service):
    with pytest.raises(ValidationError):
        service.plan_and_apply([_record(1)], mode="merge")


def test_quick_mark_by_suffix(service, seeded):
    result = service.quick_mark(1, 1, "07", "2024-03-04", "absent")

    assert result.marked.name == "Kabir"
    assert result.to_dict()["student"] == {"_id": 2, "name": "Kabir", "rollNum": "2307", "type": "Regular"}
    (entry,) = seeded.students.entries_of(2)
    assert (entry.day, entry.status) == (DAY, AttendanceStatus.ABSENT)


def test_quick_mark_d2d_roll_is_exact_and_case_insensitive(service, seeded):
    result = service.quick_mark(1, 1, "d07", DAY, "present")

    assert result.marked.student_id == 4
    assert seeded.students.entries_of(2) == ()


def test_quick_mark_no_match_has_no_side_effects(service, seeded):
    with pytest.raises(NotFoundError):
        service.quick_mark(1, 1, "55", DAY, "present")

    assert seeded.students.append_calls == 0


def test_quick_mark_preview_lists_all_matches(service, seeded):
    seeded.add_student(5, "2407", "Ravi")

    result = service.quick_mark(1, 1, "7", DAY, "present", preview=True)

    assert result.is_preview
    # Regular students first, then D2D ("D07" also ends in 07).
    assert [s.name for s in result.matches] == ["Kabir", "Ravi", "Tanvi"]
    assert seeded.students.append_calls == 0


def test_quick_mark_selector_longer_than_two_digits(service, seeded):
    seeded.add_student(5, "23107", "Ravi")

    result = service.quick_mark(1, 1, "107", DAY, "present")

    assert result.marked.student_id == 5
    assert [s.student_id for s in result.matches] == [5]


def test_quick_mark_respects_batch(service, seeded):
    with pytest.raises(NotFoundError):
        service.quick_mark(1, 2, "08", DAY, "present", batch_name="X")


def test_quick_mark_rejects_unknown_mode(service):
    with pytest.raises(ValidationError):
        service.quick_mark(1, 1, "07", DAY, "late")


def test_quick_submit_marks_whole_roster(service, seeded):
    result = service.quick_submit(1, 1, DAY, [{"rollNum": "2301"}, "d07", "9999"], "present")

    assert (result.success_count, result.total_count) == (4, 5)
    status = {sid: seeded.students.entries_of(sid)[0].status for sid in (1, 2, 3, 4)}
    assert status == {
        1: AttendanceStatus.PRESENT,
        2: AttendanceStatus.ABSENT,
        3: AttendanceStatus.ABSENT,
        4: AttendanceStatus.PRESENT,
    }


def test_quick_submit_absent_mode_inverts(service, seeded):
    service.quick_submit(1, 2, DAY, ["2301"], "absent", batch_name="X")

    assert seeded.students.entries_of(1)[0].status is AttendanceStatus.ABSENT
    assert seeded.students.entries_of(2)[0].status is AttendanceStatus.PRESENT
    # Outside the batch and not D2D: untouched.
    assert seeded.students.entries_of(3) == ()
    assert seeded.students.entries_of(4)[0].status is AttendanceStatus.PRESENT


def test_clear_subject_attendance(service, seeded):
    seeded.students.append_entries([
        (1, AttendanceEntry(subject_id=1, day=DAY, status=AttendanceStatus.PRESENT)),
        (2, AttendanceEntry(subject_id=1, day=DAY, status=AttendanceStatus.PRESENT)),
        (2, AttendanceEntry(subject_id=2, day=DAY, status=AttendanceStatus.PRESENT)),
    ])

    assert service.clear_subject_attendance(1, student_id=2) == 1
    assert service.clear_subject_attendance(1) == 1
    assert len(seeded.students.entries_of(2)) == 1
    with pytest.raises(NotFoundError):
        service.clear_subject_attendance(404)


def test_clear_attendance_of_student_or_class(service, seeded):
    seeded.add_student(6, "2401", "Ravi", class_id=2)
    seeded.students.append_entries([
        (1, AttendanceEntry(subject_id=1, day=DAY, status=AttendanceStatus.PRESENT)),
        (1, AttendanceEntry(subject_id=2, day=DAY, status=AttendanceStatus.PRESENT)),
        (2, AttendanceEntry(subject_id=1, day=DAY, status=AttendanceStatus.ABSENT)),
        (6, AttendanceEntry(subject_id=3, day=DAY, status=AttendanceStatus.PRESENT)),
    ])

    assert service.clear_attendance(student_id=1) == 2
    assert seeded.students.entries_of(2) != ()
    assert service.clear_attendance(class_id=1) == 1
    assert seeded.students.entries_of(2) == ()
    assert len(seeded.students.entries_of(6)) == 1

    with pytest.raises(NotFoundError):
        service.clear_attendance(student_id=404)
    with pytest.raises(NotFoundError):
        service.clear_attendance(class_id=404)
    with pytest.raises(ValidationError):
        service.clear_attendance()


def test_mark_student_single_record(service, seeded):
    result = service.mark_student(3, {"subName": "1", "status": "Absent", "date": "2024-03-04"})

    assert result.success_count == 1
    (entry,) = seeded.students.entries_of(3)
    assert (entry.subject_id, entry.status) == (1, AttendanceStatus.ABSENT)

    with pytest.raises(NotFoundError):
        service.mark_student(404, {"subName": "1", "status": "Absent", "date": "2024-03-04"})
    with pytest.raises(ValidationError):
        service.mark_student(3, {"subName": "3", "status": "Absent", "date": "2024-03-04"})
    with pytest.raises(ValidationError):
        service.mark_student(3, {"status": "Absent", "date": "2024-03-04"})

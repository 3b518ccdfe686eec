from __future__ import annotations

import logging
from datetime import date
from typing import Any, Mapping, Optional, Sequence

from ..attendance.batches import BatchMembershipFilter, find_batch
from ..attendance.roster import RosterLoader
from ..common.datetime_utils import now_utc
from ..common.validators import require_non_empty
from ..core.constants import D2D_ROLL_PREFIX, ROLL_SUFFIX_WIDTH
from ..core.enums import AttendanceStatus, Cohort, WriteMode
from ..core.exceptions import NotFoundError, ValidationError
from ..students.model import AttendanceEntry, Student
from ..students.repository import StudentRepository
from ..subjects.model import Subject
from ..subjects.repository import SubjectRepository
from .model import BulkMarkResult, MarkOutcome, MarkRecord, QuickMarkResult, parse_day, roll_set
from .write_policy import WritePolicy, policy_for

logger = logging.getLogger(__name__)


def matches_roll_suffix(student: Student, suffix: str) -> bool:
    """Quick-mark matching rule.

    ``d07``-style selectors must equal the roll number (case-insensitive);
    anything else, zero-padded to two characters, must end the roll.
    """

    roll = str(student.roll_num).strip()
    if suffix.lower().startswith(D2D_ROLL_PREFIX):
        return roll.lower() == suffix.lower()
    return roll.endswith(suffix.zfill(ROLL_SUFFIX_WIDTH))


def _payload(raw: Any) -> Mapping[str, Any]:
    return raw if isinstance(raw, Mapping) else {}


class _BatchLookups:
    """Read-through caches that live for one bulk call."""

    def __init__(self, students: StudentRepository, subjects: SubjectRepository):
        self._students = students
        self._subjects = subjects
        self._cohorts: dict[int, Cohort] = {}
        self._student_rows: dict[tuple[int, Cohort], Optional[Student]] = {}
        self._subject_rows: dict[int, Optional[Subject]] = {}

    def cohort(self, record: MarkRecord) -> Cohort:
        if record.cohort is not None:
            return record.cohort
        if record.student_id not in self._cohorts:
            is_d2d = self._students.exists(record.student_id, Cohort.D2D)
            self._cohorts[record.student_id] = Cohort.D2D if is_d2d else Cohort.REGULAR
        return self._cohorts[record.student_id]

    def student(self, student_id: int, cohort: Cohort) -> Optional[Student]:
        key = (student_id, cohort)
        if key not in self._student_rows:
            self._student_rows[key] = self._students.get_by_id(student_id, cohort)
        return self._student_rows[key]

    def subject(self, record: MarkRecord, student: Student) -> Subject:
        if record.subject_id not in self._subject_rows:
            self._subject_rows[record.subject_id] = self._subjects.get_by_id(record.subject_id)
        subject = self._subject_rows[record.subject_id]
        if subject is None:
            raise NotFoundError("Subject not found")
        if subject.class_id != student.class_id:
            raise ValidationError("Subject does not belong to the student's class")
        return subject


class AttendanceMarkingService:
    """Turns marking requests into attendance entries.

    All writes go through a :class:`WritePolicy`; the default one comes from
    settings and can be overridden per call.
    """

    def __init__(
        self,
        students: StudentRepository,
        subjects: SubjectRepository,
        roster: RosterLoader,
        *,
        batch_filter: Optional[BatchMembershipFilter] = None,
        write_mode: WriteMode | str = WriteMode.APPEND,
    ):
        self._students = students
        self._subjects = subjects
        self._roster = roster
        self._batch_filter = batch_filter or BatchMembershipFilter()
        self._write_mode = WriteMode(write_mode)

    def _policy(self, mode: Optional[WriteMode | str]) -> WritePolicy:
        try:
            return policy_for(mode or self._write_mode)
        except ValueError as e:
            raise ValidationError(str(e))

    def plan_and_apply(
        self,
        records: Sequence[Mapping[str, Any] | MarkRecord],
        *,
        mode: Optional[WriteMode | str] = None,
    ) -> BulkMarkResult:
        policy = self._policy(mode)
        lookups = _BatchLookups(self._students, self._subjects)
        recorded_at = now_utc()

        outcomes: list[MarkOutcome] = []
        planned: list[tuple[int, AttendanceEntry]] = []
        for raw in records:
            student_ref = raw.student_id if isinstance(raw, MarkRecord) else _payload(raw).get("studentId")
            try:
                record = raw if isinstance(raw, MarkRecord) else MarkRecord.from_payload(_payload(raw))
                cohort = lookups.cohort(record)
                student = lookups.student(record.student_id, cohort)
                if student is None:
                    raise NotFoundError("Student not found")
                subject = lookups.subject(record, student)
            except (ValidationError, NotFoundError) as e:
                logger.warning("Skipping attendance record for student %s: %s", student_ref, e)
                outcomes.append(MarkOutcome(student_id=student_ref, success=False, error=str(e)))
                continue

            planned.append((
                student.student_id,
                AttendanceEntry(
                    subject_id=subject.subject_id,
                    day=record.day,
                    status=record.status,
                    recorded_at=recorded_at,
                ),
            ))
            outcomes.append(MarkOutcome(student_id=student.student_id, success=True))

        written = policy.apply(self._students, planned)
        result = BulkMarkResult(outcomes=tuple(outcomes))
        logger.info(
            "Bulk mark (%s): %d/%d records accepted, %d entries written",
            policy.mode.value, result.success_count, result.total_count, written,
        )
        return result

    def _status(self, mode: str) -> AttendanceStatus:
        try:
            return AttendanceStatus.from_mode(mode)
        except ValueError as e:
            raise ValidationError(str(e))

    def quick_mark(
        self,
        class_id: int,
        subject_id: int,
        roll_suffix: str,
        day: date | str,
        mode: str,
        *,
        batch_name: Optional[str] = None,
        preview: bool = False,
        write_mode: Optional[WriteMode | str] = None,
    ) -> QuickMarkResult:
        suffix = require_non_empty(roll_suffix, "rollSuffix")
        status = self._status(mode)
        on_day = parse_day(day)
        policy = self._policy(write_mode)

        roster = self._roster.load(class_id)
        subject = self._roster.resolve_subject(roster, subject_id)
        batch = find_batch(subject, batch_name)

        matches = tuple(
            s for s in self._batch_filter.visible_students(roster.students, subject, batch)
            if matches_roll_suffix(s, suffix)
        )
        if not matches:
            raise NotFoundError(f"No student found with roll number matching {suffix}")
        if preview:
            return QuickMarkResult(matches=matches)

        target = matches[0]
        if len(matches) > 1:
            logger.info(
                "Roll selector %s matched %d students in class %s, marking %s",
                suffix, len(matches), roster.school_class.class_id, target.roll_num,
            )
        entry = AttendanceEntry(subject_id=subject.subject_id, day=on_day, status=status, recorded_at=now_utc())
        policy.apply(self._students, [(target.student_id, entry)])
        return QuickMarkResult(matches=matches, marked=target, status=status)

    def quick_submit(
        self,
        class_id: int,
        subject_id: int,
        day: date | str,
        marked_rolls: Sequence[Any],
        mode: str,
        *,
        batch_name: Optional[str] = None,
        write_mode: Optional[WriteMode | str] = None,
    ) -> BulkMarkResult:
        """Mark the whole (batch-visible) roster for one session.

        Students in ``marked_rolls`` get the ``mode`` status, everyone else
        the opposite one. Rolls that match nobody are reported as failures.
        """

        status = self._status(mode)
        on_day = parse_day(day)
        policy = self._policy(write_mode)
        marked = roll_set(marked_rolls or [])

        roster = self._roster.load(class_id)
        subject = self._roster.resolve_subject(roster, subject_id)
        batch = find_batch(subject, batch_name)
        visible = self._batch_filter.visible_students(roster.students, subject, batch)

        recorded_at = now_utc()
        planned: list[tuple[int, AttendanceEntry]] = []
        outcomes: list[MarkOutcome] = []
        for student in visible:
            is_marked = str(student.roll_num).strip().lower() in marked
            planned.append((
                student.student_id,
                AttendanceEntry(
                    subject_id=subject.subject_id,
                    day=on_day,
                    status=status if is_marked else status.opposite(),
                    recorded_at=recorded_at,
                ),
            ))
            outcomes.append(MarkOutcome(student_id=student.student_id, success=True))

        known = {str(s.roll_num).strip().lower() for s in visible}
        for roll in sorted(marked - known):
            outcomes.append(MarkOutcome(student_id=None, success=False, error=f"No student with roll number {roll}"))

        policy.apply(self._students, planned)
        result = BulkMarkResult(outcomes=tuple(outcomes))
        logger.info(
            "Quick submit for class %s subject %s on %s: %d/%d",
            roster.school_class.class_id, subject.subject_id, on_day.isoformat(),
            result.success_count, result.total_count,
        )
        return result

    def clear_subject_attendance(self, subject_id: int, *, student_id: Optional[int] = None) -> int:
        """Remove every entry for a subject, for one student or the whole class."""

        subject = self._roster.get_subject(subject_id)
        if student_id is not None and self._students.get_by_id(int(student_id)) is None:
            raise NotFoundError("Student not found")
        removed = self._students.remove_subject_entries(subject.subject_id, student_id=student_id)
        logger.info("Removed %d attendance entries for subject %s", removed, subject.subject_id)
        return removed

    def clear_attendance(self, *, student_id: Optional[int] = None, class_id: Optional[int] = None) -> int:
        """Remove every entry of one student, or of every student in a class."""

        if (student_id is None) == (class_id is None):
            raise ValidationError("Exactly one of student_id or class_id is required")
        if student_id is not None:
            if self._students.get_by_id(int(student_id)) is None:
                raise NotFoundError("Student not found")
            removed = self._students.remove_all_entries(student_id=int(student_id))
            logger.info("Removed %d attendance entries of student %s", removed, student_id)
        else:
            school_class = self._roster.get_class(class_id)
            removed = self._students.remove_all_entries(class_id=school_class.class_id)
            logger.info("Removed %d attendance entries of class %s", removed, school_class.class_id)
        return removed

    def mark_student(
        self,
        student_id: int,
        payload: Mapping[str, Any],
        *,
        mode: Optional[WriteMode | str] = None,
    ) -> BulkMarkResult:
        """Mark one session for one student.

        Unlike :meth:`plan_and_apply` a bad record is an error, not an outcome.
        """

        record = MarkRecord.from_payload({**payload, "studentId": student_id})
        if self._students.get_by_id(record.student_id) is None:
            raise NotFoundError("Student not found")
        result = self.plan_and_apply([record], mode=mode)
        if result.failed:
            raise ValidationError(result.failed[0].error or "Attendance not saved")
        return result

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Mapping, Optional, Sequence

from ..common.datetime_utils import to_utc_day
from ..common.validators import require_fields, require_int
from ..core.constants import UNKNOWN_COHORT
from ..core.enums import AttendanceStatus, Cohort
from ..core.exceptions import ValidationError
from ..students.model import Student


def parse_status(value: Any) -> AttendanceStatus:
    text = str(value or "").strip().lower()
    for status in AttendanceStatus:
        if text in (status.value.lower(), status.short.lower()):
            return status
    raise ValidationError(f"Invalid status: {value!r}")


def parse_day(value: Any) -> date:
    try:
        return to_utc_day(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid date: {value!r}")


def parse_cohort(value: Any) -> Optional[Cohort]:
    """Case-insensitive cohort; "unknown" means resolve it by lookup."""

    text = str(value).strip().lower()
    if text in ("", UNKNOWN_COHORT):
        return None
    for cohort in Cohort:
        if cohort.value.lower() == text:
            return cohort
    raise ValidationError(f"Invalid cohort: {value!r}")


@dataclass(frozen=True)
class MarkRecord:
    """One requested attendance mark, validated but not yet resolved.

    ``cohort`` is None when the caller did not say (or sent "unknown") which
    population the student belongs to. ``subName`` is accepted as an alias
    of ``subjectId``.
    """

    student_id: int
    day: date
    status: AttendanceStatus
    subject_id: int
    cohort: Optional[Cohort] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "MarkRecord":
        require_fields(payload, "studentId", "date", "status")
        subject_id = payload.get("subjectId")
        if subject_id in (None, ""):
            subject_id = payload.get("subName")
        if subject_id in (None, ""):
            raise ValidationError("Missing required fields: subjectId")

        cohort: Optional[Cohort] = None
        if payload.get("cohort") not in (None, ""):
            cohort = parse_cohort(payload["cohort"])
        elif "isDtod" in payload and payload["isDtod"] is not None:
            cohort = Cohort.D2D if payload["isDtod"] else Cohort.REGULAR

        return cls(
            student_id=require_int(payload["studentId"], "studentId"),
            day=parse_day(payload["date"]),
            status=parse_status(payload["status"]),
            cohort=cohort,
            subject_id=require_int(subject_id, "subjectId"),
        )


@dataclass(frozen=True)
class MarkOutcome:
    student_id: Optional[Any]
    success: bool
    error: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"studentId": self.student_id, "success": self.success}
        if self.error:
            out["error"] = self.error
        return out


@dataclass(frozen=True)
class BulkMarkResult:
    """Per-record outcomes of one bulk call; partial failure is a normal result."""

    outcomes: tuple[MarkOutcome, ...]

    @property
    def success_count(self) -> int:
        return sum(1 for o in self.outcomes if o.success)

    @property
    def total_count(self) -> int:
        return len(self.outcomes)

    @property
    def failed(self) -> list[MarkOutcome]:
        return [o for o in self.outcomes if not o.success]

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success_count == self.total_count,
            "message": f"Attendance saved for {self.success_count}/{self.total_count} records",
            "successCount": self.success_count,
            "totalCount": self.total_count,
            "results": [o.to_dict() for o in self.outcomes],
        }


def _student_dict(student: Student) -> dict[str, Any]:
    return {
        "_id": student.student_id,
        "name": student.name,
        "rollNum": student.roll_num,
        "type": student.cohort.value,
    }


@dataclass(frozen=True)
class QuickMarkResult:
    matches: tuple[Student, ...]
    marked: Optional[Student] = None
    status: Optional[AttendanceStatus] = None

    @property
    def is_preview(self) -> bool:
        return self.marked is None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "success": True,
            "preview": self.is_preview,
            "matches": [_student_dict(s) for s in self.matches],
        }
        if self.marked is not None:
            out["student"] = _student_dict(self.marked)
            out["status"] = self.status.value if self.status else None
        return out


def roll_set(rolls: Sequence[Any]) -> set[str]:
    """Normalise submitted roll numbers (plain values or ``{"rollNum": ...}``)."""

    out: set[str] = set()
    for item in rolls:
        value = item.get("rollNum") if isinstance(item, Mapping) else item
        if value not in (None, ""):
            out.add(str(value).strip().lower())
    return out

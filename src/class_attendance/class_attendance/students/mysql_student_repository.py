from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import Any, Optional, Sequence

from ..core.enums import AttendanceStatus, Cohort
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_placeholders
from .model import AttendanceEntry, Student
from .repository import StudentRepository

_STUDENT_COLUMNS = "student_id, roll_num, name, email, class_id, cohort, school_id"


def _to_entry(r: dict[str, Any]) -> AttendanceEntry:
    return AttendanceEntry(
        subject_id=int(r["subject_id"]),
        day=r["att_date"],
        status=AttendanceStatus(r["status"]),
        recorded_at=r.get("recorded_at"),
        entry_id=int(r["entry_id"]),
    )


def _to_student(r: dict[str, Any], entries: Sequence[AttendanceEntry]) -> Student:
    return Student(
        student_id=int(r["student_id"]),
        roll_num=str(r["roll_num"]),
        name=r["name"],
        email=r.get("email") or "",
        class_id=int(r["class_id"]),
        cohort=Cohort(r["cohort"]),
        attendance=tuple(entries),
        school_id=r.get("school_id"),
    )


class MySQLStudentRepository(StudentRepository):
    """Regular and D2D students share one table, tagged by ``cohort``."""

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _load_entries(self, cur, student_ids: Sequence[int]) -> dict[int, list[AttendanceEntry]]:
        by_student: dict[int, list[AttendanceEntry]] = defaultdict(list)
        if not student_ids:
            return by_student
        placeholders = in_placeholders(student_ids)
        cur.execute(
            f"""
            SELECT entry_id, student_id, subject_id, att_date, status, recorded_at
            FROM attendance_entries
            WHERE student_id IN ({placeholders})
            ORDER BY recorded_at, entry_id
            """,
            tuple(student_ids),
        )
        for r in fetchall(cur):
            by_student[int(r["student_id"])].append(_to_entry(r))
        return by_student

    def list_by_class(self, class_id: int, cohort: Cohort, *, school_id: Optional[int] = None) -> Sequence[Student]:
        sql = f"SELECT {_STUDENT_COLUMNS} FROM students WHERE class_id=%s AND cohort=%s"
        params: list[Any] = [class_id, cohort.value]
        if school_id is not None:
            sql += " AND school_id=%s"
            params.append(school_id)
        sql += " ORDER BY student_id"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            rows = fetchall(cur)
            entries = self._load_entries(cur, [int(r["student_id"]) for r in rows])
            return [_to_student(r, entries.get(int(r["student_id"]), [])) for r in rows]

    def get_by_id(self, student_id: int, cohort: Optional[Cohort] = None) -> Optional[Student]:
        sql = f"SELECT {_STUDENT_COLUMNS} FROM students WHERE student_id=%s"
        params: list[Any] = [student_id]
        if cohort is not None:
            sql += " AND cohort=%s"
            params.append(cohort.value)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            row = fetchone(cur)
            if not row:
                return None
            entries = self._load_entries(cur, [int(row["student_id"])])
            return _to_student(row, entries.get(int(row["student_id"]), []))

    def exists(self, student_id: int, cohort: Cohort) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT 1 AS found FROM students WHERE student_id=%s AND cohort=%s",
                (student_id, cohort.value),
            )
            return fetchone(cur) is not None

    def append_entries(self, items: Sequence[tuple[int, AttendanceEntry]]) -> int:
        if not items:
            return 0
        with db_cursor(self._conn_factory) as (_, cur):
            cur.executemany(
                """
                INSERT INTO attendance_entries (student_id, subject_id, att_date, status, recorded_at)
                VALUES (%s, %s, %s, %s, %s)
                """,
                [
                    (student_id, e.subject_id, e.day, e.status.value, e.recorded_at)
                    for student_id, e in items
                ],
            )
            return len(items)

    def remove_matching_entries(self, student_id: int, subject_id: int, day: date) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                DELETE FROM attendance_entries
                WHERE student_id=%s AND subject_id=%s AND att_date=%s
                """,
                (student_id, subject_id, day),
            )
            return int(cur.rowcount or 0)

    def remove_subject_entries(self, subject_id: int, *, student_id: Optional[int] = None) -> int:
        sql = "DELETE FROM attendance_entries WHERE subject_id=%s"
        params: list[Any] = [subject_id]
        if student_id is not None:
            sql += " AND student_id=%s"
            params.append(student_id)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return int(cur.rowcount or 0)

    def remove_all_entries(self, *, student_id: Optional[int] = None, class_id: Optional[int] = None) -> int:
        if student_id is None and class_id is None:
            raise ValueError("student_id or class_id is required")

        sql = """
            DELETE e FROM attendance_entries e
            JOIN students s ON s.student_id = e.student_id
            WHERE 1=1
        """
        params: list[Any] = []
        if student_id is not None:
            sql += " AND s.student_id=%s"
            params.append(student_id)
        if class_id is not None:
            sql += " AND s.class_id=%s"
            params.append(class_id)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return int(cur.rowcount or 0)

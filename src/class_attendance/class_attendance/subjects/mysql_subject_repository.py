from __future__ import annotations

from collections import defaultdict
from typing import Any, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_placeholders
from .model import LabBatch, Subject
from .repository import SubjectRepository

_SUBJECT_COLUMNS = "subject_id, class_id, sub_name, sub_code, sessions, is_lab"


class MySQLSubjectRepository(SubjectRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _load_batches(self, cur, subject_ids: Sequence[int]) -> dict[int, list[LabBatch]]:
        by_subject: dict[int, list[LabBatch]] = defaultdict(list)
        if not subject_ids:
            return by_subject
        placeholders = in_placeholders(subject_ids)
        cur.execute(
            f"""
            SELECT b.batch_id, b.subject_id, b.batch_name, m.student_id
            FROM lab_batches b
            LEFT JOIN lab_batch_members m ON m.batch_id = b.batch_id
            WHERE b.subject_id IN ({placeholders})
            ORDER BY b.subject_id, b.position, b.batch_id
            """,
            tuple(subject_ids),
        )

        # Rows arrive grouped by batch; keep batch order as stored.
        grouped: dict[int, dict[str, Any]] = {}
        for r in fetchall(cur):
            batch = grouped.setdefault(
                int(r["batch_id"]),
                {"subject_id": int(r["subject_id"]), "name": r["batch_name"], "members": set()},
            )
            if r.get("student_id") is not None:
                batch["members"].add(int(r["student_id"]))

        for b in grouped.values():
            by_subject[b["subject_id"]].append(LabBatch(name=b["name"], member_ids=frozenset(b["members"])))
        return by_subject

    @staticmethod
    def _to_subject(r: dict[str, Any], batches: Sequence[LabBatch]) -> Subject:
        return Subject(
            subject_id=int(r["subject_id"]),
            class_id=int(r["class_id"]),
            name=r["sub_name"],
            code=r["sub_code"],
            sessions=str(r.get("sessions") or ""),
            is_lab=bool(r.get("is_lab", False)),
            batches=tuple(batches),
        )

    def list_by_class(self, class_id: int) -> Sequence[Subject]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_SUBJECT_COLUMNS} FROM subjects WHERE class_id=%s ORDER BY subject_id",
                (class_id,),
            )
            rows = fetchall(cur)
            batches = self._load_batches(cur, [int(r["subject_id"]) for r in rows])
            return [self._to_subject(r, batches.get(int(r["subject_id"]), [])) for r in rows]

    def get_by_id(self, subject_id: int) -> Optional[Subject]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_SUBJECT_COLUMNS} FROM subjects WHERE subject_id=%s", (subject_id,))
            row = fetchone(cur)
            if not row:
                return None
            batches = self._load_batches(cur, [int(row["subject_id"])])
            return self._to_subject(row, batches.get(int(row["subject_id"]), []))

    def replace_batches(self, subject_id: int, batches: Sequence[LabBatch]) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                DELETE m FROM lab_batch_members m
                JOIN lab_batches b ON b.batch_id = m.batch_id
                WHERE b.subject_id=%s
                """,
                (subject_id,),
            )
            cur.execute("DELETE FROM lab_batches WHERE subject_id=%s", (subject_id,))

            for position, batch in enumerate(batches):
                cur.execute(
                    "INSERT INTO lab_batches (subject_id, batch_name, position) VALUES (%s, %s, %s)",
                    (subject_id, batch.name, position),
                )
                batch_id = cur.lastrowid
                if batch.member_ids:
                    cur.executemany(
                        "INSERT INTO lab_batch_members (batch_id, student_id) VALUES (%s, %s)",
                        [(batch_id, sid) for sid in sorted(batch.member_ids)],
                    )

from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import SchoolClass
from .repository import ClassRepository


class MySQLClassRepository(ClassRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, class_id: int) -> Optional[SchoolClass]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT class_id, class_name, school_id FROM classes WHERE class_id=%s",
                (class_id,),
            )
            row = fetchone(cur)
            if not row:
                return None
            return SchoolClass(
                class_id=int(row["class_id"]),
                name=row["class_name"],
                school_id=row.get("school_id"),
            )

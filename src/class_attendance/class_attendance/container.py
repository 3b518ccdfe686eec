from __future__ import annotations

from dataclasses import dataclass

from .attendance.batches import BatchMembershipFilter, BatchPolicy
from .attendance.roster import RosterLoader
from .attendance.service import AttendanceStatsService
from .classes.mysql_class_repository import MySQLClassRepository
from .core.constants import REPORT_DATE_FORMAT
from .core.enums import WriteMode
from .database.connection import DBConfig, DatabaseConnection
from .marking.service import AttendanceMarkingService
from .reports.factory import ReportBuilderFactory
from .reports.service import ReportService
from .students.mysql_student_repository import MySQLStudentRepository
from .subjects.mysql_subject_repository import MySQLSubjectRepository
from .subjects.service import SubjectService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    classes_repo: MySQLClassRepository
    subjects_repo: MySQLSubjectRepository
    students_repo: MySQLStudentRepository

    stats_service: AttendanceStatsService
    report_service: ReportService
    marking_service: AttendanceMarkingService
    subject_service: SubjectService


def build_container(
    *,
    db_config: dict,
    write_mode: str = WriteMode.APPEND.value,
    d2d_batch_exempt: bool = True,
    report_date_format: str = REPORT_DATE_FORMAT,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    classes_repo = MySQLClassRepository(conn)
    subjects_repo = MySQLSubjectRepository(conn)
    students_repo = MySQLStudentRepository(conn)

    roster = RosterLoader(classes_repo, subjects_repo, students_repo)
    batch_filter = BatchMembershipFilter(BatchPolicy(exempt_d2d=d2d_batch_exempt))

    stats_service = AttendanceStatsService(roster)
    report_service = ReportService(
        roster,
        factory=ReportBuilderFactory(batch_filter=batch_filter, date_format=report_date_format),
    )
    marking_service = AttendanceMarkingService(
        students_repo,
        subjects_repo,
        roster,
        batch_filter=batch_filter,
        write_mode=write_mode,
    )
    subject_service = SubjectService(subjects_repo, students_repo)

    return Container(
        conn=conn,
        classes_repo=classes_repo,
        subjects_repo=subjects_repo,
        students_repo=students_repo,
        stats_service=stats_service,
        report_service=report_service,
        marking_service=marking_service,
        subject_service=subject_service,
    )

from __future__ import annotations

from datetime import date

from flask import Flask, jsonify, request, send_file

from ..common.http import json_errors, query_date
from ..container import Container
from ..core.enums import ReportKind
from ..core.exceptions import ValidationError
from .export import XLSX_MIMETYPE, write_csv, write_workbook


def register(app: Flask, container: Container) -> None:
    def _send_workbook(tables, filename: str):
        return send_file(
            write_workbook(tables),
            mimetype=XLSX_MIMETYPE,
            as_attachment=True,
            download_name=filename,
        )

    def _stamp() -> str:
        return date.today().strftime("%Y%m%d")

    @app.route(
        "/attendance/download/<int:class_id>/<int:subject_id>",
        methods=["GET"],
        endpoint="download_subject_attendance",
    )
    @json_errors
    def download_subject_attendance(class_id: int, subject_id: int):
        batch = request.args.get("batch") or None
        tables = container.report_service.build_report(
            ReportKind.SUBJECT_DATE_GRID, class_id, subject_id=subject_id, batch_name=batch
        )
        suffix = f"_{batch}" if batch else ""
        return _send_workbook(tables, f"attendance_{class_id}_{subject_id}{suffix}.xlsx")

    @app.route("/attendance/coordinator-report/<int:class_id>", methods=["GET"], endpoint="coordinator_report")
    @json_errors
    def coordinator_report(class_id: int):
        tables = container.report_service.build_report(ReportKind.SUBJECT_OVERVIEW, class_id)
        return _send_workbook(tables, f"coordinator_report_{class_id}_{_stamp()}.xlsx")

    @app.route(
        "/attendance/coordinator-report/<int:class_id>.csv",
        methods=["GET"],
        endpoint="coordinator_report_csv",
    )
    @json_errors
    def coordinator_report_csv(class_id: int):
        (table,) = container.report_service.build_report(ReportKind.SUBJECT_OVERVIEW, class_id)
        return app.response_class(
            write_csv(table),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename=coordinator_report_{class_id}.csv"},
        )

    @app.route("/attendance/monthly-report/<int:class_id>", methods=["GET"], endpoint="monthly_report")
    @json_errors
    def monthly_report(class_id: int):
        tables = container.report_service.build_report(ReportKind.MONTHLY, class_id)
        return _send_workbook(tables, f"monthly_report_{class_id}_{_stamp()}.xlsx")

    @app.route("/attendance/range-report/<int:class_id>", methods=["GET"], endpoint="range_report")
    @json_errors
    def range_report(class_id: int):
        start = query_date("start")
        end = query_date("end")
        tables = container.report_service.build_report(ReportKind.DATE_RANGE, class_id, start=start, end=end)
        return _send_workbook(tables, f"range_report_{class_id}_{start:%Y%m%d}_{end:%Y%m%d}.xlsx")

    @app.route("/attendance/subject-sheets/<int:class_id>", methods=["GET"], endpoint="subject_sheets")
    @json_errors
    def subject_sheets(class_id: int):
        tables = container.report_service.build_report(ReportKind.SUBJECT_SHEETS, class_id)
        if not tables:
            raise ValidationError("Class has no subjects")
        return _send_workbook(tables, f"subject_sheets_{class_id}_{_stamp()}.xlsx")

    @app.route("/attendance/report/<kind>/<int:class_id>", methods=["GET"], endpoint="report_json")
    @json_errors
    def report_json(kind: str, class_id: int):
        subject_id = request.args.get("subjectId", type=int)
        tables = container.report_service.build_report(
            kind,
            class_id,
            subject_id=subject_id,
            batch_name=request.args.get("batch") or None,
            start=query_date("start"),
            end=query_date("end"),
        )
        return jsonify({"success": True, "tables": [t.to_dict() for t in tables]})

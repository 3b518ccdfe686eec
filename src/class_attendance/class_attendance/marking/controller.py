from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import json_body, json_errors
from ..common.validators import require_fields, require_int
from ..container import Container
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    @app.route("/attendance/bulk-mark", methods=["POST"], endpoint="bulk_mark")
    @json_errors
    def bulk_mark():
        data = json_body()
        records = data.get("attendanceList", data.get("attendanceRecords"))
        if not isinstance(records, list) or not records:
            raise ValidationError("attendanceList is required and must be non-empty")

        result = container.marking_service.plan_and_apply(records, mode=data.get("writeMode"))
        return jsonify(result.to_dict())

    @app.route("/attendance/quick-mark", methods=["POST"], endpoint="quick_mark")
    @json_errors
    def quick_mark():
        data = json_body()
        require_fields(data, "classId", "subjectId", "date", "rollSuffix", "mode")
        result = container.marking_service.quick_mark(
            require_int(data["classId"], "classId"),
            require_int(data["subjectId"], "subjectId"),
            str(data["rollSuffix"]),
            data["date"],
            data["mode"],
            batch_name=data.get("batch") or None,
            preview=bool(data.get("preview", False)),
            write_mode=data.get("writeMode"),
        )
        return jsonify(result.to_dict())

    @app.route("/attendance/quick-submit", methods=["POST"], endpoint="quick_submit")
    @json_errors
    def quick_submit():
        data = json_body()
        require_fields(data, "classId", "subjectId", "date", "mode")
        marked = data.get("markedStudents") or []
        if not isinstance(marked, list):
            raise ValidationError("markedStudents must be a list")

        result = container.marking_service.quick_submit(
            require_int(data["classId"], "classId"),
            require_int(data["subjectId"], "subjectId"),
            data["date"],
            marked,
            data["mode"],
            batch_name=data.get("batch") or None,
            write_mode=data.get("writeMode"),
        )
        return jsonify(result.to_dict())

    @app.route("/RemoveStudentSubAtten/<int:student_id>", methods=["PUT"], endpoint="remove_student_subject_attendance")
    @json_errors
    def remove_student_subject_attendance(student_id: int):
        data = json_body()
        require_fields(data, "subId")
        removed = container.marking_service.clear_subject_attendance(
            require_int(data["subId"], "subId"), student_id=student_id
        )
        return jsonify({"success": True, "removed": removed})

    @app.route("/RemoveAllStudentsSubAtten/<int:subject_id>", methods=["PUT"], endpoint="remove_all_subject_attendance")
    @json_errors
    def remove_all_subject_attendance(subject_id: int):
        removed = container.marking_service.clear_subject_attendance(subject_id)
        return jsonify({"success": True, "removed": removed})

    @app.route("/RemoveStudentAtten/<int:student_id>", methods=["PUT"], endpoint="remove_student_attendance")
    @json_errors
    def remove_student_attendance(student_id: int):
        removed = container.marking_service.clear_attendance(student_id=student_id)
        return jsonify({"success": True, "removed": removed})

    @app.route("/RemoveAllStudentsAtten/<int:class_id>", methods=["PUT"], endpoint="remove_class_attendance")
    @json_errors
    def remove_class_attendance(class_id: int):
        removed = container.marking_service.clear_attendance(class_id=class_id)
        return jsonify({"success": True, "removed": removed})

    @app.route("/StudentAttendance/<int:student_id>", methods=["PUT"], endpoint="student_attendance")
    @json_errors
    def student_attendance(student_id: int):
        data = json_body()
        result = container.marking_service.mark_student(student_id, data, mode=data.get("writeMode"))
        return jsonify(result.to_dict())

from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import json_errors
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/class-attendance/<int:class_id>", methods=["GET"], endpoint="class_attendance")
    @json_errors
    def class_attendance(class_id: int):
        return jsonify(container.stats_service.get_class_attendance(class_id))

    @app.route(
        "/classes/<int:class_id>/subjects/<int:subject_id>/lectures",
        methods=["GET"],
        endpoint="subject_lectures",
    )
    @json_errors
    def subject_lectures(class_id: int, subject_id: int):
        return jsonify(container.stats_service.get_lecture_summary(class_id, subject_id))

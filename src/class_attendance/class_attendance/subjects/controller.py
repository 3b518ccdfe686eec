from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import json_body, json_errors
from ..container import Container
from ..core.exceptions import ValidationError


def _subject_dict(subject) -> dict:
    return {
        "_id": subject.subject_id,
        "subName": subject.name,
        "subCode": subject.code,
        "sessions": subject.sessions,
        "isLab": subject.is_lab,
        "batches": [
            {"batchName": b.name, "students": sorted(b.member_ids)}
            for b in subject.batches
        ],
    }


def register(app: Flask, container: Container) -> None:
    @app.route("/Subject/<int:subject_id>/batches", methods=["PUT"], endpoint="assign_subject_batches")
    @json_errors
    def assign_subject_batches(subject_id: int):
        data = json_body()
        batches = data.get("batches")
        if not isinstance(batches, list):
            raise ValidationError("batches must be a list")
        subject = container.subject_service.assign_batches(subject_id, batches)
        return jsonify({"success": True, "subject": _subject_dict(subject)})

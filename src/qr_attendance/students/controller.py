from __future__ import annotations

import io

from flask import Flask, jsonify, send_file

from ..common.validators import require_non_empty
from ..container import Container
from ..core.exceptions import ValidationError
from .qr import render_student_qr


def register(app: Flask, container: Container) -> None:
    @app.route("/api/students/<school_id>/qr", methods=["GET"], endpoint="student_qr_image")
    def student_qr_image(school_id: str):
        """PNG QR code for a student's ID card."""
        try:
            key = require_non_empty(school_id, "school_id")
        except ValidationError as e:
            return jsonify({"success": False, "message": str(e)}), 400

        student = container.students.find_by_payload(key)
        if not student:
            return jsonify({"success": False, "message": "Student not found"}), 404

        png = render_student_qr(student)
        return send_file(io.BytesIO(png), mimetype="image/png", download_name=f"{student.school_id}.png")

from __future__ import annotations

from flask import Flask, jsonify, request

from ..attendance.controller import detections_from_request
from ..common.responses import current_user_id, error_response, login_required
from ..container import Container
from ..core.constants import FACE_ENROLLMENT_STEPS
from ..core.exceptions import DomainError, ValidationError


def register(app: Flask, container: Container) -> None:
    service = container.enrollment_service

    @app.route("/api/face/enroll", methods=["POST"], endpoint="face_enroll")
    @login_required
    def face_enroll():
        data = request.get_json(silent=True) or {}
        captures = data.get("captures")
        try:
            if not isinstance(captures, list):
                raise ValidationError(f"captures must be a list of {len(FACE_ENROLLMENT_STEPS)} steps")
            detections = [
                detections_from_request(container, step if isinstance(step, dict) else {"faces": step})
                for step in captures
            ]
            result = service.enroll(current_user_id(), detections)
        except DomainError as e:
            return error_response(e)

        if not result.ok:
            return error_response(result.error, failed_step=result.failed_step)
        return jsonify({"success": True, "message": "Facial recognition setup completed successfully!"})

    @app.route("/api/face/template", methods=["DELETE"], endpoint="face_template_delete")
    @login_required
    def face_template_delete():
        try:
            service.remove(current_user_id())
        except DomainError as e:
            return error_response(e)
        return jsonify({"success": True, "message": "Facial recognition data removed."})

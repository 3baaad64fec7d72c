from __future__ import annotations

from typing import List

from flask import Flask, jsonify, request

from ..biometrics.model import FaceDetection
from ..common.responses import current_user_id, error_response, login_required
from ..common.validators import optional_bool, optional_int, parse_detections, parse_position
from ..container import Container
from ..core.constants import ZERO_ELAPSED
from ..core.exceptions import DomainError
from .ticker import format_elapsed


def detections_from_request(container: Container, data: dict) -> List[FaceDetection]:
    """Browser descriptors (``faces``) or a raw camera frame (``image``)."""
    image = data.get("image")
    if image:
        return container.matcher.faces_in_frame(image)
    return parse_detections(data.get("faces"))


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    @app.route("/api/attendance/sessions", methods=["GET"], endpoint="attendance_sessions")
    @login_required
    def attendance_sessions():
        overview = service.session_overview(current_user_id())
        return jsonify(
            {
                "success": True,
                "sessions": [
                    {
                        "session_type_id": st.session_type_id,
                        "name": st.name,
                        "description": st.description,
                        "start_time": st.start_time.strftime("%H:%M"),
                        "end_time": st.end_time.strftime("%H:%M"),
                        "state": state.value,
                    }
                    for st, state in overview
                ],
            }
        )

    @app.route("/api/attendance/active", methods=["GET"], endpoint="attendance_active")
    @login_required
    def attendance_active():
        record = service.active_record(current_user_id())
        elapsed = format_elapsed(record.check_in_time, service.now()) if record else ZERO_ELAPSED
        return jsonify({"success": True, "record": record.to_dict() if record else None, "elapsed": elapsed})

    @app.route("/api/attendance/checkin", methods=["POST"], endpoint="attendance_checkin")
    @login_required
    def attendance_checkin():
        data = request.get_json(silent=True) or {}
        try:
            result = service.check_in(
                current_user_id(),
                session_type_id=optional_int(data.get("session_type_id"), "session_type_id"),
                position=parse_position(data.get("position")),
                detections=lambda: detections_from_request(container, data),
                skip_location_check=optional_bool(data.get("skip_location_check"), "skip_location_check"),
            )
        except DomainError as e:
            return error_response(e)

        if not result.ok:
            return error_response(result.error)
        return jsonify({"success": True, "message": "Check-in successful!", "record": result.record.to_dict()})

    @app.route("/api/attendance/checkout", methods=["POST"], endpoint="attendance_checkout")
    @login_required
    def attendance_checkout():
        data = request.get_json(silent=True) or {}
        try:
            result = service.check_out(
                current_user_id(),
                position=parse_position(data.get("position")),
                attendance_id=optional_int(data.get("attendance_id"), "attendance_id"),
            )
        except DomainError as e:
            return error_response(e)

        if not result.ok:
            return error_response(result.error)
        return jsonify({"success": True, "message": "Check-out successful!", "record": result.record.to_dict()})

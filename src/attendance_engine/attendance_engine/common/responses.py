from __future__ import annotations

from functools import wraps

from flask import jsonify, session

from ..core.exceptions import DomainError, PersistenceError


def error_response(error: DomainError, **extra):
    status = 503 if isinstance(error, PersistenceError) else 400
    body = {"success": False, "code": error.code.value, "message": error.message, **extra}
    if error.details:
        body["details"] = error.details
    return jsonify(body), status


def login_required(view):
    """JSON variant: the user id is put in the session by the login flow."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"success": False, "code": "UNAUTHENTICATED", "message": "Please log in to continue."}), 401
        return view(*args, **kwargs)

    return wrapper


def current_user_id() -> int:
    return int(session["user_id"])

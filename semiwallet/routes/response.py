from flask import abort, current_app, jsonify
from flask_jwt_extended import get_jwt_identity


def success(data=None, status_code=200):
    return jsonify({"data": data, "message": ""}), status_code


def error(message, status_code=400):
    return jsonify({"message": message}), status_code


def get_engine():
    return current_app.extensions["reconciliation_engine"]


def current_user_id() -> int:
    """The JWT identity is the user id as a string."""
    try:
        return int(get_jwt_identity())
    except (TypeError, ValueError):
        abort(401)

# semiwallet/error_handlers.py
import logging

from flask import jsonify, request
from werkzeug.exceptions import HTTPException

from semiwallet.errors import DomainError, UnexpectedError

logger = logging.getLogger(__name__)


def register_error_handlers(app):
    """Register all error handlers for the application"""

    @app.errorhandler(UnexpectedError)
    def handle_unexpected_error(e):
        logger.error(
            f"Unexpected error: {e.message} - Path: {request.path}",
            extra={"cause": repr(e.cause) if e.cause else None},
            exc_info=e.cause or e,
        )
        return jsonify({"message": "internal server error"}), e.status_code

    @app.errorhandler(DomainError)
    def handle_domain_error(e):
        logger.warning(
            f"{type(e).__name__}: {e.message} - Path: {request.path}",
            extra={"status_code": e.status_code},
        )
        return jsonify({"message": e.message}), e.status_code

    @app.errorhandler(400)
    def bad_request(e):
        return jsonify({"message": "bad request"}), 400

    @app.errorhandler(401)
    def unauthorized(e):
        logger.warning(f"Unauthorized: {request.path}")
        return jsonify({"message": "unauthorized"}), 401

    @app.errorhandler(404)
    def not_found(e):
        logger.info(f"Not found: {request.path}")
        return jsonify({"message": "not found"}), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        logger.warning(f"Method not allowed: {request.method} {request.path}")
        return jsonify({"message": f"method {request.method} not allowed"}), 405

    @app.errorhandler(500)
    def internal_error(e):
        logger.error(f"Internal server error: {str(e)} - Path: {request.path}", exc_info=True)
        return jsonify({"message": "internal server error"}), 500

    @app.errorhandler(Exception)
    def handle_unhandled_exception(e):
        # let werkzeug HTTP exceptions keep their own status
        if isinstance(e, HTTPException):
            return jsonify({"message": e.description}), e.code
        logger.error(f"Unhandled exception: {str(e)} - Path: {request.path}", exc_info=True)
        return jsonify({"message": "internal server error"}), 500

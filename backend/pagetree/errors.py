from flask import current_app, jsonify
from werkzeug.exceptions import HTTPException

from pagetree.domain.invariants.exceptions import CMSError


def register_error_handlers(app):
    @app.errorhandler(CMSError)
    def handle_cms_error(error):
        response = jsonify({
            "error": type(error).__name__,
            "message": str(error)
        })
        response.status_code = error.status_code
        return response

    @app.errorhandler(PermissionError)
    def handle_permission_error(error):
        response = jsonify({
            "error": "PermissionDenied",
            "message": str(error) or "Insufficient permissions"
        })
        response.status_code = 403
        return response

    @app.errorhandler(HTTPException)
    def handle_http_exception(error):
        response = jsonify({
            "error": error.name,
            "message": error.description
        })
        response.status_code = error.code
        return response

    @app.errorhandler(ValueError)
    def handle_value_error(error):
        current_app.logger.warning(f"Rejected request: {error}")
        response = jsonify({
            "error": "ValidationError",
            "message": str(error)
        })
        response.status_code = 400
        return response

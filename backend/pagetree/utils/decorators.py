from functools import wraps
from flask import g, jsonify, request
from flask_jwt_extended import get_jwt_identity

from pagetree.extensions import db
from pagetree.models.user import User
from pagetree.application.cms.access import has_access


def user_required(fn):
    """Load the user behind the JWT into g.current_user."""
    @wraps(fn)
    def wrapper(*args, **kwargs):
        identity = get_jwt_identity()
        user = db.session.get(User, int(identity)) if identity else None
        if not user:
            return jsonify({"error": "Unknown user"}), 401

        g.current_user = user
        return fn(*args, **kwargs)
    return wrapper


def admin_required(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if g.current_user.level < 1:
            return jsonify({"error": "Insufficient permissions"}), 403
        return fn(*args, **kwargs)
    return wrapper


def page_access_required(level, page_arg="page_id", body_field=None):
    """
    Require ``level`` access to the page named by the ``page_arg`` view
    argument, or by ``body_field`` of the JSON body when given.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            if body_field:
                data = request.get_json(silent=True) or {}
                page = data.get(body_field, 0)
            else:
                page = kwargs[page_arg]

            if not has_access(g.current_user, page, level):
                return jsonify({"error": "Insufficient permissions"}), 403

            return fn(*args, **kwargs)
        return wrapper
    return decorator

from flask import g, request, jsonify
from flask_jwt_extended import jwt_required
from pagetree.extensions import db
from pagetree.models.page_revision import PageRevision
from pagetree.models.user import PUBLISHER, EDITOR
from pagetree.domain.invariants.exceptions import NotFoundError
from pagetree.application.cms.access import has_access
from pagetree.application.cms.revisions import (
    delete_revision,
    get_revision,
    list_revisions,
    restore_revision,
    save_revision,
)
from pagetree.normalizers.page import normalize_page, normalize_revision
from pagetree.utils.decorators import page_access_required, user_required
from . import v1_bp


def _revision_page(revision_id, level):
    """Page id of a revision, checking the current user's access to it."""
    revision = db.session.get(PageRevision, revision_id)
    if not revision:
        raise NotFoundError("Revision not found")
    if not has_access(g.current_user, revision.page_id, level):
        raise PermissionError("Insufficient permissions")
    return revision.page_id


@v1_bp.route("/pages/<int:page_id>/revisions", methods=["GET"])
@jwt_required()
@user_required
@page_access_required(EDITOR)
def list_revisions_view(page_id):
    saved = request.args.get("saved")
    if saved is not None:
        saved = saved in ("1", "true")
    revisions = list_revisions(page_id, saved=saved)
    return jsonify({"items": [normalize_revision(revision) for revision in revisions]}), 200


@v1_bp.route("/revisions/<int:revision_id>", methods=["GET"])
@jwt_required()
@user_required
def get_revision_view(revision_id):
    _revision_page(revision_id, EDITOR)
    return jsonify(normalize_page(get_revision(revision_id))), 200


@v1_bp.route("/revisions/<int:revision_id>/save", methods=["POST"])
@jwt_required()
@user_required
def save_revision_view(revision_id):
    _revision_page(revision_id, EDITOR)
    data = request.get_json(silent=True) or {}

    revision = save_revision(
        revision_id=revision_id,
        description=data.get("description", ""),
        actor_id=g.current_user.id,
    )
    return jsonify(normalize_revision(revision)), 200


@v1_bp.route("/revisions/<int:revision_id>/restore", methods=["POST"])
@jwt_required()
@user_required
def restore_revision_view(revision_id):
    _revision_page(revision_id, PUBLISHER)
    page = restore_revision(revision_id=revision_id, actor_id=g.current_user.id)
    return jsonify(normalize_page(page, admin=True)), 200


@v1_bp.route("/revisions/<int:revision_id>", methods=["DELETE"])
@jwt_required()
@user_required
def delete_revision_view(revision_id):
    page_id = _revision_page(revision_id, PUBLISHER)
    delete_revision(page_id=page_id, revision_id=revision_id, actor_id=g.current_user.id)
    return jsonify({"message": "Revision deleted"}), 200

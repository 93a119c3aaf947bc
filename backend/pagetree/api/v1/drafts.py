from flask import g, request, jsonify
from flask_jwt_extended import jwt_required
from pagetree.models.user import PUBLISHER, EDITOR
from pagetree.domain.invariants.exceptions import NotFoundError
from pagetree.application.cms.change_requests import (
    change_exists,
    copy_to_pending,
    create_change_request,
    create_pending_page,
    delete_draft,
)
from pagetree.application.cms.publish_page import get_page_draft, publish_draft
from pagetree.normalizers.page import normalize_page
from pagetree.utils.decorators import page_access_required, user_required
from pagetree.utils.tags import tag_ids_for
from . import v1_bp


@v1_bp.route("/pages/<page_ref>/draft", methods=["GET"])
@jwt_required()
@user_required
@page_access_required(EDITOR, page_arg="page_ref")
def get_draft_view(page_ref):
    draft = get_page_draft(page_ref)
    if draft is None:
        raise NotFoundError("Page not found")
    return jsonify(normalize_page(draft)), 200


@v1_bp.route("/pages/<page_ref>/draft", methods=["PUT"])
@jwt_required()
@user_required
@page_access_required(EDITOR, page_arg="page_ref")
def save_draft_view(page_ref):
    data = request.get_json(silent=True) or {}

    change_id = create_change_request(
        page=page_ref,
        changes=data.get("changes") or {},
        tags=data.get("tags"),
        open_graph=data.get("open_graph"),
        actor_id=g.current_user.id,
    )
    return jsonify({"change_id": change_id}), 200


@v1_bp.route("/pages/<page_ref>/draft", methods=["DELETE"])
@jwt_required()
@user_required
@page_access_required(EDITOR, page_arg="page_ref")
def delete_draft_view(page_ref):
    delete_draft(page=page_ref, actor_id=g.current_user.id)
    return jsonify({"message": "Draft deleted"}), 200


@v1_bp.route("/pages/<page_ref>/draft/exists", methods=["GET"])
@jwt_required()
@user_required
@page_access_required(EDITOR, page_arg="page_ref")
def draft_exists_view(page_ref):
    return jsonify({"exists": change_exists(page_ref)}), 200


@v1_bp.route("/pages/<page_ref>/publish", methods=["POST"])
@jwt_required()
@user_required
@page_access_required(PUBLISHER, page_arg="page_ref")
def publish_draft_view(page_ref):
    page = publish_draft(page=page_ref, actor_id=g.current_user.id)
    return jsonify(normalize_page(page, admin=True, tags=tag_ids_for(page.id))), 200


@v1_bp.route("/pending-pages", methods=["POST"])
@jwt_required()
@user_required
@page_access_required(EDITOR, body_field="parent")
def create_pending_page_view():
    data = request.get_json(silent=True) or {}

    reference = create_pending_page(
        parent=int(data.get("parent", 0)),
        changes=data.get("changes") or {},
        tags=data.get("tags"),
        open_graph=data.get("open_graph"),
        actor_id=g.current_user.id,
    )
    return jsonify({"id": reference}), 201


@v1_bp.route("/pages/<int:page_id>/copy", methods=["POST"])
@jwt_required()
@user_required
@page_access_required(EDITOR)
def copy_page_view(page_id):
    reference = copy_to_pending(page_id=page_id, actor_id=g.current_user.id)
    return jsonify({"id": reference}), 201

# pagetree/api/v1/pages.py
from flask import g, request, jsonify
from flask_jwt_extended import jwt_required
from pagetree.extensions import db
from pagetree.models.page import Page
from pagetree.models.user import PUBLISHER, EDITOR
from pagetree.domain.diff import normalize_changes
from pagetree.domain.invariants.exceptions import NotFoundError
from pagetree.application.cms.access import has_access
from pagetree.application.cms.archive_page import archive_page, unarchive_page
from pagetree.application.cms.create_page import create_page
from pagetree.application.cms.delete_page import delete_page
from pagetree.application.cms.move_page import move_page, update_position
from pagetree.application.cms.queries import (
    all_by_tags,
    audit_admin_links,
    get_alerts_for_user,
    get_archived_children,
    get_children,
    get_hidden_children,
    get_lineage,
    get_pending_children,
    get_visible_children,
    search,
)
from pagetree.application.cms.seo import get_seo_rating
from pagetree.application.cms.update_page import update_page
from pagetree.models.base import utcnow
from pagetree.normalizers.page import normalize_page
from pagetree.utils.decorators import admin_required, page_access_required, user_required
from pagetree.utils.optimistic_lock import enforce_optimistic_lock
from pagetree.utils.tags import tag_ids_for
from . import v1_bp

CHILD_LISTS = {
    "all": get_children,
    "visible": get_visible_children,
    "hidden": get_hidden_children,
    "archived": get_archived_children,
}


def _page_fields(data):
    """Page columns from a request body, in the shape create/update take."""
    if not data.get("nav_title"):
        raise ValueError("nav_title is required")

    fields = normalize_changes(data).as_dict()
    fields.setdefault("parent", 0)
    fields.setdefault("route", None)
    fields.setdefault("new_window", False)
    fields.setdefault("content", {})
    fields.setdefault("max_age", 0)
    for name in ("title", "meta_description", "template", "external"):
        fields.setdefault(name, "")
    for name in ("publish_at", "expire_at"):
        fields.setdefault(name, None)
    return fields


def _get_page(page_id):
    page = db.session.get(Page, page_id)
    if not page:
        raise NotFoundError("Page not found")
    return page


# ------------------------
# Pages
# ------------------------

@v1_bp.route("/pages", methods=["POST"])
@jwt_required()
@user_required
@page_access_required(PUBLISHER, body_field="parent")
def create_page_view():
    data = request.get_json(silent=True) or {}

    page = create_page(
        actor_id=g.current_user.id,
        tags=data.get("tags"),
        open_graph=data.get("open_graph"),
        **_page_fields(data),
    )

    return jsonify(normalize_page(page, admin=True, tags=tag_ids_for(page.id))), 201


@v1_bp.route("/pages/<int:page_id>", methods=["GET"])
@jwt_required()
@user_required
@page_access_required(EDITOR)
def get_page_view(page_id):
    page = _get_page(page_id)
    return jsonify(normalize_page(page, admin=True, tags=tag_ids_for(page.id)))


@v1_bp.route("/pages/<int:page_id>", methods=["PUT"])
@jwt_required()
@user_required
@page_access_required(PUBLISHER)
def update_page_view(page_id):
    page = _get_page(page_id)

    # -----------------------
    # Optimistic Locking Check
    # -----------------------
    enforce_optimistic_lock(page)

    data = request.get_json(silent=True) or {}
    fields = _page_fields(data)
    if fields["parent"] != page.parent and not has_access(g.current_user, fields["parent"], PUBLISHER):
        raise PermissionError("You cannot publish beneath the new parent")

    page = update_page(
        page_id=page_id,
        actor_id=g.current_user.id,
        tags=data.get("tags"),
        open_graph=data.get("open_graph"),
        **fields,
    )

    return jsonify(normalize_page(page, admin=True, tags=tag_ids_for(page.id))), 200


@v1_bp.route("/pages/<int:page_id>", methods=["DELETE"])
@jwt_required()
@user_required
@page_access_required(PUBLISHER)
def delete_page_view(page_id):
    deleted = delete_page(page_id=page_id, actor_id=g.current_user.id)
    return jsonify({"deleted": deleted}), 200


@v1_bp.route("/pages/<int:page_id>/archive", methods=["POST"])
@jwt_required()
@user_required
@page_access_required(PUBLISHER)
def archive_page_view(page_id):
    inherited = archive_page(page_id=page_id, actor_id=g.current_user.id)
    return jsonify({"id": page_id, "archived": True, "inherited": inherited}), 200


@v1_bp.route("/pages/<int:page_id>/unarchive", methods=["POST"])
@jwt_required()
@user_required
@page_access_required(PUBLISHER)
def unarchive_page_view(page_id):
    restored = unarchive_page(page_id=page_id, actor_id=g.current_user.id)
    return jsonify({"id": page_id, "archived": False, "restored": restored}), 200


@v1_bp.route("/pages/<int:page_id>/move", methods=["POST"])
@jwt_required()
@user_required
@page_access_required(PUBLISHER)
@page_access_required(PUBLISHER, body_field="parent")
def move_page_view(page_id):
    data = request.get_json(silent=True) or {}
    if "parent" not in data:
        raise ValueError("parent is required")

    page = move_page(page_id=page_id, parent=int(data["parent"]), actor_id=g.current_user.id)
    return jsonify(normalize_page(page, admin=True)), 200


@v1_bp.route("/pages/<int:page_id>/position", methods=["POST"])
@jwt_required()
@user_required
@page_access_required(PUBLISHER)
def update_position_view(page_id):
    data = request.get_json(silent=True) or {}
    page = update_position(
        page_id=page_id,
        position=int(data.get("position", 0)),
        actor_id=g.current_user.id,
    )
    return jsonify({"id": page.id, "position": page.position}), 200


# ------------------------
# Tree
# ------------------------

@v1_bp.route("/pages/<int:page_id>/children", methods=["GET"])
@jwt_required()
@user_required
@page_access_required(EDITOR)
def list_children(page_id):
    kind = request.args.get("kind", "all")
    if kind not in CHILD_LISTS:
        raise ValueError(f"Unknown child list '{kind}'")

    children = CHILD_LISTS[kind](page_id)
    response = {"items": [normalize_page(child) for child in children]}

    if request.args.get("pending", "0") in ("1", "true"):
        response["pending"] = get_pending_children(page_id)

    return jsonify(response), 200


@v1_bp.route("/pages/<int:page_id>/lineage", methods=["GET"])
@jwt_required()
@user_required
@page_access_required(EDITOR)
def lineage_view(page_id):
    _get_page(page_id)
    return jsonify({"id": page_id, "lineage": get_lineage(page_id)}), 200


@v1_bp.route("/pages/search", methods=["GET"])
@jwt_required()
@user_required
def search_view():
    limit = min(int(request.args.get("limit", 10)), 100)
    pages = search(request.args.get("q", ""), max_results=limit)
    return jsonify({"items": [normalize_page(page) for page in pages]}), 200


@v1_bp.route("/pages/tagged", methods=["GET"])
@jwt_required()
@user_required
def tagged_view():
    raw = request.args.get("tags", "")
    tag_ids = [int(tag) for tag in raw.split(",") if tag.strip()]
    return jsonify({"items": [normalize_page(page) for page in all_by_tags(tag_ids)]}), 200


@v1_bp.route("/pages/admin-links", methods=["GET"])
@jwt_required()
@user_required
@admin_required
def admin_links_view():
    return jsonify({"items": [normalize_page(page) for page in audit_admin_links()]}), 200


@v1_bp.route("/alerts", methods=["GET"])
@jwt_required()
@user_required
def alerts_view():
    return jsonify({"items": get_alerts_for_user(g.current_user.id)}), 200


# ------------------------
# SEO
# ------------------------

@v1_bp.route("/seo/rating", methods=["POST"])
@jwt_required()
@user_required
def seo_rating_view():
    data = request.get_json(silent=True) or {}
    page_id = data.get("id")

    rating = get_seo_rating(
        int(page_id) if page_id not in (None, "") else None,
        data.get("template"),
        data.get("title"),
        data.get("meta_description"),
        data.get("content") or {},
        utcnow(),
    )
    return jsonify(rating.to_dict()), 200

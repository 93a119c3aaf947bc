from flask import request, jsonify
from flask_jwt_extended import jwt_required
from pagetree.utils.decorators import user_required, admin_required
from pagetree.models.audit_log import AuditLog
from pagetree.normalizers.audit import normalize_audit_log
from sqlalchemy import or_, and_
from datetime import datetime
from . import v1_bp


@v1_bp.route("/audit", methods=["GET"])
@jwt_required()
@user_required
@admin_required
def list_audit_logs():
    # Cursor Pagination
    limit = min(int(request.args.get("limit", 20)), 100)
    cursor = request.args.get("cursor")

    query = AuditLog.query

    # Optional filters
    if table := request.args.get("table"):
        query = query.filter(AuditLog.table == table)

    if entry := request.args.get("entry"):
        query = query.filter(AuditLog.entry == entry)

    if user_id := request.args.get("user_id"):
        query = query.filter(AuditLog.user_id == int(user_id))

    # Cursor parsing
    if cursor:
        try:
            ts_str, last_id = cursor.split("|")
            cursor_ts = datetime.fromisoformat(ts_str)
            last_id = int(last_id)
        except ValueError:
            return jsonify({"error": "Invalid cursor format"}), 400

        query = query.filter(
            or_(
                AuditLog.created_at < cursor_ts,
                and_(
                    AuditLog.created_at == cursor_ts,
                    AuditLog.id < last_id
                )
            )
        )

    logs = (
        query.order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
        .limit(limit + 1)   # Fetch extra row to detect "has_more"
        .all()
    )

    has_more = len(logs) > limit
    logs = logs[:limit]

    next_cursor = None
    if has_more:
        last = logs[-1]
        next_cursor = f"{last.created_at.isoformat()}|{last.id}"

    return jsonify({
        "data": [normalize_audit_log(log) for log in logs],
        "meta": {
            "next_cursor": next_cursor,
            "has_more": has_more,
        }
    }), 200

"""
Read-side lookups over the page tree.
"""
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Sequence

from flask import current_app
from sqlalchemy import Integer, and_, cast, func, or_

from pagetree.extensions import db
from pagetree.models.base import utcnow
from pagetree.models.page import Page, HOMEPAGE_ID
from pagetree.models.pending_change import PendingChange
from pagetree.models.tag import TagRelation
from pagetree.models.user import User
from pagetree.domain.invariants.exceptions import InvariantViolation, NotFoundError

SEARCH_FIELDS = ("title", "nav_title", "path")


def get_lineage(page_id: int) -> List[int]:
    """
    Ancestor ids of a page, nearest first, stopping below the homepage.
    """
    lineage: List[int] = []
    seen = {page_id}
    current = db.session.query(Page.parent).filter(Page.id == page_id).scalar()

    while current is not None and current > HOMEPAGE_ID:
        if current in seen:
            raise InvariantViolation(f"Page {page_id} is part of a parent cycle")
        seen.add(current)
        lineage.append(current)
        current = db.session.query(Page.parent).filter(Page.id == current).scalar()

    return lineage


def get_children(page_id: int, *, in_nav: Optional[bool] = None) -> List[Page]:
    query = Page.query.filter(Page.parent == page_id, Page.archived.is_(False))
    if in_nav is not None:
        query = query.filter(Page.in_nav.is_(in_nav))
    return query.order_by(Page.nav_title.asc(), Page.id.asc()).all()


def get_visible_children(page_id: int) -> List[Page]:
    """Children shown in navigation and currently live."""
    today = utcnow().date()
    return (
        Page.query
        .filter(
            Page.parent == page_id,
            Page.in_nav.is_(True),
            Page.archived.is_(False),
            or_(Page.publish_at.is_(None), Page.publish_at <= today),
            or_(Page.expire_at.is_(None), Page.expire_at > today),
        )
        .order_by(Page.position.desc(), Page.id.asc())
        .all()
    )


def get_hidden_children(page_id: int) -> List[Page]:
    return get_children(page_id, in_nav=False)


def get_archived_children(page_id: int) -> List[Page]:
    return (
        Page.query
        .filter(Page.parent == page_id, Page.archived.is_(True))
        .order_by(Page.position.desc(), Page.id.asc())
        .all()
    )


def get_pending_children(parent: int, *, in_nav: Optional[bool] = True) -> List[Dict[str, Any]]:
    """Pages drafted beneath ``parent`` that do not exist yet, by nav title."""
    pending = PendingChange.query.filter(
        PendingChange.table == "pages",
        PendingChange.item_id.is_(None),
        PendingChange.pending_page_parent == parent,
    ).all()

    children = []
    for change in pending:
        diff = change.diff
        if in_nav is not None and bool(diff.in_nav) != in_nav:
            continue
        children.append({
            "id": change.reference,
            "nav_title": diff.nav_title or "",
            "title": diff.title or "",
            "template": diff.template or "",
            "user_id": change.user_id,
            "date": change.date,
        })

    return sorted(children, key=lambda child: child["nav_title"].lower())


def all_ids() -> List[int]:
    rows = db.session.query(Page.id).filter(Page.archived.is_(False)).order_by(Page.id).all()
    return [row.id for row in rows]


def all_by_tags(tag_ids: Sequence[int]) -> List[Page]:
    """
    Pages carrying any of ``tag_ids``, the best-matching first.
    """
    tag_ids = [int(tag_id) for tag_id in tag_ids or []]
    if not tag_ids:
        return []

    matches = func.count(TagRelation.id)
    rows = (
        db.session.query(TagRelation.entry, matches)
        .filter(TagRelation.table == "pages", TagRelation.tag_id.in_(tag_ids))
        .group_by(TagRelation.entry)
        .order_by(matches.desc(), cast(TagRelation.entry, Integer).asc())
        .all()
    )

    ranked = [int(entry) for entry, _ in rows]
    if not ranked:
        return []

    pages = {page.id: page for page in Page.query.filter(Page.id.in_(ranked)).all()}
    return [pages[page_id] for page_id in ranked if page_id in pages]


def search(query: str, fields: Iterable[str] = SEARCH_FIELDS, max_results: int = 10) -> List[Page]:
    """
    Every whitespace-separated term must appear in at least one field.
    """
    terms = [term for term in (query or "").split() if term]
    if not terms:
        return []

    columns = []
    for name in fields:
        if name not in SEARCH_FIELDS + ("meta_description", "route"):
            raise ValueError(f"Cannot search on '{name}'")
        columns.append(getattr(Page, name))

    conditions = [
        or_(*[column.ilike(f"%{_escape_like(term)}%", escape="\\") for column in columns])
        for term in terms
    ]

    return (
        Page.query
        .filter(Page.archived.is_(False), and_(*conditions))
        .order_by(Page.nav_title.asc())
        .limit(max_results)
        .all()
    )


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def get_alerts_for_user(user_id: int, *, today: Optional[date] = None) -> List[Dict[str, Any]]:
    """
    Pages past their max age within the subtrees a user follows,
    most overdue first.
    """
    user = db.session.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")

    followed = user.alerts or []
    if not followed:
        return []

    query = Page.query.filter(Page.max_age > 0, Page.archived.is_(False))

    if not user.follows_whole_tree():
        paths = (
            db.session.query(Page.path)
            .filter(Page.id.in_([int(page_id) for page_id in followed]))
            .all()
        )
        scopes = []
        for (path,) in paths:
            if path == "":
                scopes = None
                break
            scopes.append(or_(Page.path == path, Page.path.like(f"{path}/%")))
        if scopes == []:
            return []
        if scopes:
            query = query.filter(or_(*scopes))

    today = today or utcnow().date()
    alerts = []
    for page in query.all():
        age = (today - page.updated_at.date()).days
        if age > page.max_age:
            alerts.append({
                "id": page.id,
                "nav_title": page.nav_title,
                "path": page.path,
                "max_age": page.max_age,
                "current_age": age,
            })

    return sorted(alerts, key=lambda alert: alert["current_age"], reverse=True)


def audit_admin_links() -> List[Page]:
    """Pages whose content links back into the admin area."""
    admin_root = current_app.config.get("ADMIN_ROOT")
    if not admin_root:
        return []

    needles = [admin_root]
    # content may store site links with the {wwwroot} placeholder
    www_root = current_app.config.get("WWW_ROOT")
    if www_root and admin_root.startswith(www_root):
        needles.append("{wwwroot}" + admin_root[len(www_root):])

    return [
        page for page in Page.query.order_by(Page.id).all()
        if any(_contains(page.content, needle) for needle in needles)
    ]


def _contains(value, needle: str) -> bool:
    if isinstance(value, str):
        return needle in value
    if isinstance(value, dict):
        return any(_contains(item, needle) for item in value.values())
    if isinstance(value, (list, tuple)):
        return any(_contains(item, needle) for item in value)
    return False

"""
Route and path resolution for pages.

A route is a single URL segment, unique among the children of one parent.
A path joins the routes from the top of the tree down to a page.
"""
import os
from typing import List, Optional

from flask import current_app
from slugify import slugify

from pagetree.extensions import db
from pagetree.domain.invariants.exceptions import ConflictError, InvariantViolation, NotFoundError
from pagetree.models.page import Page, HOMEPAGE_ID


def urlify(text: Optional[str]) -> str:
    return slugify(text or "")


def reserved_routes() -> List[str]:
    return list(current_app.config.get("RESERVED_ROUTES", []))


def shadowed_by_site_directory(route: str) -> bool:
    site_root = current_app.config.get("SITE_ROOT")
    if not site_root or not route:
        return False
    return os.path.isdir(os.path.join(site_root, route))


def sibling_has_route(route: str, parent: int, exclude_id: Optional[int] = None) -> bool:
    query = Page.query.filter(Page.parent == parent, Page.route == route)
    if exclude_id is not None:
        query = query.filter(Page.id != exclude_id)
    return db.session.query(query.exists()).scalar()


def route_conflicts(route: str, parent: int, exclude_id: Optional[int] = None) -> bool:
    if parent == HOMEPAGE_ID:
        if route in reserved_routes() or shadowed_by_site_directory(route):
            return True
    return sibling_has_route(route, parent, exclude_id)


def unique_route(route: str, parent: int, exclude_id: Optional[int] = None) -> str:
    """
    Append -2, -3, ... to ``route`` until nothing under ``parent`` uses it.

    Top-level routes also avoid reserved router names and directories in
    the site root. A route that is already free comes back unchanged.
    """
    max_length = current_app.config.get("ROUTE_MAX_LENGTH", 250)
    limit = current_app.config.get("ROUTE_SUFFIX_LIMIT", 1000)

    original = route[:max_length]
    candidate = original
    suffix = 2

    while route_conflicts(candidate, parent, exclude_id):
        if suffix > limit:
            raise ConflictError(
                f"Could not find a free route for '{original}' after {limit} attempts"
            )
        tail = f"-{suffix}"
        candidate = original[:max_length - len(tail)] + tail
        suffix += 1

    if candidate != original:
        current_app.logger.debug(
            "Route '%s' taken under parent %s, using '%s'", original, parent, candidate
        )
    return candidate


def regenerate_path(page_id: int) -> str:
    """
    Walk parent links from ``page_id`` up to the top level and join the
    routes. The homepage and anything above it contribute nothing.
    """
    segments = []
    seen = set()
    current = page_id

    while current is not None and current > HOMEPAGE_ID:
        if current in seen:
            raise InvariantViolation(f"Page {page_id} is part of a parent cycle")
        seen.add(current)

        row = db.session.query(Page.route, Page.parent).filter(Page.id == current).first()
        if row is None:
            raise NotFoundError(f"Page {current} not found")

        segments.append(row.route)
        current = row.parent

    return "/".join(reversed(segments))


def join_path(parent_path: str, route: str) -> str:
    return f"{parent_path}/{route}" if parent_path else route


def path_under(parent: int, route: str) -> str:
    """Path a page with ``route`` would have beneath ``parent``."""
    if parent is None or parent <= HOMEPAGE_ID:
        return route
    return join_path(regenerate_path(parent), route)

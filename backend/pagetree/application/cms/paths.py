from typing import List, Optional

from flask import current_app

from pagetree.extensions import db
from pagetree.models.page import Page, ROOT_ID
from pagetree.models.route_history import RouteHistory
from pagetree.domain.invariants.exceptions import ValidationError
from pagetree.utils.audit import log_action
from pagetree.utils.routes import join_path, path_under, unique_route, urlify


def record_route_change(old_path: str, new_path: str) -> None:
    """
    Point ``old_path`` at ``new_path`` for redirects.

    Any history for either path is replaced so there is never more than one
    redirect from a path, and a path that is live again no longer redirects.
    """
    RouteHistory.query.filter(
        RouteHistory.old_route.in_([new_path, old_path])
    ).delete(synchronize_session=False)

    history = RouteHistory()
    history.old_route = old_path
    history.new_route = new_path
    db.session.add(history)


def resolve_route_and_path(page: Page, old_path: Optional[str], actor_id: Optional[int]) -> bool:
    """
    Make page.route unique under its parent, recompute page.path and
    carry a path change down the subtree.

    Returns True when the path changed.
    """
    if page.is_homepage:
        page.route = ""
        page.parent = ROOT_ID
        page.path = ""
        return False

    max_length = current_app.config.get("ROUTE_MAX_LENGTH", 250)
    route = urlify(page.route or page.nav_title)[:max_length]
    if not route:
        raise ValidationError("A route could not be generated for this page.")

    page.route = unique_route(route, page.parent, exclude_id=page.id)
    page.path = path_under(page.parent, page.route)

    if old_path is None or page.path == old_path:
        return False

    db.session.flush()
    update_children_paths(page.id, page.path, actor_id=actor_id)
    record_route_change(old_path, page.path)
    current_app.logger.info(f"Page {page.id} moved from '{old_path}' to '{page.path}'")
    return True


def update_children_paths(page_id: int, path: str, *, actor_id: Optional[int] = None) -> List[int]:
    """
    Recompute the stored path of every descendant of ``page_id``.

    Walks the subtree with an explicit worklist. A branch stops as soon as
    a child's path is already correct. Returns the ids that changed.
    """
    changed: List[int] = []
    seen = {page_id}
    worklist = [(page_id, path)]

    while worklist:
        parent_id, parent_path = worklist.pop()

        children = Page.query.filter(Page.parent == parent_id).order_by(Page.id).all()
        for child in children:
            if child.id in seen:
                current_app.logger.warning(f"Page {child.id} reached twice while updating paths")
                continue
            seen.add(child.id)

            new_path = join_path(parent_path, child.route)
            if child.path == new_path:
                continue

            record_route_change(child.path, new_path)
            child.path = new_path
            changed.append(child.id)

            log_action(
                table="pages",
                entity_id=child.id,
                action="update",
                description="inherited path change",
                user_id=actor_id,
            )
            worklist.append((child.id, new_path))

    return changed

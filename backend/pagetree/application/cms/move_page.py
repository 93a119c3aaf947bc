from flask import current_app

from pagetree.extensions import db
from pagetree.models.page import Page, HOMEPAGE_ID
from pagetree.domain.invariants.exceptions import NotFoundError, ValidationError
from pagetree.domain.invariants.page import assert_page, assert_not_own_ancestor
from pagetree.signals import navigation_cache_cleared, page_uncached
from pagetree.utils.audit import log_action
from pagetree.utils.transaction import transactional
from .paths import resolve_route_and_path
from .queries import get_lineage


def move_page(*, page_id: int, parent: int, actor_id: int) -> Page:
    """
    Re-parent a page. Its route is re-resolved under the new parent and
    the whole subtree follows it to the new path.
    """
    if page_id == HOMEPAGE_ID:
        raise ValidationError("The homepage cannot be moved")

    page = db.session.get(Page, page_id)
    if not page:
        raise NotFoundError("Page not found")

    parent = int(parent)
    if parent != HOMEPAGE_ID and db.session.get(Page, parent) is None:
        raise NotFoundError("Parent page not found")
    if parent == page.parent:
        return page

    assert_not_own_ancestor(page.id, parent, get_lineage(parent))

    old_path = page.path
    with transactional():
        page.parent = parent
        resolve_route_and_path(page, old_path, actor_id)
        assert_page(page)

        log_action(
            table="pages",
            entity_id=page.id,
            action="update",
            description="moved to another parent",
            user_id=actor_id,
        )

    app = current_app._get_current_object()
    page_uncached.send(app, path=old_path)
    navigation_cache_cleared.send(app)
    return page


def update_position(*, page_id: int, position: int, actor_id: int) -> Page:
    page = db.session.get(Page, page_id)
    if not page:
        raise NotFoundError("Page not found")

    with transactional():
        page.position = int(position)

        log_action(
            table="pages",
            entity_id=page.id,
            action="update",
            description="changed position",
            user_id=actor_id,
        )

    navigation_cache_cleared.send(current_app._get_current_object())
    return page

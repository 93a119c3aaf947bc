from typing import List, Optional

from flask import current_app

from pagetree.extensions import db
from pagetree.models.page import Page, HOMEPAGE_ID
from pagetree.models.pending_change import PendingChange
from pagetree.domain.invariants.exceptions import NotFoundError, ValidationError
from pagetree.signals import navigation_cache_cleared, page_uncached, sitemap_changed
from pagetree.utils.audit import log_action
from pagetree.utils.tags import clear_tags
from pagetree.utils.transaction import transactional


def _remove(page: Page) -> None:
    """Delete a page row with its drafts, tags and revisions."""
    PendingChange.query.filter_by(table="pages", item_id=page.id).delete(
        synchronize_session=False
    )
    clear_tags(page.id)
    db.session.delete(page)


def delete_children(page_id: int, actor_id: Optional[int] = None) -> List[Page]:
    """
    Delete every descendant of a page, deepest first.

    Returns the deleted pages in the order they were removed.
    """
    order: List[Page] = []
    seen = {page_id}
    worklist = [page_id]

    # a page always lands in ``order`` before any of its descendants
    while worklist:
        current = worklist.pop()
        for child in Page.query.filter(Page.parent == current).order_by(Page.id).all():
            if child.id in seen:
                current_app.logger.warning(f"Page {child.id} reached twice while deleting")
                continue
            seen.add(child.id)
            order.append(child)
            worklist.append(child.id)

    deleted = list(reversed(order))
    for child in deleted:
        log_action(
            table="pages",
            entity_id=child.id,
            action="delete",
            description="inherited deletion from parent",
            user_id=actor_id,
        )
        _remove(child)

    return deleted


def delete_page(
    *,
    page_id: int,
    actor_id: int,
) -> List[int]:
    """
    Hard-delete a page and all its descendants.

    Returns the ids of every page removed, the page itself last.
    """
    if page_id == HOMEPAGE_ID:
        raise ValidationError("The homepage cannot be deleted")

    page = db.session.get(Page, page_id)
    if not page:
        raise NotFoundError("Page not found")

    paths = [page.path]
    with transactional():
        descendants = delete_children(page.id, actor_id)
        paths.extend(child.path for child in descendants)
        deleted = [child.id for child in descendants] + [page.id]

        log_action(
            table="pages",
            entity_id=page.id,
            action="delete",
            description="deleted",
            user_id=actor_id,
        )
        _remove(page)

    app = current_app._get_current_object()
    for path in paths:
        page_uncached.send(app, path=path)
    navigation_cache_cleared.send(app)
    sitemap_changed.send(app, page_id=page_id)

    current_app.logger.info(f"Deleted page {page_id} and {len(deleted) - 1} descendant(s)")
    return deleted

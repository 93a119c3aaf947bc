from typing import List, Optional

from flask import current_app

from pagetree.extensions import db
from pagetree.models.page import Page, HOMEPAGE_ID
from pagetree.domain.invariants.exceptions import NotFoundError, ValidationError
from pagetree.signals import navigation_cache_cleared, page_uncached
from pagetree.utils.audit import log_action
from pagetree.utils.transaction import transactional


def _get_page(page_id: int) -> Page:
    page = db.session.get(Page, page_id)
    if not page:
        raise NotFoundError("Page not found")
    return page


def archive_children(page_id: int, actor_id: Optional[int] = None) -> List[int]:
    """
    Archive every descendant of a page by inheritance.

    Descendants that are already archived keep their own state and are not
    audited again, but the walk still goes through them.
    """
    archived: List[int] = []
    seen = {page_id}
    worklist = [page_id]

    while worklist:
        current = worklist.pop()
        for child in Page.query.filter(Page.parent == current).order_by(Page.id).all():
            if child.id in seen:
                current_app.logger.warning(f"Page {child.id} reached twice while archiving")
                continue
            seen.add(child.id)
            worklist.append(child.id)

            if child.archived:
                continue

            child.archived = True
            child.archived_inherited = True
            archived.append(child.id)

            log_action(
                table="pages",
                entity_id=child.id,
                action="update",
                description="inherited archive state from parent",
                user_id=actor_id,
            )

    return archived


def unarchive_children(page_id: int, actor_id: Optional[int] = None) -> List[int]:
    """
    Restore descendants that were archived only because of an ancestor.

    A descendant archived in its own right stays archived, and so does
    everything beneath it.
    """
    restored: List[int] = []
    seen = {page_id}
    worklist = [page_id]

    while worklist:
        current = worklist.pop()
        children = (
            Page.query
            .filter(Page.parent == current, Page.archived_inherited.is_(True))
            .order_by(Page.id)
            .all()
        )
        for child in children:
            if child.id in seen:
                current_app.logger.warning(f"Page {child.id} reached twice while unarchiving")
                continue
            seen.add(child.id)

            child.archived = False
            child.archived_inherited = False
            restored.append(child.id)

            log_action(
                table="pages",
                entity_id=child.id,
                action="update",
                description="inherited unarchived state from parent",
                user_id=actor_id,
            )
            worklist.append(child.id)

    return restored


def archive_page(*, page_id: int, actor_id: int) -> List[int]:
    """Archive a page and its subtree. Returns the ids archived by inheritance."""
    if page_id == HOMEPAGE_ID:
        raise ValidationError("The homepage cannot be archived")

    with transactional():
        page = _get_page(page_id)
        page.archived = True
        page.archived_inherited = False

        inherited = archive_children(page.id, actor_id)

        log_action(
            table="pages",
            entity_id=page.id,
            action="update",
            description="archived",
            user_id=actor_id,
        )

    app = current_app._get_current_object()
    page_uncached.send(app, path=page.path)
    navigation_cache_cleared.send(app)
    current_app.logger.info(f"Page {page_id} archived with {len(inherited)} descendant(s)")
    return inherited


def unarchive_page(*, page_id: int, actor_id: int) -> List[int]:
    with transactional():
        page = _get_page(page_id)
        page.archived = False
        page.archived_inherited = False

        restored = unarchive_children(page.id, actor_id)

        log_action(
            table="pages",
            entity_id=page.id,
            action="update",
            description="unarchived",
            user_id=actor_id,
        )

    navigation_cache_cleared.send(current_app._get_current_object())
    return restored

from typing import Optional, Union

from flask import current_app

from pagetree.extensions import db
from pagetree.models.page import Page, HOMEPAGE_ID
from pagetree.models.pending_change import PendingChange
from pagetree.domain.diff import MISSING
from pagetree.domain.invariants.exceptions import NotFoundError, ValidationError
from pagetree.domain.preview import PagePreview
from pagetree.utils.tags import tag_ids_for
from pagetree.utils.transaction import transactional
from .change_requests import parse_reference
from .create_page import create_page
from .update_page import update_page


def get_page_draft(page: Union[int, str]) -> Optional[PagePreview]:
    """
    The page as it would look once its pending change is published.

    Returns None when neither the page nor the pending page exists. Without
    a pending change the live page comes back with changes_applied False.
    """
    page_id, pending_id = parse_reference(page)

    if pending_id is not None:
        pending = db.session.get(PendingChange, pending_id)
        if pending is None:
            return None
        preview = PagePreview(id=pending.reference)
        if pending.pending_page_parent is not None:
            preview.parent = pending.pending_page_parent
    else:
        live = db.session.get(Page, page_id)
        if live is None:
            return None
        preview = PagePreview.from_page(live, tag_ids_for(live.id))
        pending = PendingChange.query.filter_by(table="pages", item_id=live.id).first()
        if pending is None:
            return preview

    preview.apply(pending.diff)

    if isinstance(pending.tags_changes, list):
        preview.tags = list(pending.tags_changes)
    if pending.open_graph_changes:
        preview.open_graph = dict(pending.open_graph_changes)

    preview.changes_applied = True
    preview.change_id = pending.id
    preview.updated_at = pending.date
    preview.last_edited_by = pending.user_id
    return preview


def publish_draft(*, page: Union[int, str], actor_id: int) -> Page:
    """
    Publish a pending change: create the page for a pending page,
    update the live page otherwise.
    """
    page_id, pending_id = parse_reference(page)

    if pending_id is not None:
        pending = db.session.get(PendingChange, pending_id)
        if pending is None:
            raise NotFoundError("Pending change not found")

        reference = pending.reference
        diff = pending.diff
        parent = pending.pending_page_parent
        if parent is None:
            parent = diff.parent if diff.parent is not MISSING else HOMEPAGE_ID

        with transactional():
            published = create_page(
                actor_id=actor_id,
                trunk=diff.trunk or False,
                parent=parent,
                in_nav=diff.in_nav if diff.in_nav is not MISSING else True,
                nav_title=diff.nav_title or "",
                title=diff.title or "",
                route=diff.route or None,
                meta_description=diff.meta_description or "",
                seo_invisible=diff.seo_invisible or False,
                template=diff.template or "",
                external=diff.external or "",
                new_window=diff.new_window or False,
                content=diff.content or {},
                publish_at=diff.publish_at or None,
                expire_at=diff.expire_at or None,
                max_age=diff.max_age or 0,
                tags=pending.tags_changes,
                open_graph=pending.open_graph_changes,
                publishing_change_id=pending.id,
            )
        current_app.logger.info(f"Pending page {reference} published as page {published.id}")
        return published

    draft = get_page_draft(page_id)
    if draft is None:
        raise NotFoundError("Page not found")
    if not draft.changes_applied:
        raise ValidationError("There are no pending changes to publish")

    return update_page(
        page_id=page_id,
        actor_id=actor_id,
        trunk=draft.trunk,
        parent=draft.parent,
        in_nav=draft.in_nav,
        nav_title=draft.nav_title,
        title=draft.title,
        route=draft.route,
        meta_description=draft.meta_description,
        seo_invisible=draft.seo_invisible,
        template=draft.template,
        external=draft.external,
        new_window=draft.new_window,
        content=draft.content,
        publish_at=draft.publish_at,
        expire_at=draft.expire_at,
        max_age=draft.max_age,
        tags=draft.tags,
        open_graph=draft.open_graph,
    )

from typing import List, Optional

from dateutil.relativedelta import relativedelta
from flask import current_app

from pagetree.extensions import db
from pagetree.models.base import utcnow
from pagetree.models.page import Page
from pagetree.models.page_revision import PageRevision
from pagetree.domain.invariants.exceptions import NotFoundError
from pagetree.domain.preview import PagePreview
from pagetree.utils.audit import log_action
from pagetree.utils.tags import tag_ids_for
from pagetree.utils.transaction import transactional
from pagetree.utils.versioning import REVISION_FIELDS, snapshot_page


def create_revision(page: Page) -> PageRevision:
    """Snapshot the stored state of a page before it is overwritten."""
    revision = PageRevision()
    revision.page_id = page.id
    for field, value in snapshot_page(page).items():
        setattr(revision, field, value)
    revision.author_id = page.last_edited_by
    revision.updated_at = page.updated_at or utcnow()
    revision.saved = False

    db.session.add(revision)
    return revision


def prune_revisions(page_id: int) -> int:
    """
    Drop the oldest unsaved revisions of a page.

    Only kicks in above REVISION_KEEP unsaved revisions, and only removes
    revisions older than REVISION_MAX_AGE_MONTHS. Returns how many went.
    """
    keep = current_app.config.get("REVISION_KEEP", 10)
    months = current_app.config.get("REVISION_MAX_AGE_MONTHS", 1)

    unsaved = PageRevision.query.filter_by(page_id=page_id, saved=False)
    count = unsaved.count()
    if count <= keep:
        return 0

    cutoff = utcnow() - relativedelta(months=months)
    stale = (
        unsaved
        .filter(PageRevision.updated_at < cutoff)
        .order_by(PageRevision.updated_at.asc(), PageRevision.id.asc())
        .limit(count - keep)
        .all()
    )
    for revision in stale:
        db.session.delete(revision)

    if stale:
        current_app.logger.debug(f"Pruned {len(stale)} revision(s) of page {page_id}")
    return len(stale)


def list_revisions(page_id: int, *, saved: Optional[bool] = None) -> List[PageRevision]:
    query = PageRevision.query.filter_by(page_id=page_id)
    if saved is not None:
        query = query.filter_by(saved=saved)
    return query.order_by(PageRevision.updated_at.desc(), PageRevision.id.desc()).all()


def _get_revision(revision_id: int) -> PageRevision:
    revision = db.session.get(PageRevision, revision_id)
    if not revision:
        raise NotFoundError("Revision not found")
    return revision


def get_revision(revision_id: int) -> PagePreview:
    """The revision's page, with its content fields over the live row."""
    revision = _get_revision(revision_id)
    page = revision.page

    preview = PagePreview.from_page(page, tag_ids_for(page.id))
    for field in REVISION_FIELDS:
        setattr(preview, field, getattr(revision, field))
    preview.content = dict(revision.content or {})
    preview.updated_at = revision.updated_at
    preview.last_edited_by = revision.author_id
    preview.revision = {
        "id": revision.id,
        "saved": revision.saved,
        "description": revision.saved_description,
    }
    return preview


def save_revision(*, revision_id: int, description: str, actor_id: int) -> PageRevision:
    """Mark a revision as kept for good."""
    with transactional():
        revision = _get_revision(revision_id)
        revision.saved = True
        revision.saved_description = description or ""

        log_action(
            table="pages",
            entity_id=revision.page_id,
            action="update",
            description="saved revision",
            user_id=actor_id,
        )
    return revision


def delete_revision(*, page_id: int, revision_id: int, actor_id: int) -> None:
    with transactional():
        revision = PageRevision.query.filter_by(id=revision_id, page_id=page_id).first()
        if not revision:
            raise NotFoundError("Revision not found")

        db.session.delete(revision)

        log_action(
            table="pages",
            entity_id=page_id,
            action="update",
            description="deleted revision",
            user_id=actor_id,
        )
        log_action(
            table="page_revisions",
            entity_id=revision_id,
            action="delete",
            description="deleted",
            user_id=actor_id,
        )


def restore_revision(*, revision_id: int, actor_id: int) -> Page:
    """
    Roll a page back to a revision.

    Goes through a normal update, so the current state is itself kept
    as a revision first.
    """
    from .update_page import update_page

    preview = get_revision(revision_id)

    with transactional():
        page = update_page(
            page_id=preview.id,
            actor_id=actor_id,
            trunk=preview.trunk,
            parent=preview.parent,
            in_nav=preview.in_nav,
            nav_title=preview.nav_title,
            title=preview.title,
            route=preview.route,
            meta_description=preview.meta_description,
            seo_invisible=preview.seo_invisible,
            template=preview.template,
            external=preview.external,
            new_window=preview.new_window,
            content=preview.content,
            publish_at=preview.publish_at,
            expire_at=preview.expire_at,
            max_age=preview.max_age,
        )
        log_action(
            table="pages",
            entity_id=page.id,
            action="update",
            description="restored revision",
            user_id=actor_id,
        )

    return page

from typing import Any, Dict, Iterable, Optional, Union

from flask import current_app

from pagetree.extensions import db
from pagetree.models.base import utcnow
from pagetree.models.page import Page, HOMEPAGE_ID
from pagetree.models.pending_change import PendingChange
from pagetree.domain.diff import to_date
from pagetree.domain.invariants.exceptions import NotFoundError
from pagetree.domain.invariants.page import assert_page, assert_not_own_ancestor
from pagetree.signals import navigation_cache_cleared, page_uncached
from pagetree.utils.audit import log_action
from pagetree.utils.tags import resolve_tags, set_tags, tag_ids_for, update_reference_counts
from pagetree.utils.transaction import transactional
from .paths import resolve_route_and_path
from .queries import get_lineage
from .revisions import create_revision, prune_revisions
from .seo import get_seo_rating

NAVIGATION_FIELDS = ("nav_title", "route", "in_nav", "parent")


def update_page(
    *,
    page_id: int,
    actor_id: int,
    trunk: bool,
    parent: int,
    in_nav: bool,
    nav_title: str,
    title: str,
    route: Optional[str],
    meta_description: str,
    seo_invisible: bool,
    template: str,
    external: str,
    new_window: bool,
    content: Optional[Dict[str, Any]],
    publish_at,
    expire_at,
    max_age: int,
    tags: Optional[Iterable[Union[int, str]]] = None,
    open_graph: Optional[Dict[str, Any]] = None,
) -> Page:
    """
    Replace the editable fields of a page.

    Design rules:
    - The stored state is kept as a revision before anything changes
    - A path change is carried down to every descendant and redirected
    - Any pending change for the page is consumed; if the new values are
      exactly what it drafted, its author is credited with the edit
    - ``tags`` / ``open_graph`` of None leave those untouched
    """

    page = db.session.get(Page, page_id)
    if not page:
        raise NotFoundError("Page not found")

    with transactional():
        # 1. Keep what is there now
        create_revision(page)
        prune_revisions(page.id)

        old_path = page.path
        parent = int(parent) if not page.is_homepage else page.parent
        nav_changed = (
            page.nav_title != nav_title
            or page.route != (route or "")
            or page.in_nav != bool(in_nav)
            or page.parent != parent
        )

        if parent != page.parent:
            if parent != HOMEPAGE_ID and db.session.get(Page, parent) is None:
                raise NotFoundError("Parent page not found")
            assert_not_own_ancestor(page.id, parent, get_lineage(parent))

        # 2. Apply the new values
        page.trunk = bool(trunk)
        page.parent = parent
        page.in_nav = bool(in_nav)
        page.nav_title = nav_title or ""
        page.title = title or ""
        page.route = route or ""
        page.meta_description = meta_description or ""
        page.seo_invisible = bool(seo_invisible)
        page.template = template or ""
        page.external = external or ""
        page.new_window = bool(new_window)
        page.content = dict(content or {})
        page.publish_at = to_date(publish_at)
        page.expire_at = to_date(expire_at)
        page.max_age = int(max_age or 0)
        if open_graph is not None:
            page.open_graph = dict(open_graph)

        # 3. Route, path and the subtree below
        resolve_route_and_path(page, old_path, actor_id)

        seo = get_seo_rating(
            page.id, page.template, page.title, page.meta_description, page.content, utcnow()
        )
        page.seo_score = seo.score
        page.seo_recommendations = seo.as_list()
        page.last_edited_by = actor_id

        assert_page(page)

        # 4. Consume the pending change
        pending = PendingChange.query.filter_by(table="pages", item_id=page.id).first()
        if (
            pending is not None
            and pending.user_id != actor_id
            and pending.diff.matches(page.column_values())
        ):
            page.last_edited_by = pending.user_id
            log_action(
                table="pages",
                entity_id=page.id,
                action="update",
                description="updated via publisher",
                user_id=pending.user_id,
            )
            log_action(
                table="pages",
                entity_id=page.id,
                action="update",
                description="published",
                user_id=actor_id,
            )
        else:
            log_action(
                table="pages",
                entity_id=page.id,
                action="update",
                description="updated",
                user_id=actor_id,
            )

        PendingChange.query.filter_by(table="pages", item_id=page.id).delete(
            synchronize_session=False
        )

        if tags is not None:
            set_tags(page.id, resolve_tags(tags))
        else:
            update_reference_counts(tag_ids_for(page.id))

    app = current_app._get_current_object()
    page_uncached.send(app, path=old_path)
    if page.path != old_path:
        page_uncached.send(app, path=page.path)
    if nav_changed:
        navigation_cache_cleared.send(app)

    current_app.logger.info(f"Page {page.id} updated by user {actor_id}")
    return page

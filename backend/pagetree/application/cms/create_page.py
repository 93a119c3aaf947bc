from typing import Any, Dict, Iterable, Optional, Union

from flask import current_app

from pagetree.extensions import db
from pagetree.models.base import utcnow
from pagetree.models.page import Page, HOMEPAGE_ID
from pagetree.models.pending_change import PendingChange
from pagetree.models.route_history import RouteHistory
from pagetree.domain.diff import to_date
from pagetree.domain.invariants.exceptions import NotFoundError, ValidationError
from pagetree.domain.invariants.page import assert_page
from pagetree.signals import navigation_cache_cleared, sitemap_changed
from pagetree.utils.audit import log_action
from pagetree.utils.routes import path_under, unique_route, urlify
from pagetree.utils.tags import resolve_tags, set_tags
from pagetree.utils.transaction import transactional
from .seo import get_seo_rating


def create_page(
    *,
    actor_id: int,
    nav_title: str,
    title: str = "",
    trunk: bool = False,
    parent: int = HOMEPAGE_ID,
    in_nav: bool = True,
    route: Optional[str] = None,
    meta_description: str = "",
    seo_invisible: bool = False,
    template: str = "",
    external: str = "",
    new_window: bool = False,
    content: Optional[Dict[str, Any]] = None,
    publish_at=None,
    expire_at=None,
    max_age: int = 0,
    tags: Optional[Iterable[Union[int, str]]] = None,
    open_graph: Optional[Dict[str, Any]] = None,
    publishing_change_id: Optional[int] = None,
) -> Page:
    """
    Create a page beneath ``parent``.

    Edge cases handled:
    - Route generated from the navigation title when none is given
    - Route collisions under the same parent get a -2, -3, ... suffix
    - Reserved and site-directory names are avoided at the top level
    - A stale redirect away from the new path is dropped

    When ``publishing_change_id`` is given the page is the published form
    of that pending change. If the drafted fields made it through exactly,
    the draft's author is credited with the page.
    """

    parent = int(parent)
    if parent < HOMEPAGE_ID:
        raise ValidationError("Only the homepage may sit at the top of the tree")
    if parent != HOMEPAGE_ID and db.session.get(Page, parent) is None:
        raise NotFoundError("Parent page not found")

    max_length = current_app.config.get("ROUTE_MAX_LENGTH", 250)
    route = urlify(route or nav_title)[:max_length]
    if not route:
        raise ValidationError("A route could not be generated for this page")

    with transactional():
        route = unique_route(route, parent)
        content = dict(content or {})
        seo = get_seo_rating(None, template, title, meta_description, content, utcnow())

        page = Page()
        page.trunk = bool(trunk)
        page.parent = parent
        page.in_nav = bool(in_nav)
        page.nav_title = nav_title or ""
        page.title = title or ""
        page.route = route
        page.path = path_under(parent, route)
        page.meta_description = meta_description or ""
        page.seo_invisible = bool(seo_invisible)
        page.template = template or ""
        page.external = external or ""
        page.new_window = bool(new_window)
        page.content = content
        page.open_graph = dict(open_graph or {})
        page.publish_at = to_date(publish_at)
        page.expire_at = to_date(expire_at)
        page.max_age = int(max_age or 0)
        page.seo_score = seo.score
        page.seo_recommendations = seo.as_list()
        page.last_edited_by = actor_id

        pending = None
        exact = False
        if publishing_change_id is not None:
            pending = db.session.get(PendingChange, publishing_change_id)
            if pending is None:
                raise NotFoundError("Pending change not found")
            exact = pending.diff.matches(page.column_values())
            if exact:
                page.last_edited_by = pending.user_id

        RouteHistory.query.filter_by(old_route=page.path).delete(synchronize_session=False)

        db.session.add(page)
        db.session.flush()  # page.id for tags and audit

        assert_page(page)

        if tags:
            set_tags(page.id, resolve_tags(tags))

        if pending is not None:
            db.session.delete(pending)

        if pending is not None and exact and pending.user_id != actor_id:
            log_action(
                table="pages",
                entity_id=page.id,
                action="add",
                description="created via publisher",
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
                action="add",
                description="created",
                user_id=actor_id,
            )

    current_app.logger.info(f"Page {page.id} created at '{page.path}'")
    navigation_cache_cleared.send(current_app._get_current_object())
    sitemap_changed.send(current_app._get_current_object(), page_id=page.id)

    return page

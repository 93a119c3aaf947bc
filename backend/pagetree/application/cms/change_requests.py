from typing import Any, Dict, Iterable, Mapping, Optional, Union

from flask import current_app

from pagetree.extensions import db
from pagetree.models.base import utcnow
from pagetree.models.page import Page, HOMEPAGE_ID
from pagetree.models.pending_change import PendingChange, PENDING_PREFIX
from pagetree.domain.diff import normalize_changes
from pagetree.domain.invariants.exceptions import NotFoundError, ValidationError
from pagetree.utils.audit import log_action
from pagetree.utils.tags import tag_ids_for
from pagetree.utils.transaction import transactional

NEW_PAGE_TITLE = "New Page Pending"


def parse_reference(ref: Union[int, str]):
    """
    Split a page reference into (page_id, pending_id).

    Exactly one of the two is set: "12" is page 12, "p12" is pending change 12.
    """
    text = str(ref).strip()
    try:
        if text.startswith(PENDING_PREFIX):
            return None, int(text[len(PENDING_PREFIX):])
        return int(text), None
    except ValueError:
        raise ValidationError(f"'{ref}' is not a page reference")


def _unique(values: Optional[Iterable[Any]]):
    return list(dict.fromkeys(values or []))


def _fill(pending: PendingChange, *, actor_id, tags, open_graph):
    pending.user_id = actor_id
    pending.date = utcnow()
    pending.tags_changes = _unique(tags)
    pending.open_graph_changes = dict(open_graph or {})


def create_change_request(
    *,
    page: Union[int, str],
    changes: Mapping[str, Any],
    actor_id: int,
    tags: Optional[Iterable[Union[int, str]]] = None,
    open_graph: Optional[Dict[str, Any]] = None,
) -> int:
    """
    Store a proposed edit for later publishing. Returns the pending change id.

    For an existing page only the fields that differ from the live row are
    kept, and a second request from anyone replaces the first. For a page
    that is itself still pending the diff is replaced wholesale.
    """
    page_id, pending_id = parse_reference(page)
    diff = normalize_changes(changes)

    with transactional():
        if pending_id is not None:
            pending = db.session.get(PendingChange, pending_id)
            if not pending:
                raise NotFoundError("Pending change not found")

            pending.diff = diff
            _fill(pending, actor_id=actor_id, tags=tags, open_graph=open_graph)

            log_action(
                table="pages",
                entity_id=pending.reference,
                action="update",
                description="updated draft",
                user_id=actor_id,
            )
            return pending.id

        live = db.session.get(Page, page_id)
        if not live:
            raise NotFoundError("Page not found")
        if tags is None:
            tags = tag_ids_for(live.id)
        if open_graph is None:
            open_graph = live.open_graph

        pending = PendingChange.query.filter_by(table="pages", item_id=live.id).first()
        description = "updated draft"
        if pending is None:
            pending = PendingChange()
            pending.table = "pages"
            pending.item_id = live.id
            pending.title = "Page Change Pending"
            db.session.add(pending)
            description = "saved draft"

        pending.diff = diff.against(live.column_values())
        _fill(pending, actor_id=actor_id, tags=tags, open_graph=open_graph)
        db.session.flush()

        log_action(
            table="pages",
            entity_id=live.id,
            action="update",
            description=description,
            user_id=actor_id,
        )

    current_app.logger.debug(f"Pending change {pending.id} stored for page {page_id}")
    return pending.id


def create_pending_page(
    *,
    parent: int,
    changes: Mapping[str, Any],
    actor_id: int,
    tags: Optional[Iterable[Union[int, str]]] = None,
    open_graph: Optional[Dict[str, Any]] = None,
) -> str:
    """Draft a page that does not exist yet. Returns its "p<id>" reference."""
    parent = int(parent)
    if parent != HOMEPAGE_ID and db.session.get(Page, parent) is None:
        raise NotFoundError("Parent page not found")

    with transactional():
        pending = PendingChange()
        pending.table = "pages"
        pending.item_id = None
        pending.pending_page_parent = parent
        pending.title = NEW_PAGE_TITLE
        pending.diff = normalize_changes(changes)
        _fill(pending, actor_id=actor_id, tags=tags, open_graph=open_graph)

        db.session.add(pending)
        db.session.flush()

        log_action(
            table="pages",
            entity_id=pending.reference,
            action="add",
            description="saved draft",
            user_id=actor_id,
        )

    return pending.reference


def copy_to_pending(*, page_id: int, actor_id: int, title_suffix: str = " (Copy)") -> str:
    """Start a new pending page from the content of an existing one."""
    page = db.session.get(Page, page_id)
    if not page:
        raise NotFoundError("Page not found")

    changes = page.column_values()
    changes["title"] = f"{page.title}{title_suffix}"
    changes["nav_title"] = f"{page.nav_title}{title_suffix}"
    changes["route"] = ""

    return create_pending_page(
        parent=page.parent if page.parent >= HOMEPAGE_ID else HOMEPAGE_ID,
        changes=changes,
        actor_id=actor_id,
        tags=tag_ids_for(page.id),
        open_graph=page.open_graph,
    )


def get_change(page: Union[int, str]) -> Optional[PendingChange]:
    page_id, pending_id = parse_reference(page)
    if pending_id is not None:
        return db.session.get(PendingChange, pending_id)
    return PendingChange.query.filter_by(table="pages", item_id=page_id).first()


def change_exists(page: Union[int, str]) -> bool:
    return get_change(page) is not None


def delete_draft(*, page: Union[int, str], actor_id: int) -> None:
    """Discard the pending change of a page, or a pending page outright."""
    pending = get_change(page)
    if pending is None:
        raise NotFoundError("There is no draft for this page")

    with transactional():
        entry = pending.item_id if pending.item_id is not None else pending.reference
        pending_id = pending.id
        db.session.delete(pending)

        log_action(
            table="pages",
            entity_id=entry,
            action="update",
            description="deleted draft",
            user_id=actor_id,
        )
        log_action(
            table="pending_changes",
            entity_id=pending_id,
            action="delete",
            description="deleted",
            user_id=actor_id,
        )

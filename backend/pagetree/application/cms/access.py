from typing import Optional, Union

from pagetree.extensions import db
from pagetree.models.page import HOMEPAGE_ID
from pagetree.models.pending_change import PendingChange
from pagetree.models.user import User, PUBLISHER, EDITOR, NO_ACCESS
from .change_requests import parse_reference
from .queries import get_lineage

RANK = {NO_ACCESS: 0, EDITOR: 1, PUBLISHER: 2}


def page_access_level(user: Optional[User], page: Union[int, str]) -> str:
    """
    Access a user has to a page: "p" publish, "e" edit, "n" none.

    Administrators publish everywhere. Everyone else inherits the nearest
    explicit permission on the page or one of its ancestors, ending with
    the homepage.
    """
    if user is None:
        return NO_ACCESS
    if user.level > 0:
        return PUBLISHER

    page_id, pending_id = parse_reference(page)
    if pending_id is not None:
        pending = db.session.get(PendingChange, pending_id)
        if pending is None:
            return NO_ACCESS
        if pending.item_id is not None:
            page_id = pending.item_id
        else:
            page_id = pending.pending_page_parent or HOMEPAGE_ID

    for candidate in [page_id] + get_lineage(page_id) + [HOMEPAGE_ID]:
        permission = user.page_permission(candidate)
        if permission in RANK:
            return permission

    return NO_ACCESS


def has_access(user: Optional[User], page: Union[int, str], required: str) -> bool:
    return RANK[page_access_level(user, page)] >= RANK[required]

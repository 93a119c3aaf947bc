from typing import Iterable

from .exceptions import InvariantViolation

HOMEPAGE_ID = 0
ROOT_ID = -1


def assert_page(page):
    """Checks a page row before it is written."""
    if page.is_homepage:
        if page.route or page.parent != ROOT_ID:
            raise InvariantViolation("The homepage must have an empty route and no parent.")
    else:
        if not page.route:
            raise InvariantViolation("A page must have a route.")
        if page.parent is None or page.parent < HOMEPAGE_ID:
            raise InvariantViolation("Only the homepage may sit at the root.")
        if page.parent == page.id:
            raise InvariantViolation(f"Page {page.id} cannot be its own parent.")
        if page.path != page.route and not page.path.endswith(f"/{page.route}"):
            raise InvariantViolation(
                f"Path '{page.path}' does not end with route '{page.route}'."
            )

    if page.archived_inherited and not page.archived:
        raise InvariantViolation("A page cannot inherit an archive state without being archived.")


def assert_not_own_ancestor(page_id: int, new_parent: int, parent_lineage: Iterable[int]):
    """
    A page may not be moved beneath itself or one of its descendants.

    parent_lineage holds the ancestors of new_parent.
    """
    if new_parent == page_id or page_id in set(parent_lineage):
        raise InvariantViolation(f"Page {page_id} cannot be moved beneath itself.")

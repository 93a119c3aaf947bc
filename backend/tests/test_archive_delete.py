import pytest

from pagetree.application.cms.archive_page import archive_page, unarchive_page
from pagetree.application.cms.change_requests import create_change_request
from pagetree.application.cms.delete_page import delete_page
from pagetree.application.cms.move_page import move_page, update_position
from pagetree.domain.invariants.exceptions import InvariantViolation, NotFoundError, ValidationError
from pagetree.extensions import db
from pagetree.models import AuditLog, Page, PageRevision, PendingChange, RouteHistory, Tag


@pytest.fixture
def tree(make_page):
    about = make_page("About")
    team = make_page("Team", parent=about.id)
    jane = make_page("Jane", parent=team.id)
    return about.id, team.id, jane.id


def _page(page_id):
    return db.session.get(Page, page_id)


def test_archive_cascades_by_inheritance(tree, admin):
    about, team, jane = tree

    inherited = archive_page(page_id=about, actor_id=admin.id)

    assert sorted(inherited) == sorted([team, jane])
    assert _page(about).archived and not _page(about).archived_inherited
    assert _page(team).archived and _page(team).archived_inherited
    assert _page(jane).archived and _page(jane).archived_inherited

    assert AuditLog.query.filter_by(entry=str(about), description="archived").count() == 1
    assert AuditLog.query.filter_by(description="inherited archive state from parent").count() == 2


def test_unarchive_restores_only_inherited_state(tree, admin):
    about, team, jane = tree

    archive_page(page_id=team, actor_id=admin.id)
    archive_page(page_id=about, actor_id=admin.id)

    # team was archived on its own, so it is not touched again
    assert not _page(team).archived_inherited
    assert AuditLog.query.filter_by(entry=str(team), description="inherited archive state from parent").count() == 0

    restored = unarchive_page(page_id=about, actor_id=admin.id)

    assert restored == []
    assert not _page(about).archived
    assert _page(team).archived
    assert _page(jane).archived

    restored = unarchive_page(page_id=team, actor_id=admin.id)
    assert restored == [jane]
    assert not _page(jane).archived
    assert not _page(jane).archived_inherited
    assert AuditLog.query.filter_by(
        entry=str(jane), description="inherited unarchived state from parent"
    ).count() == 1


def test_homepage_cannot_be_archived_or_deleted(admin):
    with pytest.raises(ValidationError):
        archive_page(page_id=0, actor_id=admin.id)
    with pytest.raises(ValidationError):
        delete_page(page_id=0, actor_id=admin.id)


def test_delete_removes_the_subtree_deepest_first(tree, admin, editor):
    about, team, jane = tree
    create_change_request(page=team, changes={"title": "Crew"}, actor_id=editor.id, tags=["Staff"])

    deleted = delete_page(page_id=about, actor_id=admin.id)

    assert deleted == [jane, team, about]
    assert Page.query.filter(Page.id.in_(deleted)).count() == 0
    assert PendingChange.query.count() == 0

    logs = (
        AuditLog.query
        .filter(AuditLog.type == "delete")
        .order_by(AuditLog.id)
        .all()
    )
    assert [(log.entry, log.description) for log in logs] == [
        (str(jane), "inherited deletion from parent"),
        (str(team), "inherited deletion from parent"),
        (str(about), "deleted"),
    ]


def test_delete_drops_revisions_and_tag_usage(make_page, admin):
    page = make_page("Blog", tags=["News"])
    revision = PageRevision()
    revision.page_id = page.id
    revision.title = "Old blog"
    db.session.add(revision)
    db.session.commit()

    delete_page(page_id=page.id, actor_id=admin.id)

    assert PageRevision.query.count() == 0
    assert Tag.query.filter_by(tag="News").one().usage_count == 0


def test_delete_unknown_page(admin):
    with pytest.raises(NotFoundError):
        delete_page(page_id=404, actor_id=admin.id)


def test_move_page_rewrites_paths(tree, make_page, admin):
    about, team, jane = tree
    services = make_page("Services")

    move_page(page_id=team, parent=services.id, actor_id=admin.id)

    assert _page(team).path == "services/team"
    assert _page(jane).path == "services/team/jane"
    assert RouteHistory.query.filter_by(old_route="about/team").one().new_route == "services/team"
    assert AuditLog.query.filter_by(entry=str(team), description="moved to another parent").count() == 1


def test_move_resolves_route_collisions(tree, make_page, admin):
    about, team, jane = tree
    make_page("Jane")

    move_page(page_id=jane, parent=0, actor_id=admin.id)

    assert _page(jane).route == "jane-2"
    assert _page(jane).path == "jane-2"


def test_move_into_own_subtree_is_refused(tree, admin):
    about, team, jane = tree

    with pytest.raises(InvariantViolation):
        move_page(page_id=about, parent=jane, actor_id=admin.id)
    with pytest.raises(InvariantViolation):
        move_page(page_id=about, parent=about, actor_id=admin.id)

    assert _page(about).parent == 0


def test_update_position(tree, admin):
    about, team, jane = tree

    page = update_position(page_id=team, position=5, actor_id=admin.id)

    assert page.position == 5
    assert AuditLog.query.filter_by(entry=str(team), description="changed position").count() == 1

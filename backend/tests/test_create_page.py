import pytest

from pagetree.application.cms.change_requests import create_pending_page
from pagetree.application.cms.create_page import create_page
from pagetree.domain.invariants.exceptions import NotFoundError, ValidationError
from pagetree.extensions import db
from pagetree.models import AuditLog, Page, PendingChange, RouteHistory, Tag, TagRelation


def _descriptions(page_id):
    return [
        log.description
        for log in AuditLog.query.filter_by(table="pages", entry=str(page_id)).order_by(AuditLog.id)
    ]


def test_route_comes_from_nav_title(make_page):
    page = make_page("About Us")

    assert page.route == "about-us"
    assert page.path == "about-us"
    assert page.parent == 0
    assert _descriptions(page.id) == ["created"]


def test_explicit_route_is_urlified(make_page):
    page = make_page("About", route="Who We Are")

    assert page.route == "who-we-are"


def test_child_path_includes_parent(make_page):
    about = make_page("About")
    team = make_page("Team", parent=about.id)
    jane = make_page("Jane", parent=team.id)

    assert jane.path == "about/team/jane"


def test_sibling_collisions_are_suffixed(make_page):
    first = make_page("News")
    second = make_page("News")
    third = make_page("News")

    assert [first.route, second.route, third.route] == ["news", "news-2", "news-3"]


def test_reserved_route_at_top_level(make_page):
    top = make_page("Admin")
    child = make_page("Admin", parent=top.id)

    assert top.route == "admin-2"
    assert child.route == "admin"
    assert child.path == "admin-2/admin"


def test_new_path_replaces_old_redirect(make_page):
    history = RouteHistory()
    history.old_route = "events"
    history.new_route = "whats-on"
    db.session.add(history)
    db.session.commit()

    make_page("Events")

    assert RouteHistory.query.filter_by(old_route="events").count() == 0


def test_tags_are_created_and_counted(make_page):
    page = make_page("Blog", tags=["News", "Updates", "news"])

    tags = {tag.tag: tag for tag in Tag.query.all()}
    assert set(tags) == {"News", "Updates"}
    assert tags["News"].usage_count == 1
    assert tags["News"].route == "news"

    other = make_page("Press", tags=[tags["News"].id])
    assert other.id != page.id
    assert db.session.get(Tag, tags["News"].id).usage_count == 2


def test_numeric_labels_are_tags_not_ids(make_page):
    page = make_page("Annual", tags=["2024"])

    tag = Tag.query.filter_by(tag="2024").one()
    assert tag.usage_count == 1
    assert TagRelation.query.filter_by(entry=str(page.id)).one().tag_id == tag.id


def test_seo_rating_is_stored(make_page):
    page = make_page("Contact", title="", meta_description="")

    assert 0 <= page.seo_score < 100
    codes = {item["code"] for item in page.seo_recommendations}
    assert 2 in codes  # missing title
    assert 4 in codes  # missing meta description


def test_missing_parent(admin):
    with pytest.raises(NotFoundError):
        create_page(actor_id=admin.id, nav_title="Orphan", parent=999)


def test_unroutable_title(admin):
    with pytest.raises(ValidationError):
        create_page(actor_id=admin.id, nav_title="!!!")


def test_failed_create_leaves_nothing_behind(admin):
    before = Page.query.count()

    with pytest.raises(NotFoundError):
        create_page(actor_id=admin.id, nav_title="Broken", publishing_change_id=999)

    assert Page.query.count() == before
    assert AuditLog.query.filter_by(description="created").count() == 1  # homepage only


def test_publishing_unchanged_draft_credits_its_author(admin, editor):
    reference = create_pending_page(
        parent=0,
        changes={"nav_title": "Events", "title": "Events", "template": "content", "in_nav": "on"},
        actor_id=editor.id,
    )
    change_id = int(reference[1:])

    page = create_page(
        actor_id=admin.id,
        nav_title="Events",
        title="Events",
        template="content",
        in_nav=True,
        publishing_change_id=change_id,
    )

    assert page.last_edited_by == editor.id
    assert db.session.get(PendingChange, change_id) is None

    logs = AuditLog.query.filter_by(table="pages", entry=str(page.id)).order_by(AuditLog.id).all()
    assert [(log.description, log.user_id) for log in logs] == [
        ("created via publisher", editor.id),
        ("published", admin.id),
    ]


def test_publishing_edited_draft_credits_the_publisher(admin, editor):
    reference = create_pending_page(
        parent=0,
        changes={"nav_title": "Events", "title": "Events", "template": "content", "in_nav": "on"},
        actor_id=editor.id,
    )

    page = create_page(
        actor_id=admin.id,
        nav_title="Events",
        title="Upcoming Events",
        template="content",
        in_nav=True,
        publishing_change_id=int(reference[1:]),
    )

    assert page.last_edited_by == admin.id
    assert _descriptions(page.id) == ["created"]
    assert PendingChange.query.count() == 0

import os
from datetime import timedelta

import pytest

from pagetree.application.cms.update_page import update_page
from pagetree.domain.invariants.exceptions import InvariantViolation, NotFoundError
from pagetree.extensions import db
from pagetree.models import AuditLog, Page, PageRevision, RouteHistory, Tag
from pagetree.models.base import utcnow
from pagetree.utils.cache import rendered_page_file
from pagetree.utils.tags import tag_ids_for


def _update(page, actor_id, **changes):
    """Resubmit a page with some fields changed, as the edit form would."""
    fields = dict(
        trunk=page.trunk,
        parent=page.parent,
        in_nav=page.in_nav,
        nav_title=page.nav_title,
        title=page.title,
        route=page.route,
        meta_description=page.meta_description,
        seo_invisible=page.seo_invisible,
        template=page.template,
        external=page.external,
        new_window=page.new_window,
        content=page.content,
        publish_at=page.publish_at,
        expire_at=page.expire_at,
        max_age=page.max_age,
    )
    fields.update(changes)
    return update_page(page_id=page.id, actor_id=actor_id, **fields)


def test_update_keeps_a_revision(make_page, admin, publisher):
    page = make_page("About", content={"page_content": "<p>First.</p>"})

    _update(page, publisher.id, title="About Our Company", content={"page_content": "<p>Second.</p>"})

    page = db.session.get(Page, page.id)
    assert page.title == "About Our Company"
    assert page.last_edited_by == publisher.id

    revisions = PageRevision.query.filter_by(page_id=page.id).all()
    assert len(revisions) == 1
    assert revisions[0].title == "About"
    assert revisions[0].content == {"page_content": "<p>First.</p>"}
    assert revisions[0].author_id == admin.id

    descriptions = [log.description for log in AuditLog.query.filter_by(entry=str(page.id)).order_by(AuditLog.id)]
    assert descriptions == ["created", "updated"]


def test_route_change_moves_the_subtree(make_page, admin):
    about = make_page("About")
    team = make_page("Team", parent=about.id)
    jane = make_page("Jane", parent=team.id)

    _update(about, admin.id, route="company")

    assert db.session.get(Page, about.id).path == "company"
    assert db.session.get(Page, team.id).path == "company/team"
    assert db.session.get(Page, jane.id).path == "company/team/jane"

    redirects = {row.old_route: row.new_route for row in RouteHistory.query.all()}
    assert redirects == {
        "about": "company",
        "about/team": "company/team",
        "about/team/jane": "company/team/jane",
    }

    inherited = AuditLog.query.filter_by(description="inherited path change").count()
    assert inherited == 2


def test_renaming_back_drops_the_stale_redirect(make_page, admin):
    about = make_page("About")

    _update(about, admin.id, route="company")
    _update(db.session.get(Page, about.id), admin.id, route="about")

    redirects = {row.old_route: row.new_route for row in RouteHistory.query.all()}
    assert redirects == {"company": "about"}


def test_route_collision_on_update(make_page, admin):
    make_page("Contact")
    other = make_page("Support")

    _update(other, admin.id, route="contact")

    assert db.session.get(Page, other.id).route == "contact-2"


def test_homepage_keeps_its_place(admin):
    homepage = db.session.get(Page, 0)

    _update(homepage, admin.id, title="Welcome", route="home", parent=5)

    homepage = db.session.get(Page, 0)
    assert homepage.title == "Welcome"
    assert homepage.route == ""
    assert homepage.parent == -1
    assert homepage.path == ""


def test_update_clears_caches(app, make_page, admin):
    page = make_page("About")
    cache_dir = app.config["CACHE_DIR"]

    rendered = rendered_page_file("about")
    navigation = os.path.join(cache_dir, "navigation-main.json")
    for path in (rendered, navigation):
        with open(path, "w") as handle:
            handle.write("cached")

    _update(page, admin.id, title="About Us")
    assert not os.path.exists(rendered)
    assert os.path.exists(navigation)

    _update(db.session.get(Page, page.id), admin.id, nav_title="About Us")
    assert not os.path.exists(navigation)


def test_cannot_move_under_own_descendant(make_page, admin):
    about = make_page("About")
    team = make_page("Team", parent=about.id)

    with pytest.raises(InvariantViolation):
        _update(about, admin.id, parent=team.id)

    assert db.session.get(Page, about.id).parent == 0
    assert PageRevision.query.count() == 0


def test_unknown_page(admin):
    with pytest.raises(NotFoundError):
        update_page(
            page_id=404,
            actor_id=admin.id,
            trunk=False,
            parent=0,
            in_nav=True,
            nav_title="Nope",
            title="Nope",
            route="",
            meta_description="",
            seo_invisible=False,
            template="content",
            external="",
            new_window=False,
            content={},
            publish_at=None,
            expire_at=None,
            max_age=0,
        )


def test_dates_are_stored_as_dates(make_page, admin):
    page = make_page("Sale")

    _update(page, admin.id, publish_at="2030-01-15", expire_at="2030-02-01T00:00:00")

    page = db.session.get(Page, page.id)
    assert page.publish_at.isoformat() == "2030-01-15"
    assert page.expire_at.isoformat() == "2030-02-01"


def test_tags_are_replaced_or_kept(make_page, admin):
    page = make_page("Blog", tags=["News"])

    _update(page, admin.id, title="The Blog")
    assert len(tag_ids_for(page.id)) == 1

    update_page(
        page_id=page.id,
        actor_id=admin.id,
        tags=["Events"],
        **db.session.get(Page, page.id).column_values(),
    )
    labels = sorted(db.session.get(Tag, tag_id).tag for tag_id in tag_ids_for(page.id))
    assert labels == ["Events"]
    assert Tag.query.filter_by(tag="News").one().usage_count == 0


def test_old_revisions_are_pruned(make_page, admin):
    page = make_page("About")
    old = utcnow() - timedelta(days=90)

    for index in range(12):
        revision = PageRevision()
        revision.page_id = page.id
        revision.title = f"Draft {index}"
        revision.updated_at = old + timedelta(minutes=index)
        db.session.add(revision)

    kept = PageRevision()
    kept.page_id = page.id
    kept.title = "Launch copy"
    kept.saved = True
    kept.updated_at = old - timedelta(days=30)
    db.session.add(kept)
    db.session.commit()

    _update(page, admin.id, title="About Us")

    unsaved = PageRevision.query.filter_by(page_id=page.id, saved=False).all()
    assert len(unsaved) == 10
    titles = {revision.title for revision in unsaved}
    assert "Draft 0" not in titles
    assert "Draft 2" not in titles
    assert "Draft 3" in titles
    assert "About" in titles
    assert PageRevision.query.filter_by(saved=True).count() == 1


def test_recent_revisions_survive_pruning(make_page, admin):
    page = make_page("About")

    for index in range(12):
        revision = PageRevision()
        revision.page_id = page.id
        revision.title = f"Draft {index}"
        revision.updated_at = utcnow() - timedelta(days=1)
        db.session.add(revision)
    db.session.commit()

    _update(page, admin.id, title="About Us")

    assert PageRevision.query.filter_by(page_id=page.id).count() == 13

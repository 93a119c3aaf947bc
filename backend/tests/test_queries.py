from datetime import date, timedelta

from pagetree.application.cms.archive_page import archive_page
from pagetree.application.cms.move_page import update_position
from pagetree.application.cms.queries import (
    all_by_tags,
    all_ids,
    audit_admin_links,
    get_alerts_for_user,
    get_archived_children,
    get_children,
    get_hidden_children,
    get_lineage,
    get_visible_children,
    search,
)
from pagetree.extensions import db
from pagetree.models import Page, Tag, User
from pagetree.models.base import utcnow


def _age(page, days):
    page = db.session.get(Page, page.id)
    page.updated_at = utcnow() - timedelta(days=days)
    db.session.commit()


def test_lineage_and_ids(make_page):
    about = make_page("About")
    team = make_page("Team", parent=about.id)
    jane = make_page("Jane", parent=team.id)

    assert get_lineage(jane.id) == [team.id, about.id]
    assert get_lineage(about.id) == []
    assert all_ids() == [0, about.id, team.id, jane.id]


def test_children_lists(make_page, admin):
    about = make_page("About")
    first = make_page("First", parent=about.id)
    second = make_page("Second", parent=about.id)
    update_position(page_id=first.id, position=1, actor_id=admin.id)
    update_position(page_id=second.id, position=2, actor_id=admin.id)
    hidden = make_page("Hidden", parent=about.id, in_nav=False)
    later = make_page("Later", parent=about.id, publish_at=date.today() + timedelta(days=30))
    gone = make_page("Gone", parent=about.id)
    archive_page(page_id=gone.id, actor_id=admin.id)

    assert [page.nav_title for page in get_children(about.id)] == ["First", "Hidden", "Later", "Second"]
    assert gone.id not in [page.id for page in get_children(about.id)]
    assert [page.id for page in get_hidden_children(about.id)] == [hidden.id]
    assert [page.id for page in get_archived_children(about.id)] == [gone.id]

    visible = [page.id for page in get_visible_children(about.id)]
    assert visible == [second.id, first.id]
    assert later.id not in visible


def test_search_ands_terms_and_skips_archived(make_page, admin):
    make_page("Annual Report", title="Annual Report 2023")
    make_page("Report Archive", title="Old Reports")
    gone = make_page("Annual Gala", title="Annual Gala Report")
    archive_page(page_id=gone.id, actor_id=admin.id)

    results = search("annual report")
    assert [page.nav_title for page in results] == ["Annual Report"]

    results = search("report")
    assert [page.nav_title for page in results] == ["Annual Report", "Report Archive"]

    assert search("   ") == []
    assert len(search("report", max_results=1)) == 1


def test_pages_by_tags_rank_best_match_first(make_page):
    one = make_page("One", tags=["Red"])
    both = make_page("Both", tags=["Red", "Blue"])
    make_page("None")

    red = Tag.query.filter_by(tag="Red").one().id
    blue = Tag.query.filter_by(tag="Blue").one().id

    assert [page.id for page in all_by_tags([red, blue])] == [both.id, one.id]
    assert all_by_tags([]) == []


def test_alerts_for_followed_subtree(make_page):
    news = make_page("News", max_age=5)
    story = make_page("Story", parent=news.id, max_age=30)
    other = make_page("Other", max_age=1)
    fresh = make_page("Fresh", parent=news.id, max_age=30)
    _age(news, 10)
    _age(story, 60)
    _age(other, 100)

    user = User()
    user.email = "watcher@example.com"
    user.alerts = [news.id]
    db.session.add(user)
    db.session.commit()

    alerts = get_alerts_for_user(user.id)

    assert [alert["id"] for alert in alerts] == [story.id, news.id]
    assert alerts[0]["current_age"] == 60
    assert fresh.id not in [alert["id"] for alert in alerts]

    user.alerts = ["*"]
    db.session.commit()
    assert [alert["id"] for alert in get_alerts_for_user(user.id)] == [other.id, story.id, news.id]


def test_admin_links_are_found(app, make_page):
    admin_root = app.config["ADMIN_ROOT"]
    linked = make_page("Linked", content={"page_content": f'<a href="{admin_root}pages/">edit</a>'})
    make_page("Clean", content={"page_content": "<p>Nothing here.</p>"})

    assert [page.id for page in audit_admin_links()] == [linked.id]


def test_search_treats_wildcards_literally(make_page):
    make_page("About")
    make_page("Rates", title="100% Guaranteed")

    assert search("_") == []
    assert [page.nav_title for page in search("%")] == ["Rates"]


def test_pages_by_tags_break_ties_by_id(make_page):
    pages = [make_page(f"Page {number}", tags=["Shared"]) for number in range(1, 11)]
    shared = Tag.query.filter_by(tag="Shared").one().id

    assert [page.id for page in all_by_tags([shared])] == [page.id for page in pages]


def test_admin_links_with_site_placeholder(app, make_page):
    admin_root = app.config["ADMIN_ROOT"]
    partial = "{wwwroot}" + admin_root[len(app.config["WWW_ROOT"]):]
    linked = make_page("Linked", content={"page_content": f'<a href="{partial}pages/">edit</a>'})

    assert [page.id for page in audit_admin_links()] == [linked.id]

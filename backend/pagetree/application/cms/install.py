from flask import current_app

from pagetree.extensions import db
from pagetree.models.page import Page, HOMEPAGE_ID, ROOT_ID
from pagetree.models.template import Template
from pagetree.utils.audit import log_action
from pagetree.utils.transaction import transactional

DEFAULT_TEMPLATES = (
    {
        "id": "home",
        "name": "Home",
        "position": 0,
        "fields": [
            {"id": "page_header", "type": "text", "title": "Page Header", "seo_h1": True},
            {"id": "page_content", "type": "html", "title": "Page Content", "seo_body": True},
        ],
    },
    {
        "id": "content",
        "name": "Content",
        "position": 1,
        "fields": [
            {"id": "page_header", "type": "text", "title": "Page Header", "seo_h1": True},
            {"id": "page_content", "type": "html", "title": "Page Content", "seo_body": True},
        ],
    },
)


def install_site(*, site_title: str = "Home", actor_id=None) -> Page:
    """
    Seed the default templates and the homepage. Safe to run twice.
    """
    with transactional():
        for definition in DEFAULT_TEMPLATES:
            if db.session.get(Template, definition["id"]) is not None:
                continue
            template = Template()
            template.id = definition["id"]
            template.name = definition["name"]
            template.position = definition["position"]
            template.fields = [dict(field) for field in definition["fields"]]
            db.session.add(template)

        homepage = db.session.get(Page, HOMEPAGE_ID)
        if homepage is None:
            homepage = Page()
            homepage.id = HOMEPAGE_ID
            homepage.parent = ROOT_ID
            homepage.route = ""
            homepage.path = ""
            homepage.nav_title = site_title
            homepage.title = site_title
            homepage.template = "home"
            homepage.in_nav = True
            homepage.content = {}
            homepage.last_edited_by = actor_id
            db.session.add(homepage)
            db.session.flush()

            log_action(
                table="pages",
                entity_id=HOMEPAGE_ID,
                action="add",
                description="created",
                user_id=actor_id,
            )
            current_app.logger.info("Homepage installed")

    return homepage

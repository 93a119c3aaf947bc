from pagetree.domain.preview import PagePreview
from pagetree.domain.seo import EXEMPT_COLOR, EXEMPT_TEMPLATE, describe, score_color


def normalize_page(page, admin=False, tags=None):
    """Page or PagePreview as API JSON."""
    if isinstance(page, PagePreview):
        return page.to_dict()

    data = {
        "id": page.id,
        "parent": page.parent,
        "trunk": page.trunk,
        "in_nav": page.in_nav,
        "nav_title": page.nav_title,
        "title": page.title,
        "route": page.route,
        "path": page.path,
        "meta_description": page.meta_description,
        "seo_invisible": page.seo_invisible,
        "template": page.template,
        "external": page.external,
        "new_window": page.new_window,
        "content": page.content or {},
        "open_graph": page.open_graph or {},
        "publish_at": page.publish_at.isoformat() if page.publish_at else None,
        "expire_at": page.expire_at.isoformat() if page.expire_at else None,
        "position": page.position,
        "archived": page.archived,
        "updated_at": page.updated_at.isoformat() if page.updated_at else None,
    }

    if tags is not None:
        data["tags"] = list(tags)

    if admin:
        data.update({
            "archived_inherited": page.archived_inherited,
            "max_age": page.max_age,
            "last_edited_by": page.last_edited_by,
            "seo": {
                "score": page.seo_score,
                "color": _color(page),
                "recommendations": page.seo_recommendations or [],
                "messages": [
                    describe(item["code"], item.get("value"))
                    for item in page.seo_recommendations or []
                ],
            },
        })

    return data


def _color(page):
    if not page.template or page.template == EXEMPT_TEMPLATE:
        return EXEMPT_COLOR
    return score_color(page.seo_score)


def normalize_revision(revision):
    return {
        "id": revision.id,
        "page_id": revision.page_id,
        "title": revision.title,
        "author_id": revision.author_id,
        "saved": revision.saved,
        "saved_description": revision.saved_description,
        "updated_at": revision.updated_at.isoformat(),
    }

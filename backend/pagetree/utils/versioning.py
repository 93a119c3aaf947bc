REVISION_FIELDS = ("title", "meta_description", "template", "external", "new_window", "content")


def snapshot_page(page):
    """Editable content of a page, as stored on a revision."""
    return {
        "title": page.title,
        "meta_description": page.meta_description,
        "template": page.template,
        "external": page.external,
        "new_window": page.new_window,
        "content": dict(page.content or {}),
    }

from datetime import datetime
from typing import Any, Mapping, Optional

from pagetree.domain.seo import SEORating, rate_page
from pagetree.models.page import Page
from pagetree.utils.templates import fields_for


def get_seo_rating(
    page_id: Optional[int],
    template: Optional[str],
    title: Optional[str],
    meta_description: Optional[str],
    content: Optional[Mapping[str, Any]],
    last_updated: Optional[datetime],
    *,
    now: Optional[datetime] = None,
) -> SEORating:
    """
    Rate a page against the stored tree.

    page_id is None for a page that does not exist yet, in which case
    every page with the same title counts as a duplicate.
    """
    duplicates = 0
    if title:
        query = Page.query.filter(Page.title == title)
        if page_id is not None:
            query = query.filter(Page.id != page_id)
        duplicates = query.count()

    return rate_page(
        template=template,
        title=title,
        meta_description=meta_description,
        content=content,
        last_updated=last_updated,
        template_fields=fields_for(template),
        duplicate_titles=duplicates,
        now=now,
    )

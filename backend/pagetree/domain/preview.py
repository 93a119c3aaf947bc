from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Union

from .diff import PageDiff, FLAG_FIELDS


@dataclass
class PagePreview:
    """
    A page as it would look with a draft or revision applied.

    Never persisted: publishing goes back through create/update.
    """

    id: Union[int, str, None] = None
    trunk: bool = False
    parent: int = 0
    in_nav: bool = True
    nav_title: str = ""
    title: str = ""
    route: str = ""
    path: str = ""
    meta_description: str = ""
    seo_invisible: bool = False
    template: str = ""
    external: str = ""
    new_window: bool = False
    content: Dict[str, Any] = field(default_factory=dict)
    open_graph: Dict[str, Any] = field(default_factory=dict)
    archived: bool = False
    archived_inherited: bool = False
    publish_at: Optional[str] = None
    expire_at: Optional[str] = None
    max_age: int = 0
    seo_score: int = 0
    seo_recommendations: List[Dict[str, Any]] = field(default_factory=list)
    position: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    last_edited_by: Optional[int] = None
    tags: List[Any] = field(default_factory=list)

    changes_applied: bool = False
    change_id: Optional[int] = None
    revision: Optional[Dict[str, Any]] = None

    @classmethod
    def from_page(cls, page, tags: Optional[List[Any]] = None) -> "PagePreview":
        return cls(
            id=page.id,
            trunk=page.trunk,
            parent=page.parent,
            in_nav=page.in_nav,
            nav_title=page.nav_title,
            title=page.title,
            route=page.route,
            path=page.path,
            meta_description=page.meta_description,
            seo_invisible=page.seo_invisible,
            template=page.template,
            external=page.external,
            new_window=page.new_window,
            content=dict(page.content or {}),
            open_graph=dict(page.open_graph or {}),
            archived=page.archived,
            archived_inherited=page.archived_inherited,
            publish_at=_iso(page.publish_at),
            expire_at=_iso(page.expire_at),
            max_age=page.max_age,
            seo_score=page.seo_score,
            seo_recommendations=list(page.seo_recommendations or []),
            position=page.position,
            created_at=page.created_at,
            updated_at=page.updated_at,
            last_edited_by=page.last_edited_by,
            tags=list(tags or []),
        )

    def apply(self, diff: PageDiff) -> "PagePreview":
        """Override only the fields present in the diff."""
        for name, value in diff.items():
            if name in FLAG_FIELDS:
                value = bool(value)
            setattr(self, name, value)
        return self

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        for key in ("created_at", "updated_at"):
            if data[key] is not None:
                data[key] = data[key].isoformat()
        return data


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value is not None else None

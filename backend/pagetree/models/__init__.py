from .audit_log import AuditLog
from .page import Page, ROOT_ID, HOMEPAGE_ID
from .page_revision import PageRevision
from .pending_change import PendingChange, PENDING_PREFIX
from .route_history import RouteHistory
from .tag import Tag, TagRelation
from .template import Template
from .user import User

__all__ = [
    "AuditLog",
    "Page",
    "ROOT_ID",
    "HOMEPAGE_ID",
    "PageRevision",
    "PendingChange",
    "PENDING_PREFIX",
    "RouteHistory",
    "Tag",
    "TagRelation",
    "Template",
    "User",
]

from pagetree.extensions import db
from pagetree.domain.diff import PageDiff
from .base import BaseModel, utcnow

PENDING_PREFIX = "p"


class PendingChange(BaseModel):
    __tablename__ = "pending_changes"

    user_id = db.Column(db.Integer, nullable=False, index=True)
    date = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)
    title = db.Column(db.String(255), nullable=False, default="Page Change Pending")
    comments = db.Column(db.Text, nullable=False, default="")
    table = db.Column(db.String(255), nullable=False, default="pages", index=True)

    changes = db.Column(db.JSON, nullable=False, default=dict)
    tags_changes = db.Column(db.JSON, nullable=False, default=list)
    open_graph_changes = db.Column(db.JSON, nullable=False, default=dict)

    # Null while the page itself is still a draft
    item_id = db.Column(
        db.Integer,
        db.ForeignKey("pages.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    pending_page_parent = db.Column(db.Integer, nullable=True, index=True)

    @property
    def diff(self) -> PageDiff:
        return PageDiff.from_mapping(self.changes)

    @diff.setter
    def diff(self, value: PageDiff):
        self.changes = value.as_dict()

    @property
    def reference(self) -> str:
        """Identifier used for drafts of pages that do not exist yet."""
        return f"{PENDING_PREFIX}{self.id}"

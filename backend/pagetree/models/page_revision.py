from pagetree.extensions import db
from .base import BaseModel, utcnow

class PageRevision(BaseModel):
    __tablename__ = "page_revisions"

    page_id = db.Column(
        db.Integer,
        db.ForeignKey("pages.id", ondelete="CASCADE"),
        nullable=False
    )

    title = db.Column(db.String(255), nullable=False, default="")
    meta_description = db.Column(db.Text, nullable=False, default="")
    template = db.Column(db.String(255), nullable=False, default="")
    external = db.Column(db.String(255), nullable=False, default="")
    new_window = db.Column(db.Boolean, nullable=False, default=False)
    content = db.Column(db.JSON, nullable=False, default=dict)

    author_id = db.Column(db.Integer, nullable=True)

    # Saved revisions are exempt from pruning
    saved = db.Column(db.Boolean, nullable=False, default=False, index=True)
    saved_description = db.Column(db.Text, nullable=False, default="")

    # Timestamp of the content captured, not of the snapshot itself
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)

    page = db.relationship("Page", back_populates="revisions")

    __table_args__ = (
        db.Index("idx_page_revision_page", "page_id", "saved"),
    )

from pagetree.extensions import db
from .base import BaseModel


class Tag(BaseModel):
    __tablename__ = "tags"

    tag = db.Column(db.String(255), nullable=False, unique=True)
    route = db.Column(db.String(255), nullable=True, index=True)
    usage_count = db.Column(db.Integer, nullable=False, default=0)


class TagRelation(BaseModel):
    __tablename__ = "tag_relations"

    table = db.Column(db.String(255), nullable=False, default="pages")
    entry = db.Column(db.String(36), nullable=False, index=True)
    tag_id = db.Column(
        db.Integer,
        db.ForeignKey("tags.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    __table_args__ = (
        db.UniqueConstraint("table", "entry", "tag_id", name="uq_tag_relation"),
    )

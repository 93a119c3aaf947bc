from pagetree.extensions import db
from pagetree.domain.diff import DIFFABLE_FIELDS
from .base import BaseModel

ROOT_ID = -1
HOMEPAGE_ID = 0


class Page(BaseModel):
    __tablename__ = 'pages'

    trunk = db.Column(db.Boolean, nullable=False, default=False)
    # -1 for the homepage, otherwise the id of another page
    parent = db.Column(db.Integer, nullable=False, default=HOMEPAGE_ID, index=True)
    in_nav = db.Column(db.Boolean, nullable=False, default=True, index=True)
    nav_title = db.Column(db.String(255), nullable=False, default="")
    title = db.Column(db.String(255), nullable=False, default="")
    route = db.Column(db.String(255), nullable=False, default="", index=True)
    path = db.Column(db.Text, nullable=False, default="", index=True)

    meta_description = db.Column(db.Text, nullable=False, default="")
    seo_invisible = db.Column(db.Boolean, nullable=False, default=False)
    template = db.Column(db.String(255), nullable=False, default="")
    external = db.Column(db.String(255), nullable=False, default="")
    new_window = db.Column(db.Boolean, nullable=False, default=False)
    content = db.Column(db.JSON, nullable=False, default=dict)
    open_graph = db.Column(db.JSON, nullable=False, default=dict)

    archived = db.Column(db.Boolean, nullable=False, default=False, index=True)
    archived_inherited = db.Column(db.Boolean, nullable=False, default=False)

    publish_at = db.Column(db.Date, nullable=True, index=True)
    expire_at = db.Column(db.Date, nullable=True, index=True)
    max_age = db.Column(db.Integer, nullable=False, default=0)

    seo_score = db.Column(db.Integer, nullable=False, default=0)
    seo_recommendations = db.Column(db.JSON, nullable=False, default=list)

    position = db.Column(db.Integer, nullable=False, default=0, index=True)
    last_edited_by = db.Column(db.Integer, nullable=True)

    revisions = db.relationship(
        "PageRevision",
        back_populates="page",
        cascade="all, delete-orphan",
    )

    @property
    def is_homepage(self) -> bool:
        return self.id == HOMEPAGE_ID

    def column_values(self) -> dict:
        """JSON-compatible values of every diffable column."""
        row = {}
        for field in DIFFABLE_FIELDS:
            value = getattr(self, field)
            if field in ("publish_at", "expire_at") and value is not None:
                value = value.isoformat()
            row[field] = value
        return row

    def __repr__(self):
        return f"<Page {self.id} {self.path!r}>"

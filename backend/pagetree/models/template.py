from pagetree.extensions import db
from .base import utcnow


class Template(db.Model):
    __tablename__ = "templates"

    id = db.Column(db.String(255), primary_key=True)
    name = db.Column(db.String(255), nullable=False, default="")
    description = db.Column(db.Text, nullable=False, default="")
    # [{"id": "page_content", "type": "html", "seo_body": true}, ...]
    fields = db.Column(db.JSON, nullable=False, default=list)
    position = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime, default=utcnow)

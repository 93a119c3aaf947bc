from pagetree.extensions import db
from .base import BaseModel

# Page access levels, strongest first
PUBLISHER = "p"
EDITOR = "e"
NO_ACCESS = "n"

class User(BaseModel):
    __tablename__ = 'users'

    email = db.Column(db.String(120), unique=True, nullable=False)
    name = db.Column(db.String(255), nullable=False, default="")

    # 0 = regular user, 1 = administrator, 2 = developer
    level = db.Column(db.Integer, nullable=False, default=0)
    # {"page": {"<page id>": "p" | "e" | "n"}}
    permissions = db.Column(db.JSON, nullable=False, default=dict)
    # Page ids whose subtree the user follows for content age alerts, "*" for all
    alerts = db.Column(db.JSON, nullable=False, default=list)

    def page_permission(self, page_id):
        return (self.permissions or {}).get("page", {}).get(str(page_id))

    def follows_whole_tree(self) -> bool:
        return "*" in (self.alerts or [])

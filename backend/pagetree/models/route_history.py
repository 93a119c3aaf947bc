from pagetree.extensions import db
from .base import BaseModel


class RouteHistory(BaseModel):
    """An old page path and the path it now redirects to."""

    __tablename__ = "route_history"

    old_route = db.Column(db.String(255), nullable=False, index=True)
    new_route = db.Column(db.String(255), nullable=False)

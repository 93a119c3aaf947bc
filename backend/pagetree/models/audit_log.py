# pagetree/models/audit_log.py
from pagetree.extensions import db
from .base import BaseModel
from sqlalchemy import event


class AuditLog(BaseModel):
    __tablename__ = "audit_logs"

    __table_args__ = (
        db.Index("ix_audit_entry", "table", "entry", "created_at"),
        db.Index("ix_audit_user_type", "user_id", "type"),
    )

    table = db.Column(db.String(255), nullable=False, index=True)
    entry = db.Column(db.String(36), nullable=False, index=True)
    # add | update | delete
    type = db.Column(db.String(50), nullable=False, index=True)
    description = db.Column(db.String(255), nullable=False, default="")

    user_id = db.Column(db.Integer, nullable=True, index=True)

    def to_dict(self):
        return {
            "id": self.id,
            "table": self.table,
            "entry": self.entry,
            "type": self.type,
            "description": self.description,
            "user_id": self.user_id,
            "created_at": self.created_at.isoformat()
        }

@event.listens_for(AuditLog, 'before_update')
@event.listens_for(AuditLog, 'before_delete')
def prevent_audit_mutation(mapper, connection, target):
    raise RuntimeError("Audit logs are immutable")

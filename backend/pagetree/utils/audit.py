from pagetree.extensions import db
from pagetree.models.audit_log import AuditLog
from typing import Optional, Union

def log_action(
    *,
    table: str,
    entity_id: Union[int, str, None],
    action: str,
    description: str,
    user_id: Optional[int] = None,
) -> AuditLog:
    """
    Append an audit trail entry to the current unit of work.

    action is one of add / update / delete; description is the
    human-readable reason ("archived", "inherited path change", ...).
    """
    log = AuditLog()

    log.table = table
    log.entry = "" if entity_id is None else str(entity_id)
    log.type = action
    log.description = description
    log.user_id = user_id

    db.session.add(log)
    return log

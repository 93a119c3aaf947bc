# pagetree/normalizers/audit.py
from __future__ import annotations

from typing import Dict, Any
from pagetree.models.audit_log import AuditLog


def normalize_audit_log(log: AuditLog) -> Dict[str, Any]:
    """
    Normalizes an AuditLog model into API-safe JSON.

    entry is a string: page ids and "p<id>" pending references share it.
    """

    if not log:
        raise ValueError("AuditLog cannot be None")

    return log.to_dict()

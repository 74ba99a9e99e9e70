"""
Audit logging service
"""
from typing import Optional, Dict, Any
from sqlalchemy.orm import Session
from pointage.models.audit_log import AuditLog
from pointage.utils.datetime_utils import now_utc
from pointage.utils.json_serializer import sanitize_for_json


def log_audit(
    db: Session,
    actor_id: int,
    action: str,
    entity_type: str,
    entity_id: Optional[int] = None,
    meta: Optional[Dict[str, Any]] = None
) -> AuditLog:
    """
    Create an audit log entry

    Args:
        db: Database session
        actor_id: ID of the user performing the action
        action: Action type (e.g., "ATTENDANCE_SCAN_ENTRY", "ATTENDANCE_VALIDATE")
        entity_type: Type of entity (e.g., "attendance_records")
        entity_id: ID of the affected entity (optional)
        meta: Additional metadata as dictionary (optional)

    Returns:
        Created AuditLog instance
    """
    audit_log = AuditLog(
        actor_id=actor_id,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        meta_json=sanitize_for_json(meta) if meta is not None else None,
        created_at=now_utc()
    )
    db.add(audit_log)
    db.commit()
    db.refresh(audit_log)
    return audit_log

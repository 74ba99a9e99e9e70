"""
Database models
"""
from pointage.models.user import User, Role
from pointage.models.attendance import AttendanceRecord, AttendanceStatus, STATUS_LABELS
from pointage.models.audit_log import AuditLog

__all__ = [
    "User",
    "Role",
    "AttendanceRecord",
    "AttendanceStatus",
    "STATUS_LABELS",
    "AuditLog",
]

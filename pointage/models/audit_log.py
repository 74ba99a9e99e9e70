"""
Audit log model
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON
from pointage.db.base import Base


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True)
    actor_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    action = Column(String, nullable=False)  # e.g., "ATTENDANCE_SCAN_ENTRY", "ATTENDANCE_VALIDATE"
    entity_type = Column(String, nullable=False)  # e.g., "attendance_records"
    entity_id = Column(Integer, nullable=True)
    meta_json = Column(JSON, nullable=True)
    # Set explicitly by the service; server_default handled by migration
    created_at = Column(DateTime(timezone=True), nullable=False)

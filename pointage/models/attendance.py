"""
Attendance record model: one row per user and work date.
"""
from sqlalchemy import Column, Integer, Date, DateTime, ForeignKey, String, Text, JSON, UniqueConstraint, Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum
from pointage.db.base import Base


class AttendanceStatus(str, enum.Enum):
    NOT_SCANNED = "NOT_SCANNED"  # derived only, never stored
    PRESENT = "PRESENT"
    CHECKED_OUT = "CHECKED_OUT"
    PENDING = "PENDING"
    MODIFIED = "MODIFIED"
    VALIDATED = "VALIDATED"

    @property
    def label(self) -> str:
        return STATUS_LABELS[self]


# Labels shown by the mobile and web clients
STATUS_LABELS = {
    AttendanceStatus.NOT_SCANNED: "Jour non scanné",
    AttendanceStatus.PRESENT: "Présent",
    AttendanceStatus.CHECKED_OUT: "Rentré",
    AttendanceStatus.PENDING: "En attente",
    AttendanceStatus.MODIFIED: "Modifié",
    AttendanceStatus.VALIDATED: "Validé",
}


class AttendanceRecord(Base):
    __tablename__ = "attendance_records"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    work_date = Column(Date, nullable=False, index=True)  # local date in settings.WORK_TZ
    entry_time = Column(DateTime(timezone=True), nullable=True)  # server UTC timestamp
    exit_time = Column(DateTime(timezone=True), nullable=True)  # server UTC timestamp
    status = Column(SQLEnum(AttendanceStatus), nullable=False, default=AttendanceStatus.PRESENT)
    comment = Column(Text, nullable=True)
    validated_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    validated_at = Column(DateTime(timezone=True), nullable=True)
    location = Column(JSON, nullable=True)  # {"latitude": .., "longitude": ..} captured at entry
    site = Column(String, nullable=True)  # place label from web QR payloads
    created_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), onupdate=func.current_timestamp(), nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "work_date", name="uq_attendance_records_user_work_date"),
    )

    user = relationship("User", foreign_keys=[user_id], backref="attendance_records")
    validator = relationship("User", foreign_keys=[validated_by])

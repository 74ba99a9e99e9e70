"""
Attendance schemas: scan requests, QR payloads and record output.
"""
import json
from datetime import date, datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_serializer, field_validator

from pointage.models.attendance import AttendanceStatus
from pointage.services.status_service import format_duration, work_duration
from pointage.utils.datetime_utils import iso_local


class QrPayload(BaseModel):
    """Web-variant QR content: {"type": "entry"|"exit", "location": ..., "timestamp": ...}"""
    type: Literal["entry", "exit"]
    location: Optional[str] = None
    timestamp: Optional[datetime] = None


class ScanRequest(BaseModel):
    """Decoded QR text plus the device position (omit lat/lon when location access was refused)"""
    payload: str = Field(..., description="Raw text decoded from the QR code")
    lat: Optional[float] = Field(None, ge=-90, le=90, description="GPS latitude")
    lon: Optional[float] = Field(None, ge=-180, le=180, description="GPS longitude")


class CommentRequest(BaseModel):
    comment: str = Field(..., max_length=2000)


def _ensure_location_dict(v: Any) -> Optional[Dict[str, Any]]:
    """ORM may return str for SQLite JSON column."""
    if v is None or isinstance(v, dict):
        return v
    if isinstance(v, str):
        try:
            return json.loads(v)
        except (TypeError, ValueError):
            return None
    return None


class RecordDto(BaseModel):
    """Attendance record output; datetimes in the local work zone."""
    id: int
    user_id: int
    work_date: date
    entry_time: Optional[datetime] = None
    exit_time: Optional[datetime] = None
    status: AttendanceStatus
    comment: Optional[str] = None
    validated_by: Optional[int] = None
    validated_at: Optional[datetime] = None
    location: Optional[Dict[str, Any]] = None
    site: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_validator("location", mode="before")
    @classmethod
    def location_to_dict(cls, v: Any) -> Optional[Dict[str, Any]]:
        return _ensure_location_dict(v)

    @computed_field
    @property
    def status_label(self) -> str:
        return self.status.label

    @field_serializer("entry_time", "exit_time", "validated_at", "created_at", "updated_at", when_used="always")
    def _serialize_datetime_local(self, dt: Optional[datetime]) -> Optional[str]:
        return iso_local(dt)


class RecordDetailDto(RecordDto):
    """Record with the worked duration (HH:MM) once the day is closed."""

    @computed_field
    @property
    def work_duration(self) -> Optional[str]:
        return format_duration(work_duration(self))


class RecordListResponse(BaseModel):
    items: List[RecordDto]
    total: int


class ScanResponse(BaseModel):
    """Outcome of a scan: the record and the status transition it caused"""
    action: Literal["entry", "exit"]
    previous_status: AttendanceStatus
    status: AttendanceStatus
    message: str
    record: RecordDto


class TodaySummaryDto(BaseModel):
    work_date: date
    status: AttendanceStatus
    status_label: str
    checked_in: bool
    entry_time: Optional[datetime] = None
    exit_time: Optional[datetime] = None
    days_present_this_week: int
    record: Optional[RecordDetailDto] = None

    @field_serializer("entry_time", "exit_time", when_used="always")
    def _serialize_datetime_local(self, dt: Optional[datetime]) -> Optional[str]:
        return iso_local(dt)

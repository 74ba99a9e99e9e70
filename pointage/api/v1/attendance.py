"""
Attendance endpoints: QR scan, today's status, history, comment, submit and
manager validation. Every handler passes the resolved session explicitly to
the service layer.
"""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from pointage.core.deps import get_db, get_current_session
from pointage.schemas.auth import UserSession
from pointage.schemas.attendance import (
    CommentRequest,
    RecordDetailDto,
    RecordDto,
    RecordListResponse,
    ScanRequest,
    ScanResponse,
    TodaySummaryDto,
)
from pointage.services.attendance_service import (
    comment_record,
    get_record,
    list_records,
    submit_record,
    today_summary,
    validate_record,
)
from pointage.services.geofence_service import Position
from pointage.services.record_store import RecordFilter
from pointage.services.scan_service import process_scan

router = APIRouter()
_log = logging.getLogger(__name__)


@router.post("/scan", response_model=ScanResponse)
async def scan_endpoint(
    body: ScanRequest,
    db: Session = Depends(get_db),
    session: UserSession = Depends(get_current_session),
):
    """
    Register a scan for the current user: first scan of the day records the
    entry, the second the exit. A third scan is rejected (409 ALREADY_CLOSED).
    Omit lat/lon when location access was refused.
    """
    position = None
    if body.lat is not None and body.lon is not None:
        position = Position(lat=body.lat, lon=body.lon)

    result = process_scan(db, session, body.payload, position=position)
    return ScanResponse(
        action=result.action.value,
        previous_status=result.previous_status,
        status=result.status,
        message=result.message,
        record=RecordDto.model_validate(result.record),
    )


@router.get("/today", response_model=TodaySummaryDto)
async def today_endpoint(
    db: Session = Depends(get_db),
    session: UserSession = Depends(get_current_session),
):
    """Today's derived status for the current user (NOT_SCANNED when no record)."""
    summary = today_summary(db, session)
    record = summary.record
    return TodaySummaryDto(
        work_date=summary.work_date,
        status=summary.status,
        status_label=summary.status.label,
        checked_in=summary.checked_in,
        entry_time=record.entry_time if record else None,
        exit_time=record.exit_time if record else None,
        days_present_this_week=summary.days_present_this_week,
        record=RecordDetailDto.model_validate(record) if record else None,
    )


@router.get("/my", response_model=RecordListResponse)
async def my_endpoint(
    status_filter: RecordFilter = Query(RecordFilter.ALL, alias="filter", description="all | pending | validated"),
    days: Optional[int] = Query(None, ge=1, le=366, description="Only the most recent N work days"),
    db: Session = Depends(get_db),
    session: UserSession = Depends(get_current_session),
):
    """Own attendance records, newest first."""
    records = list_records(db, session, status_filter=status_filter, days=days)
    return RecordListResponse(
        items=[RecordDto.model_validate(r) for r in records],
        total=len(records),
    )


@router.get("/users/{user_id}", response_model=RecordListResponse)
async def user_records_endpoint(
    user_id: int,
    status_filter: RecordFilter = Query(RecordFilter.ALL, alias="filter", description="all | pending | validated"),
    days: Optional[int] = Query(None, ge=1, le=366, description="Only the most recent N work days"),
    db: Session = Depends(get_db),
    session: UserSession = Depends(get_current_session),
):
    """Another user's records (managers only), newest first."""
    records = list_records(db, session, user_id=user_id, status_filter=status_filter, days=days)
    return RecordListResponse(
        items=[RecordDto.model_validate(r) for r in records],
        total=len(records),
    )


@router.get("/{record_id}", response_model=RecordDetailDto)
async def record_endpoint(
    record_id: int,
    db: Session = Depends(get_db),
    session: UserSession = Depends(get_current_session),
):
    """Record detail with worked duration."""
    return RecordDetailDto.model_validate(get_record(db, session, record_id))


@router.patch("/{record_id}/comment", response_model=RecordDetailDto)
async def comment_endpoint(
    record_id: int,
    body: CommentRequest,
    db: Session = Depends(get_db),
    session: UserSession = Depends(get_current_session),
):
    """Add or replace the comment; the record becomes MODIFIED."""
    record = comment_record(db, session, record_id, body.comment)
    return RecordDetailDto.model_validate(record)


@router.post("/{record_id}/submit", response_model=RecordDetailDto)
async def submit_endpoint(
    record_id: int,
    db: Session = Depends(get_db),
    session: UserSession = Depends(get_current_session),
):
    """Submit own record for manager review (PENDING)."""
    return RecordDetailDto.model_validate(submit_record(db, session, record_id))


@router.post("/{record_id}/validate", response_model=RecordDetailDto)
async def validate_endpoint(
    record_id: int,
    db: Session = Depends(get_db),
    session: UserSession = Depends(get_current_session),
):
    """Manager validation; 403 NOT_AUTHORIZED for other roles."""
    record = validate_record(db, session, record_id)
    _log.info("Record %s validated by %s", record.id, session.user_id)
    return RecordDetailDto.model_validate(record)

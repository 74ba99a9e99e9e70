"""
Attendance review operations: history, today summary, comment, submit for
review and manager validation.
"""
import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable, List, Optional

from sqlalchemy.orm import Session

from pointage.core.exceptions import InvalidTransition, NotAuthorized, NotFound
from pointage.models.attendance import AttendanceRecord, AttendanceStatus
from pointage.models.user import Role
from pointage.schemas.auth import UserSession
from pointage.services.audit_service import log_audit
from pointage.services.record_store import RecordFilter, RecordStore, SqlAlchemyRecordStore
from pointage.services.status_service import (
    days_present_this_week,
    derive_today_status,
    is_currently_checked_in,
    recent_days,
    today_record,
)
from pointage.services.user_service import role_of
from pointage.utils.datetime_utils import get_work_date, now_utc

_log = logging.getLogger(__name__)

RoleProvider = Callable[[Session, int], Role]


@dataclass(frozen=True)
class TodaySummary:
    work_date: date
    status: AttendanceStatus
    checked_in: bool
    days_present_this_week: int
    record: Optional[AttendanceRecord]


def _is_manager(db: Session, session: UserSession, role_provider: RoleProvider) -> bool:
    return role_provider(db, session.user_id) == Role.MANAGER


def get_record(
    db: Session,
    session: UserSession,
    record_id: int,
    *,
    store: Optional[RecordStore] = None,
    role_provider: RoleProvider = role_of,
) -> AttendanceRecord:
    """Record detail; visible to its owner and to managers."""
    store = store or SqlAlchemyRecordStore(db)
    record = store.get_by_id(record_id)
    if record is None:
        raise NotFound(f"Attendance record {record_id} not found")
    if record.user_id != session.user_id and not _is_manager(db, session, role_provider):
        raise NotAuthorized("You can only view your own attendance records")
    return record


def list_records(
    db: Session,
    session: UserSession,
    user_id: Optional[int] = None,
    status_filter: RecordFilter = RecordFilter.ALL,
    days: Optional[int] = None,
    *,
    store: Optional[RecordStore] = None,
    role_provider: RoleProvider = role_of,
) -> List[AttendanceRecord]:
    """
    Records of a user, newest first. Defaults to the session user; other
    users' history requires the MANAGER role. With days set, only the most
    recent that many work days are returned.
    """
    store = store or SqlAlchemyRecordStore(db)
    target = session.user_id if user_id is None else user_id
    if target != session.user_id and not _is_manager(db, session, role_provider):
        raise NotAuthorized("You can only view your own attendance records")
    records = store.list_by_user(target, status_filter)
    if days is not None:
        return recent_days(records, days)
    return records


def today_summary(
    db: Session,
    session: UserSession,
    now: Optional[datetime] = None,
    *,
    store: Optional[RecordStore] = None,
) -> TodaySummary:
    """Derived status of the session user's current work day."""
    store = store or SqlAlchemyRecordStore(db)
    today = get_work_date(now)
    records = store.list_by_user(session.user_id)
    return TodaySummary(
        work_date=today,
        status=derive_today_status(records, today),
        checked_in=is_currently_checked_in(records, today),
        days_present_this_week=days_present_this_week(records, today),
        record=today_record(records, today),
    )


def comment_record(
    db: Session,
    session: UserSession,
    record_id: int,
    comment: str,
    *,
    store: Optional[RecordStore] = None,
    role_provider: RoleProvider = role_of,
) -> AttendanceRecord:
    """Set the comment and mark the record MODIFIED (owner or manager, before validation)."""
    store = store or SqlAlchemyRecordStore(db)
    record = get_record(db, session, record_id, store=store, role_provider=role_provider)
    if AttendanceStatus(record.status) == AttendanceStatus.VALIDATED:
        raise InvalidTransition("Validated records can no longer be modified")

    previous_status = AttendanceStatus(record.status)
    record = store.update(record.id, {"comment": comment, "status": AttendanceStatus.MODIFIED})
    log_audit(
        db=db,
        actor_id=session.user_id,
        action="ATTENDANCE_COMMENT",
        entity_type="attendance_records",
        entity_id=record.id,
        meta={"previous_status": previous_status, "comment": comment},
    )
    return record


def submit_record(
    db: Session,
    session: UserSession,
    record_id: int,
    *,
    store: Optional[RecordStore] = None,
) -> AttendanceRecord:
    """Owner submits a record for manager review: status PENDING."""
    store = store or SqlAlchemyRecordStore(db)
    record = store.get_by_id(record_id)
    if record is None:
        raise NotFound(f"Attendance record {record_id} not found")
    if record.user_id != session.user_id:
        raise NotAuthorized("You can only submit your own attendance records")

    previous_status = AttendanceStatus(record.status)
    if previous_status == AttendanceStatus.PENDING:
        return record

    record = store.update(record.id, {"status": AttendanceStatus.PENDING})
    log_audit(
        db=db,
        actor_id=session.user_id,
        action="ATTENDANCE_SUBMIT",
        entity_type="attendance_records",
        entity_id=record.id,
        meta={"previous_status": previous_status},
    )
    return record


def validate_record(
    db: Session,
    session: UserSession,
    record_id: int,
    now: Optional[datetime] = None,
    *,
    store: Optional[RecordStore] = None,
    role_provider: RoleProvider = role_of,
) -> AttendanceRecord:
    """
    Manager finalizes a record: VALIDATED, validated_by and validated_at set.

    Raises:
        NotAuthorized: the session user is not a MANAGER (checked first, no mutation)
        NotFound: no such record
        InvalidTransition: the record is already validated
    """
    if not _is_manager(db, session, role_provider):
        _log.info("Validation refused for non-manager user_id=%s", session.user_id)
        raise NotAuthorized("Only managers can validate attendance records")

    store = store or SqlAlchemyRecordStore(db)
    record = store.get_by_id(record_id)
    if record is None:
        raise NotFound(f"Attendance record {record_id} not found")
    if record.validated_by is not None or AttendanceStatus(record.status) == AttendanceStatus.VALIDATED:
        raise InvalidTransition("Record is already validated")

    now = now or now_utc()
    previous_status = AttendanceStatus(record.status)
    record = store.update(record.id, {
        "status": AttendanceStatus.VALIDATED,
        "validated_by": session.user_id,
        "validated_at": now,
    })
    log_audit(
        db=db,
        actor_id=session.user_id,
        action="ATTENDANCE_VALIDATE",
        entity_type="attendance_records",
        entity_id=record.id,
        meta={"previous_status": previous_status, "validated_at": now, "owner_id": record.user_id},
    )
    return record

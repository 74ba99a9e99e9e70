"""
Scan event processor: turns one QR scan into an attendance store mutation.

State machine per (user_id, work_date):
    no record  --scan--> record created, entry_time=now, PRESENT
    open entry --scan--> exit_time=now, CHECKED_OUT
    closed     --scan--> AlreadyClosed (no mutation)

Payloads are either the configured marker text (the scan toggles entry/exit)
or a JSON object whose "type" tag names the expected transition.
"""
import enum
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from pydantic import ValidationError
from sqlalchemy.orm import Session

from pointage.core.config import settings
from pointage.core.exceptions import AlreadyClosed, DuplicateKey, InvalidPayload, NotFound
from pointage.models.attendance import AttendanceRecord, AttendanceStatus
from pointage.schemas.attendance import QrPayload
from pointage.schemas.auth import UserSession
from pointage.services.audit_service import log_audit
from pointage.services.geofence_service import Position, require_in_zone
from pointage.services.record_store import RecordStore, SqlAlchemyRecordStore
from pointage.utils.datetime_utils import get_work_date, now_utc

_log = logging.getLogger(__name__)


class ScanAction(str, enum.Enum):
    ENTRY = "entry"
    EXIT = "exit"


@dataclass(frozen=True)
class ScanPayload:
    action: Optional[ScanAction]  # None for the marker: toggle
    site: Optional[str] = None


@dataclass(frozen=True)
class ScanResult:
    record: AttendanceRecord
    action: ScanAction
    previous_status: AttendanceStatus
    status: AttendanceStatus

    @property
    def message(self) -> str:
        if self.action == ScanAction.ENTRY:
            return "Pointage enregistré: arrivée"
        return "Pointage enregistré: départ"


def parse_payload(raw: Optional[str], marker: Optional[str] = None) -> ScanPayload:
    """
    Structural validation of decoded QR text.

    Raises:
        InvalidPayload: empty text, wrong marker, non-JSON, or unknown type tag
    """
    marker = settings.QR_MARKER if marker is None else marker
    text = (raw or "").strip()
    if not text:
        raise InvalidPayload("Empty QR code")
    if text == marker:
        return ScanPayload(action=None)

    try:
        data = QrPayload.model_validate_json(text)
    except ValidationError:
        raise InvalidPayload()
    return ScanPayload(action=ScanAction(data.type), site=data.location)


def process_scan(
    db: Session,
    session: UserSession,
    raw_payload: str,
    *,
    position: Optional[Position] = None,
    now: Optional[datetime] = None,
    store: Optional[RecordStore] = None,
) -> ScanResult:
    """
    Apply one scan for the session user.

    Validation happens before any store access: payload first, then the
    geofence when GEOFENCE_ENABLED.

    Raises:
        InvalidPayload, PermissionDenied, OutOfZone: rejected before the store
        DuplicateKey: entry scan on a day that already has a record
        NotFound: exit scan without an entry today
        AlreadyClosed: the day already has entry and exit
    """
    payload = parse_payload(raw_payload)
    if settings.GEOFENCE_ENABLED:
        require_in_zone(position)

    store = store or SqlAlchemyRecordStore(db)
    now = now or now_utc()
    work_date = get_work_date(now)
    existing = store.get(session.user_id, work_date)

    if existing is None:
        if payload.action == ScanAction.EXIT:
            raise NotFound("No entry recorded today: scan the entry code first")
        record = store.insert(AttendanceRecord(
            user_id=session.user_id,
            work_date=work_date,
            entry_time=now,
            status=AttendanceStatus.PRESENT,
            location=position.as_location() if position else None,
            site=payload.site,
        ))
        result = ScanResult(record, ScanAction.ENTRY, AttendanceStatus.NOT_SCANNED, AttendanceStatus.PRESENT)
    elif payload.action == ScanAction.ENTRY:
        raise DuplicateKey("Entry already recorded today")
    elif existing.exit_time is None:
        previous_status = AttendanceStatus(existing.status)
        patch = {"exit_time": now}
        # A validated record keeps its final status
        if previous_status != AttendanceStatus.VALIDATED:
            patch["status"] = AttendanceStatus.CHECKED_OUT
        record = store.update(existing.id, patch)
        result = ScanResult(record, ScanAction.EXIT, previous_status, AttendanceStatus(record.status))
    else:
        raise AlreadyClosed()

    _log.info(
        "Scan %s: user_id=%s work_date=%s status %s -> %s",
        result.action.value, session.user_id, work_date,
        result.previous_status.value, result.status.value,
    )
    log_audit(
        db=db,
        actor_id=session.user_id,
        action=f"ATTENDANCE_SCAN_{result.action.value.upper()}",
        entity_type="attendance_records",
        entity_id=record.id,
        meta={
            "work_date": work_date,
            "at": now,
            "previous_status": result.previous_status,
            "status": result.status,
            "position": position.as_location() if position else None,
            "site": payload.site,
        },
    )
    return result

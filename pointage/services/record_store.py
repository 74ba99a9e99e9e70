"""
Record store: attendance records addressable by user and work date.

RecordStore is the contract the scan processor and the review operations
depend on; SqlAlchemyRecordStore implements it on a SQLAlchemy session with
single-record atomicity (one commit per call). The unique constraint on
(user_id, work_date) backs the one-record-per-day invariant for racing
inserts.
"""
import enum
import logging
from contextlib import contextmanager
from datetime import date
from typing import Any, Dict, List, Optional, Protocol

from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from pointage.core.exceptions import DuplicateKey, InvalidTransition, NotFound, StoreUnavailable
from pointage.models.attendance import AttendanceRecord, AttendanceStatus
from pointage.utils.datetime_utils import ensure_utc

_log = logging.getLogger(__name__)

IMMUTABLE_FIELDS = frozenset({"id", "user_id", "work_date", "created_at"})
MUTABLE_FIELDS = frozenset({
    "entry_time",
    "exit_time",
    "status",
    "comment",
    "validated_by",
    "validated_at",
    "location",
    "site",
})


class RecordFilter(str, enum.Enum):
    ALL = "all"
    PENDING = "pending"  # anything not yet validated
    VALIDATED = "validated"


class RecordStore(Protocol):
    def get(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_by_id(self, record_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_by_user(
        self, user_id: int, status_filter: RecordFilter = RecordFilter.ALL
    ) -> List[AttendanceRecord]:
        """Records of the user, newest work date first."""
        raise NotImplementedError

    def insert(self, record: AttendanceRecord) -> AttendanceRecord:
        """Raises DuplicateKey if (user_id, work_date) already exists."""
        raise NotImplementedError

    def update(self, record_id: int, patch: Dict[str, Any]) -> AttendanceRecord:
        """Raises NotFound if absent, InvalidTransition if the patch breaks an invariant."""
        raise NotImplementedError


def _status(value: Any) -> AttendanceStatus:
    return value if isinstance(value, AttendanceStatus) else AttendanceStatus(value)


def check_new_record(record: AttendanceRecord) -> None:
    """Invariants a record must satisfy before its first insert."""
    status = _status(record.status or AttendanceStatus.PRESENT)
    if status == AttendanceStatus.NOT_SCANNED:
        raise InvalidTransition("NOT_SCANNED is derived and cannot be stored")
    if record.exit_time is not None:
        if record.entry_time is None:
            raise InvalidTransition("Exit time requires an entry time")
        if ensure_utc(record.exit_time) <= ensure_utc(record.entry_time):
            raise InvalidTransition("Exit time must be after entry time")
    if record.validated_by is not None and status != AttendanceStatus.VALIDATED:
        raise InvalidTransition("A validated_by value requires VALIDATED status")


def check_patch(record: AttendanceRecord, patch: Dict[str, Any]) -> Dict[str, Any]:
    """
    Validate a patch against the record invariants and return it normalized.

    Raises:
        InvalidTransition: immutable field, overwritten entry/exit/validator,
            exit not after entry, or a transition out of VALIDATED
        ValueError: unknown field name
    """
    for field in patch:
        if field in IMMUTABLE_FIELDS:
            raise InvalidTransition(f"Field '{field}' is immutable")
        if field not in MUTABLE_FIELDS:
            raise ValueError(f"Unknown attendance record field: {field}")

    patch = dict(patch)
    current = _status(record.status)
    if "status" in patch:
        patch["status"] = _status(patch["status"])
        if patch["status"] == AttendanceStatus.NOT_SCANNED:
            raise InvalidTransition("NOT_SCANNED is derived and cannot be stored")
    new_status = patch.get("status", current)

    if current == AttendanceStatus.VALIDATED and new_status != AttendanceStatus.VALIDATED:
        raise InvalidTransition("Validated records cannot return to an earlier status")

    if "entry_time" in patch and record.entry_time is not None:
        raise InvalidTransition("Entry time is already set")

    if "exit_time" in patch:
        if record.exit_time is not None:
            raise InvalidTransition("Exit time is already set")
        entry_time = patch.get("entry_time", record.entry_time)
        if entry_time is None:
            raise InvalidTransition("Exit time requires an entry time")
        if patch["exit_time"] is None or ensure_utc(patch["exit_time"]) <= ensure_utc(entry_time):
            raise InvalidTransition("Exit time must be after entry time")

    if "validated_by" in patch and record.validated_by is not None:
        raise InvalidTransition("Record is already validated")
    validated_by = patch.get("validated_by", record.validated_by)
    if validated_by is not None and new_status != AttendanceStatus.VALIDATED:
        raise InvalidTransition("A validated_by value requires VALIDATED status")
    if new_status == AttendanceStatus.VALIDATED and validated_by is None:
        raise InvalidTransition("Validation requires a validating manager")

    return patch


class SqlAlchemyRecordStore:
    """RecordStore backed by the attendance_records table."""

    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def _store_call(self, operation: str):
        try:
            yield
        except OperationalError as exc:
            self.db.rollback()
            _log.warning("Record store %s failed: %s", operation, exc)
            raise StoreUnavailable() from exc

    def get(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with self._store_call("get"):
            return (
                self.db.query(AttendanceRecord)
                .filter(
                    AttendanceRecord.user_id == user_id,
                    AttendanceRecord.work_date == work_date,
                )
                .first()
            )

    def get_by_id(self, record_id: int) -> Optional[AttendanceRecord]:
        with self._store_call("get_by_id"):
            return self.db.query(AttendanceRecord).filter(AttendanceRecord.id == record_id).first()

    def list_by_user(
        self, user_id: int, status_filter: RecordFilter = RecordFilter.ALL
    ) -> List[AttendanceRecord]:
        with self._store_call("list_by_user"):
            query = self.db.query(AttendanceRecord).filter(AttendanceRecord.user_id == user_id)
            if status_filter == RecordFilter.PENDING:
                query = query.filter(AttendanceRecord.status != AttendanceStatus.VALIDATED)
            elif status_filter == RecordFilter.VALIDATED:
                query = query.filter(AttendanceRecord.status == AttendanceStatus.VALIDATED)
            return query.order_by(AttendanceRecord.work_date.desc()).all()

    def insert(self, record: AttendanceRecord) -> AttendanceRecord:
        check_new_record(record)
        if self.get(record.user_id, record.work_date) is not None:
            raise DuplicateKey()

        with self._store_call("insert"):
            self.db.add(record)
            try:
                self.db.commit()
            except IntegrityError as exc:
                # Lost a race against another device of the same user
                self.db.rollback()
                _log.info(
                    "Duplicate insert for user_id=%s work_date=%s", record.user_id, record.work_date
                )
                raise DuplicateKey() from exc
            self.db.refresh(record)
        return record

    def update(self, record_id: int, patch: Dict[str, Any]) -> AttendanceRecord:
        record = self.get_by_id(record_id)
        if record is None:
            raise NotFound(f"Attendance record {record_id} not found")

        patch = check_patch(record, patch)
        with self._store_call("update"):
            for field, value in patch.items():
                setattr(record, field, value)
            self.db.commit()
            self.db.refresh(record)
        return record

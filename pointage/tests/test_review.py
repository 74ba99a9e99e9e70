"""
Tests for history, comment, submit and manager validation
"""
from datetime import date, datetime, timedelta, timezone

import pytest
from fastapi import status

from pointage.core.exceptions import InvalidTransition, NotAuthorized, NotFound
from pointage.models.attendance import AttendanceRecord, AttendanceStatus
from pointage.models.audit_log import AuditLog
from pointage.models.user import Role
from pointage.services.attendance_service import (
    comment_record,
    get_record,
    list_records,
    submit_record,
    today_summary,
    validate_record,
)
from pointage.services.record_store import RecordFilter, SqlAlchemyRecordStore

WORK_DATE = date(2026, 10, 19)


@pytest.fixture
def closed_record(db, employee):
    """Yesterday's record with entry and exit"""
    return SqlAlchemyRecordStore(db).insert(AttendanceRecord(
        user_id=employee.id,
        work_date=WORK_DATE,
        entry_time=datetime(2026, 10, 19, 8, 0, tzinfo=timezone.utc),
        exit_time=datetime(2026, 10, 19, 17, 30, tzinfo=timezone.utc),
        status=AttendanceStatus.CHECKED_OUT,
    ))


def test_comment_marks_record_modified(db, employee_session, closed_record):
    record = comment_record(db, employee_session, closed_record.id, "Réunion chez le client l'après-midi")

    assert record.status == AttendanceStatus.MODIFIED
    assert record.comment == "Réunion chez le client l'après-midi"
    assert db.query(AuditLog).filter(AuditLog.action == "ATTENDANCE_COMMENT").count() == 1


def test_comment_on_someone_elses_record_rejected(db, other_session, closed_record):
    with pytest.raises(NotAuthorized):
        comment_record(db, other_session, closed_record.id, "not mine")
    assert db.get(AttendanceRecord, closed_record.id).comment is None


def test_submit_sets_pending_and_is_idempotent(db, employee_session, closed_record):
    assert submit_record(db, employee_session, closed_record.id).status == AttendanceStatus.PENDING
    assert submit_record(db, employee_session, closed_record.id).status == AttendanceStatus.PENDING
    assert db.query(AuditLog).filter(AuditLog.action == "ATTENDANCE_SUBMIT").count() == 1


def test_only_owner_can_submit(db, manager_session, closed_record):
    with pytest.raises(NotAuthorized):
        submit_record(db, manager_session, closed_record.id)


def test_manager_validates_pending_record(db, manager, employee_session, manager_session, closed_record):
    submit_record(db, employee_session, closed_record.id)
    validated_at = datetime(2026, 10, 20, 9, 0, tzinfo=timezone.utc)

    record = validate_record(db, manager_session, closed_record.id, now=validated_at)

    assert record.status == AttendanceStatus.VALIDATED
    assert record.validated_by == manager.id
    assert record.validated_at is not None
    audit = db.query(AuditLog).filter(AuditLog.action == "ATTENDANCE_VALIDATE").one()
    assert audit.actor_id == manager.id
    assert audit.meta_json["previous_status"] == "PENDING"


def test_non_manager_cannot_validate(db, employee_session, closed_record):
    submit_record(db, employee_session, closed_record.id)

    with pytest.raises(NotAuthorized):
        validate_record(db, employee_session, closed_record.id)

    record = db.get(AttendanceRecord, closed_record.id)
    assert record.status == AttendanceStatus.PENDING
    assert record.validated_by is None


def test_role_is_checked_before_the_record(db, employee_session):
    with pytest.raises(NotAuthorized):
        validate_record(db, employee_session, 999)


def test_role_comes_from_the_role_provider(db, manager_session, closed_record):
    with pytest.raises(NotAuthorized):
        validate_record(
            db, manager_session, closed_record.id, role_provider=lambda db, user_id: Role.EMPLOYEE
        )
    assert db.get(AttendanceRecord, closed_record.id).status == AttendanceStatus.CHECKED_OUT


def test_demoted_manager_cannot_validate(db, manager, manager_session, closed_record):
    manager.role = Role.EMPLOYEE.value
    db.commit()

    with pytest.raises(NotAuthorized):
        validate_record(db, manager_session, closed_record.id)


def test_validate_missing_record(db, manager_session):
    with pytest.raises(NotFound):
        validate_record(db, manager_session, 999)


def test_validated_record_is_final(db, employee_session, manager_session, closed_record):
    validate_record(db, manager_session, closed_record.id)

    with pytest.raises(InvalidTransition):
        validate_record(db, manager_session, closed_record.id)
    with pytest.raises(InvalidTransition):
        comment_record(db, employee_session, closed_record.id, "too late")
    with pytest.raises(InvalidTransition):
        submit_record(db, employee_session, closed_record.id)


def test_history_visibility(db, employee, employee_session, other_session, manager_session, closed_record):
    assert [r.id for r in list_records(db, employee_session)] == [closed_record.id]
    assert list_records(db, manager_session, user_id=employee.id)[0].id == closed_record.id
    assert get_record(db, manager_session, closed_record.id).id == closed_record.id

    with pytest.raises(NotAuthorized):
        list_records(db, other_session, user_id=employee.id)
    with pytest.raises(NotAuthorized):
        get_record(db, other_session, closed_record.id)


def test_history_filter(db, employee_session, manager_session, closed_record):
    assert len(list_records(db, employee_session, status_filter=RecordFilter.PENDING)) == 1
    validate_record(db, manager_session, closed_record.id)
    assert list_records(db, employee_session, status_filter=RecordFilter.PENDING) == []
    assert len(list_records(db, employee_session, status_filter=RecordFilter.VALIDATED)) == 1


def test_today_summary(db, employee_session, closed_record):
    summary = today_summary(db, employee_session, now=datetime(2026, 10, 19, 18, 0, tzinfo=timezone.utc))
    assert summary.status == AttendanceStatus.CHECKED_OUT
    assert summary.checked_in is False
    assert summary.days_present_this_week == 1

    tomorrow = today_summary(db, employee_session, now=datetime(2026, 10, 20, 6, 0, tzinfo=timezone.utc))
    assert tomorrow.status == AttendanceStatus.NOT_SCANNED
    assert tomorrow.record is None


def test_review_endpoints(client, employee, manager, auth_headers, closed_record):
    employee_headers = auth_headers(employee)
    manager_headers = auth_headers(manager)

    detail = client.get(f"/api/v1/attendance/{closed_record.id}", headers=employee_headers)
    assert detail.status_code == status.HTTP_200_OK
    assert detail.json()["work_duration"] == "09:30"

    commented = client.patch(
        f"/api/v1/attendance/{closed_record.id}/comment",
        json={"comment": "Sortie tardive"},
        headers=employee_headers,
    )
    assert commented.status_code == status.HTTP_200_OK
    assert commented.json()["status"] == "MODIFIED"
    assert commented.json()["status_label"] == "Modifié"

    submitted = client.post(f"/api/v1/attendance/{closed_record.id}/submit", headers=employee_headers)
    assert submitted.json()["status"] == "PENDING"

    refused = client.post(f"/api/v1/attendance/{closed_record.id}/validate", headers=employee_headers)
    assert refused.status_code == status.HTTP_403_FORBIDDEN
    assert refused.json()["code"] == "NOT_AUTHORIZED"

    validated = client.post(f"/api/v1/attendance/{closed_record.id}/validate", headers=manager_headers)
    assert validated.status_code == status.HTTP_200_OK
    assert validated.json()["status"] == "VALIDATED"
    assert validated.json()["validated_by"] == manager.id

    again = client.post(f"/api/v1/attendance/{closed_record.id}/validate", headers=manager_headers)
    assert again.status_code == status.HTTP_409_CONFLICT
    assert again.json()["code"] == "INVALID_TRANSITION"


def test_history_endpoints(client, employee, other_employee, manager, auth_headers, closed_record):
    mine = client.get("/api/v1/attendance/my", headers=auth_headers(employee))
    assert mine.status_code == status.HTTP_200_OK
    assert mine.json()["total"] == 1

    validated_only = client.get("/api/v1/attendance/my?filter=validated", headers=auth_headers(employee))
    assert validated_only.json()["total"] == 0

    as_manager = client.get(f"/api/v1/attendance/users/{employee.id}", headers=auth_headers(manager))
    assert as_manager.status_code == status.HTTP_200_OK
    assert as_manager.json()["items"][0]["id"] == closed_record.id

    as_peer = client.get(f"/api/v1/attendance/users/{employee.id}", headers=auth_headers(other_employee))
    assert as_peer.status_code == status.HTTP_403_FORBIDDEN

    missing = client.get("/api/v1/attendance/4242", headers=auth_headers(employee))
    assert missing.status_code == status.HTTP_404_NOT_FOUND


def test_history_limited_to_recent_days(client, db, employee, auth_headers):
    store = SqlAlchemyRecordStore(db)
    for n in range(9):
        day = WORK_DATE - timedelta(days=n)
        store.insert(AttendanceRecord(
            user_id=employee.id,
            work_date=day,
            entry_time=datetime(day.year, day.month, day.day, 8, 0, tzinfo=timezone.utc),
            status=AttendanceStatus.PRESENT,
        ))
    headers = auth_headers(employee)

    week = client.get("/api/v1/attendance/my?days=7", headers=headers)
    assert week.status_code == status.HTTP_200_OK
    assert week.json()["total"] == 7
    assert week.json()["items"][0]["work_date"] == "2026-10-19"
    assert week.json()["items"][-1]["work_date"] == "2026-10-13"

    assert client.get("/api/v1/attendance/my", headers=headers).json()["total"] == 9
    assert client.get("/api/v1/attendance/my?days=0", headers=headers).status_code == 422

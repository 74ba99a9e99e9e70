"""
Domain errors for attendance operations.

Every error is recoverable by re-attempting the user action; the API layer
renders them through pointage.core.errors.pointage_exception_handler.
"""
from fastapi import status


class PointageError(Exception):
    """Base class for attendance domain errors"""

    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "POINTAGE_ERROR"
    default_detail: str = "Attendance operation failed"

    def __init__(self, detail: str = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class InvalidPayload(PointageError):
    """Scan payload is malformed or not a recognized QR code"""
    status_code = status.HTTP_400_BAD_REQUEST
    code = "INVALID_PAYLOAD"
    default_detail = "Invalid QR code"


class OutOfZone(PointageError):
    """Device position is outside the geofence"""
    status_code = status.HTTP_403_FORBIDDEN
    code = "OUT_OF_ZONE"
    default_detail = "Invalid location: you must be on site to scan"


class PermissionDenied(PointageError):
    """Location (or camera) access was refused on the device"""
    status_code = status.HTTP_403_FORBIDDEN
    code = "PERMISSION_DENIED"
    default_detail = "Permission to access location was denied; enable location services and retry"


class NotAuthorized(PointageError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "NOT_AUTHORIZED"
    default_detail = "Access denied"


class NotFound(PointageError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"
    default_detail = "Attendance record not found"


class DuplicateKey(PointageError):
    """A record already exists for (user_id, work_date)"""
    status_code = status.HTTP_409_CONFLICT
    code = "DUPLICATE_KEY"
    default_detail = "Attendance already recorded today"


class AlreadyClosed(PointageError):
    """Entry and exit are both recorded for the day"""
    status_code = status.HTTP_409_CONFLICT
    code = "ALREADY_CLOSED"
    default_detail = "Attendance already recorded today: entry and exit are both set"


class InvalidTransition(PointageError):
    """Update would break a record invariant"""
    status_code = status.HTTP_409_CONFLICT
    code = "INVALID_TRANSITION"
    default_detail = "Invalid attendance record update"


class StoreUnavailable(PointageError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "STORE_UNAVAILABLE"
    default_detail = "Attendance store unavailable, please retry"

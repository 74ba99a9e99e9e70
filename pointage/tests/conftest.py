"""
Pytest configuration and fixtures
"""
import os

# Settings are read at import time
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ["APP_ENV"] = "local"
os.environ["WORK_TZ"] = "Africa/Abidjan"
os.environ["COMPANY_EMAIL_DOMAIN"] = ""
os.environ["GEOFENCE_ENABLED"] = "true"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from pointage.main import app
from pointage.db.base import Base
from pointage.core.config import settings
from pointage.core.deps import get_db
from pointage.models import AttendanceRecord, AuditLog, User  # noqa: F401
from pointage.models.user import Role
from pointage.schemas.auth import UserSession
from pointage.services.geofence_service import Position
from pointage.services.user_service import create_user

# Use in-memory SQLite for testing
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


# Enable foreign keys for SQLite
@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

PASSWORD = "testpass123"


@pytest.fixture(scope="function")
def db():
    """Create a fresh database for each test"""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db):
    """Test client fixture with database override"""
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def employee(db):
    return create_user(db, "awa.kone@example.com", "Awa Kone", PASSWORD)


@pytest.fixture
def other_employee(db):
    return create_user(db, "yao.kouame@example.com", "Yao Kouame", PASSWORD)


@pytest.fixture
def manager(db):
    return create_user(db, "chef.site@example.com", "Chef Site", PASSWORD, role=Role.MANAGER)


def session_for(user) -> UserSession:
    """UserSession for a persisted user, as get_current_session builds it"""
    return UserSession(user_id=user.id, email=user.email, name=user.name, role=Role(user.role))


@pytest.fixture
def employee_session(employee):
    return session_for(employee)


@pytest.fixture
def other_session(other_employee):
    return session_for(other_employee)


@pytest.fixture
def manager_session(manager):
    return session_for(manager)


@pytest.fixture
def on_site():
    """Position at the configured site"""
    return Position(lat=settings.GEOFENCE_TARGET_LAT, lon=settings.GEOFENCE_TARGET_LON)


@pytest.fixture
def auth_headers(client):
    """Log in through the API and return the Authorization header"""
    def _login(user, password=PASSWORD):
        response = client.post(
            "/api/v1/auth/login",
            json={"email": user.email, "password": password},
        )
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['access_token']}"}
    return _login

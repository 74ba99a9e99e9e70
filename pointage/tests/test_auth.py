"""
Tests for login and session resolution
"""
from fastapi import status

from pointage.core.config import settings
from pointage.core.security import create_access_token, decode_token


def test_login_success(client, employee):
    response = client.post(
        "/api/v1/auth/login",
        json={"email": "Awa.Kone@example.com ", "password": "testpass123"},
    )
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["token_type"] == "bearer"

    claims = decode_token(data["access_token"])
    assert claims["sub"] == str(employee.id)
    assert claims["role"] == "EMPLOYEE"


def test_login_wrong_password(client, employee):
    response = client.post(
        "/api/v1/auth/login",
        json={"email": employee.email, "password": "not-the-password"},
    )
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["detail"] == "Invalid email or password"


def test_login_unknown_user(client, db):
    response = client.post(
        "/api/v1/auth/login",
        json={"email": "nobody@example.com", "password": "testpass123"},
    )
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_login_inactive_user(client, db, employee):
    employee.active = False
    db.commit()

    response = client.post(
        "/api/v1/auth/login",
        json={"email": employee.email, "password": "testpass123"},
    )
    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_login_rejects_foreign_domain(client, employee, monkeypatch):
    monkeypatch.setattr(settings, "COMPANY_EMAIL_DOMAIN", "tevia.ci")

    response = client.post(
        "/api/v1/auth/login",
        json={"email": employee.email, "password": "testpass123"},
    )
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["detail"] == "Only company accounts are allowed"


def test_me_returns_session(client, employee, auth_headers):
    response = client.get("/api/v1/auth/me", headers=auth_headers(employee))

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["user_id"] == employee.id
    assert data["email"] == "awa.kone@example.com"
    assert data["role"] == "EMPLOYEE"


def test_me_rejects_invalid_token(client, db):
    response = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_me_rejects_token_of_deleted_user(client, db):
    token = create_access_token({"sub": "999", "role": "EMPLOYEE"})
    response = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["detail"] == "User not found"


def test_me_requires_credentials(client, db):
    response = client.get("/api/v1/auth/me")
    assert response.status_code in (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN)


def test_role_claim_in_token_grants_nothing(client, employee):
    token = create_access_token({"sub": str(employee.id), "role": "MANAGER"})
    headers = {"Authorization": f"Bearer {token}"}

    assert client.get("/api/v1/auth/me", headers=headers).json()["role"] == "EMPLOYEE"
    assert client.get("/api/v1/qr/marker.png", headers=headers).status_code == status.HTTP_403_FORBIDDEN

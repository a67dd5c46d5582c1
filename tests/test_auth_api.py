from datetime import timedelta

import pytest
from fastapi import status

from app.services import auth as auth_service


def test_login_success(client, admin_user):
    """Test successful login with valid credentials."""
    response = client.post("/api/auth/login", json={
        "email": admin_user.email,
        "password": "AdminPassword123!"
    })
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert "access_token" in data
    assert data["token_type"] == "bearer"
    assert data["user"]["email"] == admin_user.email
    assert data["user"]["role"] == "ADMIN"
    assert "hashed_password" not in data["user"]


def test_login_invalid_credentials(client, admin_user):
    response = client.post("/api/auth/login", json={"email": admin_user.email, "password": "wrong"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    body = response.json()
    assert body["success"] is False
    assert body["errors"][0]["msg"] == "Invalid credentials"


def test_login_unknown_user(client):
    response = client.post("/api/auth/login", json={"email": "nobody@example.com", "password": "wrong"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_register_forces_employee_role(client):
    response = client.post("/api/auth/register", json={
        "name": "New Hire",
        "email": "new.hire@example.com",
        "password": "secret123",
        "role": "ADMIN",
    })
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["user"]["role"] == "EMPLOYEE"
    assert data["user"]["avatar"].startswith("https://api.dicebear.com/")
    assert data["access_token"]


def test_register_duplicate_email(client, employee_user):
    response = client.post("/api/auth/register", json={
        "name": "Copy",
        "email": employee_user.email,
        "password": "secret123",
    })
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["errors"][0]["msg"] == "Email already exists"


def test_register_rejects_short_password(client):
    response = client.post("/api/auth/register", json={
        "name": "Short", "email": "short@example.com", "password": "123"
    })
    assert response.status_code == 422
    assert response.json()["success"] is False


def test_me_returns_current_user(client, employee_user, auth_headers):
    response = client.get("/api/auth/me", headers=auth_headers(employee_user))
    assert response.status_code == 200
    assert response.json()["id"] == employee_user.id


@pytest.mark.parametrize("path", [
    "/api/auth/me",
    "/api/users/",
    "/api/departments/",
    "/api/okrs/",
    "/api/tasks/",
    "/api/kpis/",
    "/api/reports/summary",
])
def test_protected_endpoints_require_token(client, path):
    response = client.get(path)
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_garbage_token_rejected(client):
    response = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_expired_token_rejected(client, employee_user):
    token = auth_service.create_access_token({"sub": employee_user.id}, expires_delta=timedelta(minutes=-5))
    response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["errors"][0]["msg"] == "TOKEN_EXPIRED"


def test_token_for_deleted_user_rejected(client, db_session, employee_user, get_token):
    token = get_token(employee_user)
    db_session.delete(employee_user)
    db_session.commit()
    response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_password_hashing_roundtrip():
    hashed = auth_service.get_password_hash("s3cret!")
    assert hashed != "s3cret!"
    assert auth_service.verify_password("s3cret!", hashed)
    assert not auth_service.verify_password("other", hashed)


def test_verify_password_malformed_hash():
    assert auth_service.verify_password("anything", "not-a-bcrypt-hash") is False


def test_token_subject_is_user_id(employee_user):
    claims = auth_service.decode_access_token(auth_service.token_for_user(employee_user))
    assert claims["sub"] == str(employee_user.id)
    assert claims["type"] == "access"
    assert claims["role"] == "EMPLOYEE"

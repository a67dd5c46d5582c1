import pytest
import os
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set env before importing app components
os.environ["APP_ENV"] = "testing"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"

from app.database import Base, get_db
from app.main import app
from fastapi.testclient import TestClient

# SQLite in-memory database configuration
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """Fresh schema per test; services commit freely."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()

    yield session

    session.close()
    Base.metadata.drop_all(bind=engine)


def _make_user(db_session, name, email, role, department=None, password="Password123"):
    from app.models.user import User
    from app.services import auth as auth_service

    user = User(
        name=name,
        email=email,
        hashed_password=auth_service.get_password_hash(password),
        role=role,
        department=department,
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture(scope="function")
def admin_user(db_session):
    from app.models.user import UserRole
    return _make_user(db_session, "System Admin", "admin@example.com", UserRole.ADMIN, password="AdminPassword123!")


@pytest.fixture(scope="function")
def manager_user(db_session):
    from app.models.user import UserRole
    return _make_user(db_session, "Mia Manager", "manager@example.com", UserRole.MANAGER, department="Sales")


@pytest.fixture(scope="function")
def employee_user(db_session):
    from app.models.user import UserRole
    return _make_user(db_session, "Eli Employee", "employee@example.com", UserRole.EMPLOYEE, department="Sales")


@pytest.fixture(scope="function")
def get_token():
    """Helper fixture to create access tokens for a user."""
    from app.services.auth import token_for_user

    def _get_token(user):
        return token_for_user(user)
    return _get_token


@pytest.fixture(scope="function")
def auth_headers(get_token):
    def _auth_headers(user):
        return {"Authorization": f"Bearer {get_token(user)}"}
    return _auth_headers


@pytest.fixture(scope="function")
def client(db_session):
    """Get a TestClient that uses the test database session via dependency override."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()

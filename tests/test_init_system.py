from sqlalchemy.orm import sessionmaker

from app.core import init_system
from app.core.config import settings
from app.models.user import User, UserRole
from app.services import auth as auth_service


def _use_test_engine(monkeypatch, db_session):
    factory = sessionmaker(autocommit=False, autoflush=False, bind=db_session.get_bind())
    monkeypatch.setattr(init_system, "SessionLocal", factory)


def test_first_start_creates_admin(db_session, monkeypatch):
    _use_test_engine(monkeypatch, db_session)
    assert db_session.query(User).count() == 0

    init_system.init_system_data()

    users = db_session.query(User).all()
    assert len(users) == 1
    admin = users[0]
    assert admin.role == UserRole.ADMIN
    assert admin.email == settings.admin.email.lower()
    assert admin.name == settings.admin.name
    assert admin.avatar
    assert auth_service.verify_password(settings.admin.password, admin.hashed_password)


def test_bootstrap_runs_once(db_session, monkeypatch):
    _use_test_engine(monkeypatch, db_session)

    init_system.init_system_data()
    init_system.init_system_data()

    assert db_session.query(User).filter(User.role == UserRole.ADMIN).count() == 1


def test_bootstrap_skipped_when_users_exist(db_session, monkeypatch, employee_user):
    _use_test_engine(monkeypatch, db_session)

    init_system.init_system_data()

    assert [u.email for u in db_session.query(User).all()] == [employee_user.email]


def test_bootstrap_failure_is_logged(monkeypatch, caplog):
    class BrokenSession:
        def query(self, *args):
            raise RuntimeError("database unavailable")

        def rollback(self):
            pass

        def close(self):
            pass

    monkeypatch.setattr(init_system, "SessionLocal", BrokenSession)

    init_system.init_system_data()

    assert "Error during system initialization check" in caplog.text
    assert "database unavailable" in caplog.text

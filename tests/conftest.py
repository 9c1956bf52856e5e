# tests/conftest.py
import os

# Settings are read at import time, so the environment must be ready first
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-jwt-secret")
os.environ.setdefault("ATTENDANCE_BASE_SECRET", "test-base-secret")

import pytest
from unittest.mock import MagicMock
from uuid import uuid4
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from fastapi.testclient import TestClient

from app.core.database import get_db
from app.core.security import create_access_token, get_password_hash
from app.main import app
from app.models.academic import Class, ClassEnrollment, ClassStatus, EnrollmentStatus
from app.models.base import Base
from app.models.user import User, UserRole


@pytest.fixture
def engine(tmp_path):
    """File-backed SQLite so several connections (threads) see the same data."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'attendance.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def mock_db_session():
    """Giả lập DB Session"""
    session = MagicMock(spec=Session)
    session.query.return_value.filter.return_value = session.query.return_value
    session.query.return_value.options.return_value = session.query.return_value
    session.query.return_value.order_by.return_value = session.query.return_value
    return session


@pytest.fixture(scope="session")
def password_hash():
    return get_password_hash("password")


@pytest.fixture
def make_user(db, password_hash):
    def _make_user(role=UserRole.STUDENT, first_name="Test", last_name="User", email=None):
        user = User(
            email=email or f"{uuid4().hex[:10]}@example.com",
            password_hash=password_hash,
            role=role,
            first_name=first_name,
            last_name=last_name,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make_user


@pytest.fixture
def teacher(make_user):
    return make_user(UserRole.TEACHER, "Ada", "Lovelace")


@pytest.fixture
def admin(make_user):
    return make_user(UserRole.CENTER_ADMIN, "Grace", "Hopper")


@pytest.fixture
def student(make_user):
    return make_user(UserRole.STUDENT, "Sam", "One")


@pytest.fixture
def make_class(db, teacher):
    def _make_class(name="CSC101", start_time=None, owner=None):
        class_ = Class(
            name=name,
            teacher_id=(owner or teacher).id,
            start_time=start_time,
            status=ClassStatus.ACTIVE,
        )
        db.add(class_)
        db.commit()
        db.refresh(class_)
        return class_
    return _make_class


@pytest.fixture
def csc101(make_class):
    return make_class("CSC101")


@pytest.fixture
def enroll(db):
    def _enroll(student, class_, status=EnrollmentStatus.ACTIVE):
        enrollment = ClassEnrollment(class_id=class_.id, student_id=student.id, status=status)
        db.add(enrollment)
        db.commit()
        return enrollment
    return _enroll


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    def _auth_headers(user: User) -> dict:
        return {"Authorization": f"Bearer {create_access_token(subject=user.email)}"}
    return _auth_headers

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from fluentpath.db import Base, get_db
from fluentpath.main import app
from fluentpath.models import Progress, Student, Teacher
from fluentpath.routers.auth import hash_password


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_student(db):
    def _make(email="student@x.com", first_name="Sam", last_name="Student"):
        student = Student(
            first_name=first_name,
            last_name=last_name,
            email=email,
            password_hash=hash_password("secret"),
        )
        db.add(student)
        db.commit()
        return student

    return _make


@pytest.fixture
def make_teacher(db):
    def _make(email="teacher@x.com", first_name="Tina", last_name="Teacher"):
        teacher = Teacher(
            first_name=first_name,
            last_name=last_name,
            email=email,
            password_hash=hash_password("secret"),
        )
        db.add(teacher)
        db.commit()
        return teacher

    return _make


@pytest.fixture
def signup(client):
    """Register an account over the API and return (account_id, auth headers)."""

    def _signup(email, role="user", password="secret", first_name="Ann", last_name="Lee"):
        response = client.post("/auth/register", json={
            "firstName": first_name,
            "lastName": last_name,
            "email": email,
            "password": password,
            "role": role,
        })
        assert response.status_code == 201, response.text
        response = client.post("/auth/login", json={"email": email, "password": password, "role": role})
        assert response.status_code == 200, response.text
        data = response.json()
        return data["user"]["id"], {"Authorization": f"Bearer {data['access_token']}"}

    return _signup


def make_progress(user_id="u1", **overrides):
    """Build an unsaved Progress row with every counter at zero unless overridden."""
    values = {column.name: 0 for column in Progress.__table__.columns if column.name not in ("user_id", "last_updated")}
    values.update(overrides)
    return Progress(user_id=user_id, **values)

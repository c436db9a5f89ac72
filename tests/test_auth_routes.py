"""Tests for registration, login, logout and token handling."""

from datetime import datetime, timedelta

from fluentpath.cleanup import purge_expired_sessions
from fluentpath.models import AuthSession


class TestRegister:
    def test_register_and_me(self, client, signup):
        user_id, headers = signup("new@x.com", first_name="Nia", last_name="Cole")
        response = client.get("/auth/me", headers=headers)
        assert response.status_code == 200
        data = response.json()
        assert data["id"] == user_id
        assert data["firstName"] == "Nia"
        assert data["role"] == "user"
        assert data["userLevel"] == "beginner"
        assert data["evaluate"] is False

    def test_teacher_has_no_level(self, client, signup):
        _, headers = signup("t@x.com", role="teacher")
        data = client.get("/auth/me", headers=headers).json()
        assert data["role"] == "teacher"
        assert data["userLevel"] is None

    def test_duplicate_email_rejected(self, client, signup):
        signup("dup@x.com")
        response = client.post("/auth/register", json={
            "firstName": "A", "lastName": "B", "email": "DUP@x.com", "password": "pw", "role": "user",
        })
        assert response.status_code == 400
        assert response.json()["message"] == "Email already exists."

    def test_same_email_allowed_for_other_role(self, client, signup):
        signup("both@x.com", role="user")
        signup("both@x.com", role="teacher")

    def test_missing_fields(self, client):
        response = client.post("/auth/register", json={"firstName": "A", "email": "a@x.com", "password": "pw"})
        assert response.status_code == 400
        assert "lastName" in response.json()["message"]

    def test_blank_fields(self, client):
        response = client.post("/auth/register", json={
            "firstName": " ", "lastName": "B", "email": "a@x.com", "password": "pw",
        })
        assert response.status_code == 400

    def test_unknown_role(self, client):
        response = client.post("/auth/register", json={
            "firstName": "A", "lastName": "B", "email": "a@x.com", "password": "pw", "role": "admin",
        })
        assert response.status_code == 400


class TestLogin:
    def test_wrong_password(self, client, signup):
        signup("pw@x.com")
        response = client.post("/auth/login", json={"email": "pw@x.com", "password": "bad", "role": "user"})
        assert response.status_code == 401
        assert "message" in response.json()

    def test_wrong_role(self, client, signup):
        signup("role@x.com")
        response = client.post("/auth/login", json={"email": "role@x.com", "password": "secret", "role": "teacher"})
        assert response.status_code == 401


class TestTokens:
    def test_no_token(self, client):
        response = client.get("/api/progress")
        assert response.status_code == 401
        assert response.json() == {"message": "Not authenticated"}

    def test_garbage_token(self, client):
        response = client.get("/api/follow/following", headers={"Authorization": "Bearer nonsense"})
        assert response.status_code == 401

    def test_logout_revokes_token(self, client, signup):
        _, headers = signup("out@x.com")
        assert client.post("/auth/logout", headers=headers).status_code == 200
        assert client.get("/auth/me", headers=headers).status_code == 401


def test_purge_expired_sessions(db, make_student):
    student = make_student()
    old = datetime.utcnow() - timedelta(days=365)
    db.add(AuthSession(session_id="old", account_id=student.id, role="user", last_activity_at=old))
    db.add(AuthSession(session_id="fresh", account_id=student.id, role="user"))
    db.commit()
    assert purge_expired_sessions(db) == 1
    assert [s.session_id for s in db.query(AuthSession).all()] == ["fresh"]

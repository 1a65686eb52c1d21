"""Tests for rolodex/auth.py — passwords, tokens, user CRUD."""
import pytest
from rolodex import auth


# ── Password validation ──

class TestValidatePassword:
    def test_too_short(self):
        with pytest.raises(ValueError, match="at least 8"):
            auth.validate_password("short")

    def test_too_long(self):
        with pytest.raises(ValueError, match="too long"):
            auth.validate_password("a" * 73)

    def test_valid(self):
        auth.validate_password("validpass")  # no exception


# ── Password hashing ──

class TestHashAndVerify:
    def test_hash_and_verify_correct(self):
        h = auth.hash_password("mypassword")
        assert auth.verify_password("mypassword", h) is True

    def test_verify_wrong_password(self):
        h = auth.hash_password("mypassword")
        assert auth.verify_password("wrongpassword", h) is False

    def test_verify_invalid_hash(self):
        assert auth.verify_password("any", "not-a-valid-hash") is False


# ── Session tokens ──

class TestSessionTokens:
    def test_create_and_verify(self):
        token = auth.create_session_token("user-123")
        assert auth.verify_session_token(token) == "user-123"

    def test_invalid_signature(self):
        parts = auth.create_session_token("user-123").split(":")
        parts[2] = "badsig"
        assert auth.verify_session_token(":".join(parts)) is None

    def test_tampered_payload(self):
        parts = auth.create_session_token("user-123").split(":")
        parts[0] = "hacker"
        assert auth.verify_session_token(":".join(parts)) is None

    def test_empty_token(self):
        assert auth.verify_session_token("") is None
        assert auth.verify_session_token(None) is None

    def test_malformed_token(self):
        assert auth.verify_session_token("just-one-part") is None
        assert auth.verify_session_token("two:parts") is None


# ── User CRUD ──

class TestUserCRUD:
    def test_create_user(self, db):
        user = auth.create_user(db, "New@Example.com ", "New User", "password123")
        assert user["email"] == "new@example.com"
        assert user["name"] == "New User"
        assert "password_hash" not in user

    def test_create_duplicate_email(self, db):
        auth.create_user(db, "dup@example.com", "User1", "password123")
        with pytest.raises(ValueError, match="already exists"):
            auth.create_user(db, "DUP@example.com", "User2", "password456")

    def test_weak_password_rejected(self, db):
        with pytest.raises(ValueError):
            auth.create_user(db, "weak@example.com", "Weak", "short")
        assert auth.get_user_by_email(db, "weak@example.com") is None

    def test_authenticate(self, db, user_alice):
        assert auth.authenticate_user(db, "alice@example.com", "password123")["id"] == user_alice["id"]
        assert auth.authenticate_user(db, "alice@example.com", "wrong-password") is None
        assert auth.authenticate_user(db, "nobody@example.com", "password123") is None

    def test_change_password(self, db, user_alice):
        auth.change_password(db, user_alice["id"], "password123", "newpassword1")
        assert auth.authenticate_user(db, "alice@example.com", "newpassword1")
        assert auth.authenticate_user(db, "alice@example.com", "password123") is None

    def test_change_password_wrong_current(self, db, user_alice):
        with pytest.raises(ValueError, match="incorrect"):
            auth.change_password(db, user_alice["id"], "nope-nope", "newpassword1")


# ── API ──

class TestAuthAPI:
    def test_register_sets_cookie(self, client):
        resp = client.post("/api/auth/register", json={
            "email": "cookie@test.com", "name": "Cookie", "password": "password123",
        })
        assert resp.status_code == 200
        assert resp.json()["email"] == "cookie@test.com"
        assert "session" in resp.cookies

    def test_register_duplicate(self, client):
        body = {"email": "dup@test.com", "name": "Dup", "password": "password123"}
        client.post("/api/auth/register", json=body)
        resp = client.post("/api/auth/register", json=body)
        assert resp.status_code == 400

    def test_register_invalid_email(self, client):
        resp = client.post("/api/auth/register", json={
            "email": "not-an-email", "name": "X", "password": "password123",
        })
        assert resp.status_code == 422

    def test_login(self, client, user_alice):
        resp = client.post("/api/auth/login", json={"email": "alice@example.com",
                                                    "password": "password123"})
        assert resp.status_code == 200
        assert "session" in resp.cookies

    def test_login_wrong_password(self, client, user_alice):
        resp = client.post("/api/auth/login", json={"email": "alice@example.com",
                                                    "password": "bad-password"})
        assert resp.status_code == 401

    def test_me(self, alice_client):
        resp = alice_client.get("/api/auth/me")
        assert resp.status_code == 200
        assert resp.json()["email"] == "alice@example.com"

    def test_me_unauthenticated(self, client):
        assert client.get("/api/auth/me").status_code == 401

    def test_logout(self, alice_client):
        resp = alice_client.post("/api/auth/logout")
        assert resp.status_code == 200

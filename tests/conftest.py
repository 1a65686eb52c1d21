"""Shared fixtures for the rolodex test suite."""
import os

# Set env vars BEFORE any app imports
os.environ.setdefault("COOKIE_SECRET", "test-secret-key-for-testing")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from rolodex.db import get_db, make_engine
from rolodex.models import Base
from rolodex import auth, crud, groups


# Ensure auth module uses test cookie secret
auth.COOKIE_SECRET = os.environ["COOKIE_SECRET"]


# ── Database fixtures ──

@pytest.fixture
def engine():
    """Fresh in-memory SQLite database with the full schema."""
    eng = make_engine("sqlite://")
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def db(engine):
    """Session for unit tests; also handed to the app through the get_db override."""
    session = sessionmaker(bind=engine, expire_on_commit=False)()
    yield session
    session.close()


# ── User fixtures ──

@pytest.fixture
def user_alice(db):
    return auth.create_user(db, "alice@example.com", "Alice", "password123")


@pytest.fixture
def user_bob(db):
    return auth.create_user(db, "bob@example.com", "Bob", "password456")


# ── Relationship type fixtures ──

@pytest.fixture
def type_friend(db, user_alice):
    """Symmetric type: its own inverse."""
    return crud.create_relationship_type(db, user_alice["id"], "Friend", inverse_label="Friend")


@pytest.fixture
def type_parent(db, user_alice):
    """Parent, paired with a freshly created Child inverse."""
    return crud.create_relationship_type(db, user_alice["id"], "Parent", color="#10B981",
                                         inverse_label="Child", inverse_color="#F97316")


@pytest.fixture
def type_colleague(db, user_alice):
    """No inverse."""
    return crud.create_relationship_type(db, user_alice["id"], "Colleague", color="#222222")


# ── Person fixtures ──

@pytest.fixture
def person_pat(db, user_alice, type_friend):
    return crud.create_person(db, user_alice["id"], "Patricia", surname="Diaz", nickname="Pat",
                              relationship_to_user_id=type_friend.id)


@pytest.fixture
def person_quinn(db, user_alice):
    return crud.create_person(db, user_alice["id"], "Quinn", surname="Lee")


@pytest.fixture
def person_rae(db, user_alice):
    return crud.create_person(db, user_alice["id"], "Rae")


@pytest.fixture
def network(db, user_alice, person_pat, person_quinn, person_rae, type_parent, type_colleague):
    """Pat -Parent-> Quinn, Pat -Colleague-> Rae, Quinn -Colleague-> Rae; Pat in 'Family'."""
    family = groups.create_group(db, user_alice["id"], "Family", "#EF4444")
    groups.add_member(db, user_alice["id"], family.id, person_pat.id)
    crud.create_relationship(db, user_alice["id"], person_pat.id, person_quinn.id, type_parent.id)
    crud.create_relationship(db, user_alice["id"], person_pat.id, person_rae.id, type_colleague.id)
    crud.create_relationship(db, user_alice["id"], person_quinn.id, person_rae.id, type_colleague.id)
    return {
        "pat": person_pat,
        "quinn": person_quinn,
        "rae": person_rae,
        "family": family,
        "user": user_alice,
    }


# ── FastAPI app fixtures ──

@pytest.fixture
def app_with_db(db):
    """FastAPI app with dependency override pointing at the test session."""
    from rolodex.main import app

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app_with_db):
    """Unauthenticated TestClient."""
    return TestClient(app_with_db, raise_server_exceptions=False)


def _make_authenticated_client(app, db, email, name, password):
    """Helper: create (or reuse) a user and return an authenticated TestClient."""
    try:
        user = auth.create_user(db, email, name, password)
    except ValueError:
        user = auth.public_user(auth.get_user_by_email(db, email))
    token = auth.create_session_token(user["id"])
    tc = TestClient(app, raise_server_exceptions=False, cookies={"session": token})
    tc._test_user = user
    return tc


@pytest.fixture
def alice_client(app_with_db, db, user_alice):
    """TestClient signed in as Alice (owner of the fixture network)."""
    return _make_authenticated_client(app_with_db, db, "alice@example.com", "Alice", "password123")


@pytest.fixture
def make_authenticated_client(app_with_db, db):
    """Factory fixture: returns a callable to create authenticated TestClients."""
    def _factory(email, name, password="password123"):
        return _make_authenticated_client(app_with_db, db, email, name, password)
    return _factory

"""Authentication: password hashing, session tokens, and FastAPI dependencies."""
import hashlib
import hmac
import logging
import os
import time

import bcrypt as _bcrypt
from fastapi import Depends, HTTPException, Request
from sqlalchemy import select
from sqlalchemy.orm import Session

from .db import get_db
from .models import User

logger = logging.getLogger(__name__)

COOKIE_SECRET = os.environ.get("COOKIE_SECRET", "")
SESSION_COOKIE = "session"


# ── Password hashing ──

def validate_password(password: str):
    """Validate password meets minimum requirements."""
    if len(password) < 8:
        raise ValueError("Password must be at least 8 characters")
    if len(password.encode("utf-8")) > 72:
        raise ValueError("Password is too long (max 72 bytes)")


def hash_password(password: str) -> str:
    validate_password(password)
    pw_bytes = password.encode("utf-8")
    return _bcrypt.hashpw(pw_bytes, _bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return _bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except (ValueError, TypeError):
        return False


# ── Session tokens ──

def create_session_token(user_id: str) -> str:
    """Create an HMAC-signed session token: user_id:timestamp:signature."""
    ts = str(int(time.time()))
    payload = f"{user_id}:{ts}"
    sig = hmac.new(COOKIE_SECRET.encode(), payload.encode(), hashlib.sha256).hexdigest()
    return f"{payload}:{sig}"


def verify_session_token(token: str) -> str | None:
    """Verify session token. Returns user_id if valid, None otherwise."""
    if not token or not COOKIE_SECRET:
        return None
    parts = token.split(":")
    if len(parts) != 3:
        return None
    user_id, ts, sig = parts
    payload = f"{user_id}:{ts}"
    expected = hmac.new(COOKIE_SECRET.encode(), payload.encode(), hashlib.sha256).hexdigest()
    if not hmac.compare_digest(sig, expected):
        return None
    return user_id


# ── User CRUD ──

def public_user(user: User) -> dict:
    return {"id": user.id, "email": user.email, "name": user.name,
            "surname": user.surname, "nickname": user.nickname,
            "language": user.language, "created_at": user.created_at}


def create_user(db: Session, email: str, name: str, password: str,
                surname: str | None = None, language: str | None = None) -> dict:
    """Create a new user account."""
    email = email.strip().lower()
    if get_user_by_email(db, email):
        raise ValueError("A user with this email already exists")
    user = User(email=email, name=name, surname=surname, language=language,
                password_hash=hash_password(password))
    db.add(user); db.commit(); db.refresh(user)
    logger.info("Created user %s", user.id)
    return public_user(user)


def get_user_by_email(db: Session, email: str) -> User | None:
    email = email.strip().lower()
    return db.execute(select(User).where(User.email == email)).scalar_one_or_none()


def get_user_by_id(db: Session, user_id: str) -> User | None:
    return db.get(User, user_id)


def authenticate_user(db: Session, email: str, password: str) -> dict | None:
    """Verify email+password. Returns user dict (without password_hash) or None."""
    user = get_user_by_email(db, email)
    if not user:
        return None
    if not verify_password(password, user.password_hash):
        return None
    return public_user(user)


def change_password(db: Session, user_id: str, current_password: str, new_password: str):
    """Replace the password after checking the current one. Raises ValueError on mismatch."""
    user = get_user_by_id(db, user_id)
    if not user or not verify_password(current_password, user.password_hash):
        raise ValueError("Current password is incorrect")
    user.password_hash = hash_password(new_password)
    db.commit()


# ── FastAPI dependencies ──

def get_current_user(request: Request, db: Session = Depends(get_db)) -> dict:
    """FastAPI dependency: extract user from session cookie. Raises 401 if not authenticated."""
    token = request.cookies.get(SESSION_COOKIE)
    user_id = verify_session_token(token)
    if not user_id:
        raise HTTPException(401, "Not authenticated")
    user = get_user_by_id(db, user_id)
    if not user:
        raise HTTPException(401, "User not found")
    return public_user(user)


def get_optional_user(request: Request, db: Session = Depends(get_db)) -> dict | None:
    """FastAPI dependency: extract user from session cookie. Returns None if not authenticated."""
    token = request.cookies.get(SESSION_COOKIE)
    user_id = verify_session_token(token)
    if not user_id:
        return None
    user = get_user_by_id(db, user_id)
    if not user:
        return None
    return public_user(user)

"""One-click unsubscribe tokens for reminder emails."""
import logging
import secrets
from datetime import timedelta

from sqlalchemy import select
from sqlalchemy.orm import Session

from .models import ImportantDate, Person, ReminderType, UnsubscribeToken, utcnow
from .names import format_full_name

logger = logging.getLogger(__name__)

TOKEN_EXPIRY_DAYS = 90

INVALID_TOKEN = "INVALID_TOKEN"
ALREADY_USED = "ALREADY_USED"
EXPIRED = "EXPIRED"


class UnsubscribeError(Exception):
    """Token could not be consumed. ``code`` is one of the module-level error codes."""

    def __init__(self, code: str):
        super().__init__(code)
        self.code = code


def create_unsubscribe_token(db: Session, user_id: str, reminder_type: str,
                             entity_id: str) -> str:
    """Return a token for this reminder, reusing a live one if it exists."""
    rtype = ReminderType(reminder_type)
    existing = db.execute(
        select(UnsubscribeToken).where(
            UnsubscribeToken.user_id == user_id,
            UnsubscribeToken.reminder_type == rtype,
            UnsubscribeToken.entity_id == entity_id,
            UnsubscribeToken.used.is_(False),
            UnsubscribeToken.expires_at > utcnow(),
        )
    ).scalars().first()
    if existing:
        return existing.token

    row = UnsubscribeToken(
        token=secrets.token_hex(32),
        user_id=user_id,
        reminder_type=rtype,
        entity_id=entity_id,
        expires_at=utcnow() + timedelta(days=TOKEN_EXPIRY_DAYS),
    )
    db.add(row); db.commit(); db.refresh(row)
    return row.token


def _get_token(db: Session, token: str) -> UnsubscribeToken | None:
    return db.execute(
        select(UnsubscribeToken).where(UnsubscribeToken.token == token)
    ).scalar_one_or_none()


def consume_unsubscribe_token(db: Session, token: str) -> dict:
    """Mark the token used and switch off the reminder it points at.

    Raises UnsubscribeError with INVALID_TOKEN, ALREADY_USED or EXPIRED.
    """
    row = _get_token(db, token)
    if row is None:
        raise UnsubscribeError(INVALID_TOKEN)
    if row.used:
        raise UnsubscribeError(ALREADY_USED)
    if row.expires_at < utcnow():
        raise UnsubscribeError(EXPIRED)

    row.used = True
    row.used_at = utcnow()

    if row.reminder_type == ReminderType.IMPORTANT_DATE:
        target = db.get(ImportantDate, row.entity_id)
        if target is not None:
            target.reminder_enabled = False
    elif row.reminder_type == ReminderType.CONTACT:
        target = db.get(Person, row.entity_id)
        if target is not None:
            target.contact_reminder_enabled = False
    db.commit()

    logger.info("Reminder unsubscribed via email: user=%s type=%s entity=%s",
                row.user_id, row.reminder_type.value, row.entity_id)
    return {
        "user": {"id": row.user.id, "email": row.user.email, "language": row.user.language},
        "reminder_type": row.reminder_type.value,
        "entity_id": row.entity_id,
    }


def get_unsubscribe_details(db: Session, token: str) -> dict | None:
    """What the unsubscribe page shows before the user confirms."""
    row = _get_token(db, token)
    if row is None:
        return None

    entity_name = ""
    if row.reminder_type == ReminderType.IMPORTANT_DATE:
        important_date = db.get(ImportantDate, row.entity_id)
        if important_date is not None:
            entity_name = f"{format_full_name(important_date.person)}'s {important_date.title}"
    elif row.reminder_type == ReminderType.CONTACT:
        person = db.get(Person, row.entity_id)
        if person is not None:
            entity_name = format_full_name(person)

    return {
        "reminder_type": row.reminder_type.value,
        "entity_name": entity_name,
        "used": row.used,
        "expired": row.expires_at < utcnow(),
    }

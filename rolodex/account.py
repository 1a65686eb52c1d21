"""Settings backend: profile updates, account summary, data export, and account deletion."""
import logging

from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Session

from .i18n import normalize_locale
from .models import (
    Group, ImportantDate, Person, PersonGroup, Relationship, RelationshipType,
    UnsubscribeToken, User,
)

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("name", "surname", "nickname", "language")


def update_profile(db: Session, user_id: str, **changes) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise ValueError("User not found")
    for field, value in changes.items():
        if field not in PROFILE_FIELDS or value is None:
            continue
        if field == "language":
            value = normalize_locale(value)
            if value is None:
                raise ValueError("Unsupported language")
        if field == "name" and not value.strip():
            raise ValueError("Name cannot be empty")
        setattr(user, field, value)
    db.commit(); db.refresh(user)
    return user


def account_summary(db: Session, user_id: str) -> dict:
    groups = db.execute(
        select(Group).where(Group.user_id == user_id, Group.deleted_at.is_(None))
        .order_by(Group.name.asc())
    ).scalars().all()
    people_count = db.execute(
        select(func.count()).select_from(Person)
        .where(Person.user_id == user_id, Person.deleted_at.is_(None))
    ).scalar_one()
    return {
        "groups": [{"id": g.id, "name": g.name, "color": g.color} for g in groups],
        "people_count": people_count,
    }


def export_account(db: Session, user_id: str, group_ids: list[str] | None = None) -> dict:
    """Everything the user owns as plain JSON. ``group_ids`` limits people to those groups."""
    groups = db.execute(
        select(Group).where(Group.user_id == user_id, Group.deleted_at.is_(None))
    ).scalars().all()
    if group_ids:
        wanted = set(group_ids)
        groups = [g for g in groups if g.id in wanted]
    # person group lists only reference groups present in the export
    exported_group_ids = {g.id for g in groups}

    people = db.execute(
        select(Person).where(Person.user_id == user_id, Person.deleted_at.is_(None))
    ).scalars().all()
    if group_ids:
        people = [p for p in people if any(pg.group_id in exported_group_ids for pg in p.groups)]
    person_ids = {p.id for p in people}

    types = db.execute(
        select(RelationshipType).where(RelationshipType.user_id == user_id,
                                       RelationshipType.deleted_at.is_(None))
    ).scalars().all()

    relationships = [
        r for p in people for r in p.relationships_from
        if r.deleted_at is None and r.related_person_id in person_ids
    ]
    return {
        "groups": [{"id": g.id, "name": g.name, "color": g.color} for g in groups],
        "relationship_types": [
            {"id": t.id, "name": t.name, "label": t.label, "color": t.color,
             "inverse_id": t.inverse_id}
            for t in types
        ],
        "people": [
            {"id": p.id, "name": p.name, "surname": p.surname, "nickname": p.nickname,
             "middle_name": p.middle_name, "second_last_name": p.second_last_name,
             "notes": p.notes, "relationship_to_user_id": p.relationship_to_user_id,
             "groups": [pg.group_id for pg in p.groups if pg.group_id in exported_group_ids],
             "important_dates": [
                 {"title": d.title, "date": d.date.isoformat(),
                  "reminder_enabled": d.reminder_enabled}
                 for d in p.important_dates if d.deleted_at is None
             ]}
            for p in people
        ],
        "relationships": [
            {"person_id": r.person_id, "related_person_id": r.related_person_id,
             "relationship_type_id": r.relationship_type_id, "notes": r.notes}
            for r in relationships
        ],
    }


def delete_account(db: Session, user_id: str):
    """Hard-delete the user and every row they own."""
    person_ids = select(Person.id).where(Person.user_id == user_id)
    group_ids = select(Group.id).where(Group.user_id == user_id)
    statements = [
        delete(UnsubscribeToken).where(UnsubscribeToken.user_id == user_id),
        delete(ImportantDate).where(ImportantDate.person_id.in_(person_ids)),
        delete(Relationship).where(Relationship.person_id.in_(person_ids)),
        delete(PersonGroup).where(PersonGroup.person_id.in_(person_ids)),
        delete(PersonGroup).where(PersonGroup.group_id.in_(group_ids)),
        delete(Person).where(Person.user_id == user_id),
        delete(Group).where(Group.user_id == user_id),
        # break the inverse pairing before the rows go
        update(RelationshipType).where(RelationshipType.user_id == user_id).values(inverse_id=None),
        delete(RelationshipType).where(RelationshipType.user_id == user_id),
        delete(User).where(User.id == user_id),
    ]
    for stmt in statements:
        db.execute(stmt, execution_options={"synchronize_session": False})
    db.commit()
    db.expire_all()
    logger.info("Deleted account %s", user_id)

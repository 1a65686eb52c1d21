import logging
from datetime import date

from sqlalchemy import select
from sqlalchemy.orm import Session

from .models import ImportantDate, Person, Relationship, RelationshipType, utcnow

logger = logging.getLogger(__name__)


# ── People ──

def get_person(db: Session, user_id: str, person_id: str) -> Person | None:
    return db.execute(
        select(Person).where(Person.id == person_id, Person.user_id == user_id,
                             Person.deleted_at.is_(None))
    ).scalar_one_or_none()


def list_people(db: Session, user_id: str):
    return db.execute(
        select(Person).where(Person.user_id == user_id, Person.deleted_at.is_(None))
        .order_by(Person.name.asc(), Person.surname.asc())
    ).scalars().all()


def create_person(db: Session, user_id: str, name: str, surname: str | None = None,
                  nickname: str | None = None, middle_name: str | None = None,
                  second_last_name: str | None = None, notes: str | None = None,
                  relationship_to_user_id: str | None = None,
                  contact_reminder_enabled: bool = False) -> Person:
    if relationship_to_user_id and not get_relationship_type(db, user_id, relationship_to_user_id):
        raise ValueError("Relationship type not found")
    p = Person(user_id=user_id, name=name, surname=surname, nickname=nickname,
               middle_name=middle_name, second_last_name=second_last_name, notes=notes,
               relationship_to_user_id=relationship_to_user_id,
               contact_reminder_enabled=contact_reminder_enabled)
    db.add(p); db.commit(); db.refresh(p)
    return p


def delete_person(db: Session, user_id: str, person_id: str) -> bool:
    """Soft-delete a person. Returns False if it was not found."""
    p = get_person(db, user_id, person_id)
    if not p:
        return False
    p.deleted_at = utcnow()
    db.commit()
    return True


# ── Relationship types ──

def get_relationship_type(db: Session, user_id: str, type_id: str) -> RelationshipType | None:
    return db.execute(
        select(RelationshipType).where(RelationshipType.id == type_id,
                                       RelationshipType.user_id == user_id,
                                       RelationshipType.deleted_at.is_(None))
    ).scalar_one_or_none()


def list_relationship_types(db: Session, user_id: str):
    return db.execute(
        select(RelationshipType).where(RelationshipType.user_id == user_id,
                                       RelationshipType.deleted_at.is_(None))
        .order_by(RelationshipType.name.asc())
    ).scalars().all()


def _type_name(label: str) -> str:
    return "_".join(label.strip().upper().split())


def create_relationship_type(db: Session, user_id: str, label: str, name: str | None = None,
                             color: str | None = None, inverse_id: str | None = None,
                             inverse_label: str | None = None,
                             inverse_color: str | None = None) -> RelationshipType:
    """Create a type, optionally paired with an existing or a brand-new inverse.

    Pairing is reciprocal: the inverse points back at the new type.
    """
    if inverse_id and inverse_label:
        raise ValueError("Provide either inverse_id or inverse_label, not both")

    rt = RelationshipType(user_id=user_id, name=name or _type_name(label), label=label, color=color)
    db.add(rt)

    if inverse_id:
        inv = get_relationship_type(db, user_id, inverse_id)
        if not inv:
            db.rollback()
            raise ValueError("Inverse relationship type not found")
        old_partner = inv.inverse
        if old_partner is not None and old_partner is not inv:
            # pairing is one-to-one: the previous partner loses its inverse
            logger.info("Re-pairing relationship type %s away from %s", inv.id, old_partner.id)
            old_partner.inverse = None
        rt.inverse = inv
        inv.inverse = rt
    elif inverse_label:
        if inverse_label.strip().lower() == label.strip().lower():
            rt.inverse = rt
        else:
            inv = RelationshipType(user_id=user_id, name=_type_name(inverse_label),
                                   label=inverse_label, color=inverse_color or color)
            db.add(inv)
            rt.inverse = inv
            inv.inverse = rt

    db.commit(); db.refresh(rt)
    return rt


def delete_relationship_type(db: Session, user_id: str, type_id: str) -> bool:
    rt = get_relationship_type(db, user_id, type_id)
    if not rt:
        return False
    rt.deleted_at = utcnow()
    db.commit()
    return True


# ── Relationships ──

def create_relationship(db: Session, user_id: str, person_id: str, related_person_id: str,
                        relationship_type_id: str, notes: str | None = None) -> Relationship:
    if person_id == related_person_id:
        raise ValueError("A person cannot be related to themselves")
    if not get_person(db, user_id, person_id) or not get_person(db, user_id, related_person_id):
        raise ValueError("Person not found")
    if not get_relationship_type(db, user_id, relationship_type_id):
        raise ValueError("Relationship type not found")

    r = Relationship(person_id=person_id, related_person_id=related_person_id,
                     relationship_type_id=relationship_type_id, notes=notes)
    db.add(r); db.commit(); db.refresh(r)
    return r


def delete_relationship(db: Session, user_id: str, relationship_id: str) -> bool:
    r = db.get(Relationship, relationship_id)
    if not r or r.deleted_at is not None or not get_person(db, user_id, r.person_id):
        return False
    r.deleted_at = utcnow()
    db.commit()
    return True


# ── Important dates ──

def create_important_date(db: Session, user_id: str, person_id: str, title: str,
                          when: date, reminder_enabled: bool = False) -> ImportantDate:
    if not get_person(db, user_id, person_id):
        raise ValueError("Person not found")
    d = ImportantDate(person_id=person_id, title=title, date=when, reminder_enabled=reminder_enabled)
    db.add(d); db.commit(); db.refresh(d)
    return d

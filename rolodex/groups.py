"""Group CRUD and person membership."""
from sqlalchemy import select
from sqlalchemy.orm import Session

from .crud import get_person
from .models import Group, PersonGroup, utcnow


def create_group(db: Session, user_id: str, name: str, color: str | None = None) -> Group:
    g = Group(user_id=user_id, name=name, color=color)
    db.add(g); db.commit(); db.refresh(g)
    return g


def get_group(db: Session, user_id: str, group_id: str) -> Group | None:
    return db.execute(
        select(Group).where(Group.id == group_id, Group.user_id == user_id,
                            Group.deleted_at.is_(None))
    ).scalar_one_or_none()


def list_groups(db: Session, user_id: str):
    return db.execute(
        select(Group).where(Group.user_id == user_id, Group.deleted_at.is_(None))
        .order_by(Group.name.asc())
    ).scalars().all()


def delete_group(db: Session, user_id: str, group_id: str) -> bool:
    """Soft-delete a group; memberships stay but are hidden from every read."""
    g = get_group(db, user_id, group_id)
    if not g:
        return False
    g.deleted_at = utcnow()
    db.commit()
    return True


# ── Membership ──

def add_member(db: Session, user_id: str, group_id: str, person_id: str):
    """Add a person to a group. No-op if already a member."""
    if not get_group(db, user_id, group_id):
        raise ValueError("Group not found")
    if not get_person(db, user_id, person_id):
        raise ValueError("Person not found")
    if db.get(PersonGroup, (person_id, group_id)):
        return
    db.add(PersonGroup(person_id=person_id, group_id=group_id))
    db.commit()


def remove_member(db: Session, user_id: str, group_id: str, person_id: str) -> bool:
    if not get_group(db, user_id, group_id):
        return False
    pg = db.get(PersonGroup, (person_id, group_id))
    if not pg:
        return False
    db.delete(pg)
    db.commit()
    return True


def list_members(db: Session, user_id: str, group_id: str):
    g = get_group(db, user_id, group_id)
    if not g:
        return []
    people = [pg.person for pg in g.people if pg.person.deleted_at is None]
    return sorted(people, key=lambda p: (p.name, p.surname or ""))

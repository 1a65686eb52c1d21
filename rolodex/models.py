import uuid, enum
from datetime import date as date_type, datetime, timezone
from sqlalchemy import String, Text, ForeignKey, Date, DateTime, Boolean, Enum
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def _uuid() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    # naive UTC so values compare the same before and after a SQLite round trip
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Base(DeclarativeBase):
    pass


class ReminderType(enum.Enum):
    IMPORTANT_DATE = "IMPORTANT_DATE"
    CONTACT = "CONTACT"


class User(Base):
    __tablename__ = "user"
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    surname: Mapped[str | None] = mapped_column(String(200), nullable=True)
    nickname: Mapped[str | None] = mapped_column(String(200), nullable=True)
    password_hash: Mapped[str] = mapped_column(String(100), nullable=False)
    language: Mapped[str | None] = mapped_column(String(10), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)


class PersonGroup(Base):
    __tablename__ = "person_group"
    person_id: Mapped[str] = mapped_column(String(36), ForeignKey("person.id", ondelete="CASCADE"), primary_key=True)
    group_id: Mapped[str] = mapped_column(String(36), ForeignKey("group.id", ondelete="CASCADE"), primary_key=True)

    person = relationship("Person", back_populates="groups")
    group = relationship("Group", back_populates="people")


class Group(Base):
    __tablename__ = "group"
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("user.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    color: Mapped[str | None] = mapped_column(String(20), nullable=True)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    people = relationship("PersonGroup", back_populates="group", cascade="all, delete-orphan")


class RelationshipType(Base):
    __tablename__ = "relationship_type"
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("user.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    label: Mapped[str] = mapped_column(String(100), nullable=False)
    color: Mapped[str | None] = mapped_column(String(20), nullable=True)

    # one-to-one pairing, e.g. PARENT <-> CHILD; a symmetric type points at itself
    inverse_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("relationship_type.id", ondelete="SET NULL"), nullable=True
    )
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    inverse = relationship("RelationshipType", remote_side=[id], foreign_keys=[inverse_id], post_update=True)


class Person(Base):
    __tablename__ = "person"
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("user.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    surname: Mapped[str | None] = mapped_column(String(200), nullable=True)
    middle_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    second_last_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    nickname: Mapped[str | None] = mapped_column(String(200), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # how this person relates to the owning user
    relationship_to_user_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("relationship_type.id", ondelete="SET NULL"), nullable=True
    )
    contact_reminder_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    relationship_to_user = relationship("RelationshipType", foreign_keys=[relationship_to_user_id])
    groups = relationship("PersonGroup", back_populates="person", cascade="all, delete-orphan")
    relationships_from = relationship(
        "Relationship", foreign_keys="Relationship.person_id", back_populates="person",
        cascade="all, delete-orphan",
    )
    important_dates = relationship("ImportantDate", back_populates="person", cascade="all, delete-orphan")


class Relationship(Base):
    __tablename__ = "relationship"
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    person_id: Mapped[str] = mapped_column(String(36), ForeignKey("person.id"), nullable=False, index=True)
    related_person_id: Mapped[str] = mapped_column(String(36), ForeignKey("person.id"), nullable=False)

    # nullable: a type can be removed out from under an existing relationship
    relationship_type_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("relationship_type.id", ondelete="SET NULL"), nullable=True
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    person = relationship("Person", foreign_keys=[person_id], back_populates="relationships_from")
    related_person = relationship("Person", foreign_keys=[related_person_id])
    relationship_type = relationship("RelationshipType", foreign_keys=[relationship_type_id])


class ImportantDate(Base):
    __tablename__ = "important_date"
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    person_id: Mapped[str] = mapped_column(String(36), ForeignKey("person.id"), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    date: Mapped[date_type] = mapped_column(Date, nullable=False)
    reminder_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    person = relationship("Person", back_populates="important_dates")


class UnsubscribeToken(Base):
    __tablename__ = "unsubscribe_token"
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    token: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("user.id", ondelete="CASCADE"), nullable=False)
    reminder_type: Mapped[ReminderType] = mapped_column(Enum(ReminderType), nullable=False)
    entity_id: Mapped[str] = mapped_column(String(36), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    used: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    used_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)

    user = relationship("User")

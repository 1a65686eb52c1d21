from datetime import date as date_type
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, Literal


class ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# ── Auth ──

class RegisterIn(BaseModel):
    email: str
    name: str
    password: str
    surname: Optional[str] = None
    language: Optional[str] = None

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        v = v.strip()
        if "@" not in v or v.startswith("@") or v.endswith("@"):
            raise ValueError("Invalid email address")
        return v


class LoginIn(BaseModel):
    email: str
    password: str


class UserOut(BaseModel):
    id: str
    email: str
    name: str
    surname: Optional[str] = None
    nickname: Optional[str] = None
    language: Optional[str] = None


class ProvidersOut(BaseModel):
    providers: dict[str, bool]


# ── People, groups, relationship types ──

class PersonCreate(BaseModel):
    name: str
    surname: Optional[str] = None
    nickname: Optional[str] = None
    middle_name: Optional[str] = None
    second_last_name: Optional[str] = None
    notes: Optional[str] = None
    relationship_to_user_id: Optional[str] = None
    contact_reminder_enabled: bool = False

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v.strip():
            raise ValueError("name is required")
        return v.strip()


class PersonOut(ORMModel):
    id: str
    name: str
    surname: Optional[str] = None
    nickname: Optional[str] = None
    middle_name: Optional[str] = None
    second_last_name: Optional[str] = None
    notes: Optional[str] = None
    relationship_to_user_id: Optional[str] = None
    contact_reminder_enabled: bool = False


class GroupCreate(BaseModel):
    name: str
    color: Optional[str] = None


class GroupOut(ORMModel):
    id: str
    name: str
    color: Optional[str] = None


class MemberIn(BaseModel):
    person_id: str


class RelationshipTypeCreate(BaseModel):
    label: str
    name: Optional[str] = None
    color: Optional[str] = None
    inverse_id: Optional[str] = None
    inverse_label: Optional[str] = None
    inverse_color: Optional[str] = None


class RelationshipTypeOut(ORMModel):
    id: str
    name: str
    label: str
    color: Optional[str] = None
    inverse_id: Optional[str] = None


class RelCreate(BaseModel):
    person_id: str
    related_person_id: str
    relationship_type_id: str
    notes: Optional[str] = None


class RelOut(ORMModel):
    id: str
    person_id: str
    related_person_id: str
    relationship_type_id: Optional[str] = None
    notes: Optional[str] = None


class ImportantDateCreate(BaseModel):
    person_id: str
    title: str
    date: date_type
    reminder_enabled: bool = False


class ImportantDateOut(ORMModel):
    id: str
    person_id: str
    title: str
    date: date_type
    reminder_enabled: bool


# ── Graph ──

class GraphNode(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    label: str
    groups: list[str]
    colors: list[str]
    is_center: bool = Field(alias="isCenter")


class GraphEdge(BaseModel):
    source: str
    target: str
    type: str
    color: str


class GraphOut(BaseModel):
    nodes: list[GraphNode]
    edges: list[GraphEdge]


# ── Unsubscribe ──

class UnsubscribeIn(BaseModel):
    token: Optional[str] = None


class UnsubscribeOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    reminder_type: Literal["IMPORTANT_DATE", "CONTACT"] = Field(alias="reminderType")


class UnsubscribeDetailsOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    reminder_type: Literal["IMPORTANT_DATE", "CONTACT"] = Field(alias="reminderType")
    entity_name: str = Field(alias="entityName")
    used: bool
    expired: bool


# ── Settings ──

class ProfileUpdate(BaseModel):
    name: Optional[str] = None
    surname: Optional[str] = None
    nickname: Optional[str] = None
    language: Optional[str] = None


class PasswordChange(BaseModel):
    current_password: str
    new_password: str


class AccountGroup(BaseModel):
    id: str
    name: str
    color: Optional[str] = None


class AccountSummary(BaseModel):
    groups: list[AccountGroup]
    people_count: int

"""Social graph for a single person: typed aggregate loading and node/edge assembly.

``load_person_network`` reads one person plus two levels of outgoing
relationships from the database, dropping soft-deleted rows on the way, and
freezes the result into plain dataclasses. ``assemble_graph`` turns that
aggregate into the ``{"nodes": [...], "edges": [...]}`` payload the graph view
renders. Assembly is pure: no I/O, no mutation of its input.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload, selectinload

from .models import Person, PersonGroup, Relationship, RelationshipType
from .names import format_graph_name

logger = logging.getLogger(__name__)

DEFAULT_GROUP_COLOR = "#3B82F6"
DEFAULT_USER_EDGE_COLOR = "#9CA3AF"
DEFAULT_EDGE_COLOR = "#999999"
USER_NODE_LABEL = "You"


# ── Aggregate ──

@dataclass(frozen=True)
class TypeRef:
    label: str
    color: Optional[str] = None
    inverse: Optional["TypeRef"] = None


@dataclass(frozen=True)
class GroupRef:
    name: str
    color: Optional[str] = None


@dataclass(frozen=True)
class RelationshipRef:
    person_id: str
    related_person_id: str
    relationship_type: Optional[TypeRef] = None
    # only materialized on the first hop from the focal person
    related_person: Optional["PersonAggregate"] = None


@dataclass(frozen=True)
class PersonAggregate:
    id: str
    name: str
    surname: Optional[str] = None
    nickname: Optional[str] = None
    groups: Tuple[GroupRef, ...] = ()
    relationship_to_user: Optional[TypeRef] = None
    relationships_from: Tuple[RelationshipRef, ...] = ()


def user_node_id(user_id: str) -> str:
    return f"user-{user_id}"


# ── Loading ──

def _live(row) -> bool:
    return row is not None and row.deleted_at is None


def _type_ref(rt: RelationshipType | None) -> TypeRef | None:
    if not _live(rt):
        return None
    inverse = rt.inverse if _live(rt.inverse) else None
    return TypeRef(
        label=rt.label,
        color=rt.color,
        inverse=TypeRef(label=inverse.label, color=inverse.color) if inverse else None,
    )


def _to_aggregate(person: Person, depth: int) -> PersonAggregate:
    groups = tuple(
        GroupRef(name=pg.group.name, color=pg.group.color)
        for pg in person.groups if _live(pg.group)
    )
    rels = []
    for rel in person.relationships_from:
        if rel.deleted_at is not None or not _live(rel.related_person):
            continue
        related = _to_aggregate(rel.related_person, depth - 1) if depth > 1 else None
        rels.append(RelationshipRef(
            person_id=rel.person_id,
            related_person_id=rel.related_person_id,
            relationship_type=_type_ref(rel.relationship_type),
            related_person=related,
        ))
    return PersonAggregate(
        id=person.id,
        name=person.name,
        surname=person.surname,
        nickname=person.nickname,
        groups=groups,
        relationship_to_user=_type_ref(person.relationship_to_user),
        relationships_from=tuple(rels),
    )


def load_person_network(db: Session, person_id: str, user_id: str) -> PersonAggregate | None:
    """Fetch a person owned by ``user_id`` with two hops of relationships.

    Returns None if the person is missing, soft-deleted, or belongs to someone
    else. Soft-deleted groups, relationships, related people and relationship
    types are excluded at every level.
    """
    type_opts = joinedload(Relationship.relationship_type).joinedload(RelationshipType.inverse)
    stmt = (
        select(Person)
        .where(Person.id == person_id, Person.user_id == user_id, Person.deleted_at.is_(None))
        .options(
            selectinload(Person.groups).joinedload(PersonGroup.group),
            joinedload(Person.relationship_to_user).joinedload(RelationshipType.inverse),
            selectinload(Person.relationships_from).options(
                type_opts,
                joinedload(Relationship.related_person).options(
                    selectinload(Person.groups).joinedload(PersonGroup.group),
                    joinedload(Person.relationship_to_user).joinedload(RelationshipType.inverse),
                    selectinload(Person.relationships_from).options(
                        type_opts,
                        joinedload(Relationship.related_person),
                    ),
                ),
            ),
        )
        .execution_options(populate_existing=True)
    )
    person = db.execute(stmt).unique().scalar_one_or_none()
    if person is None:
        return None
    return _to_aggregate(person, depth=2)


# ── Nodes & edges ──

def person_node(person: PersonAggregate, is_center: bool = False) -> dict:
    return {
        "id": person.id,
        "label": format_graph_name(person),
        "groups": [g.name for g in person.groups],
        "colors": [g.color or DEFAULT_GROUP_COLOR for g in person.groups],
        "isCenter": is_center,
    }


def user_node(node_id: str, is_center: bool = False) -> dict:
    return {"id": node_id, "label": USER_NODE_LABEL, "groups": [], "colors": [], "isCenter": is_center}


def _edge(source: str, target: str, rel_type: TypeRef, default_color: str) -> dict:
    return {"source": source, "target": target, "type": rel_type.label,
            "color": rel_type.color or default_color}


def user_edges(person: PersonAggregate, node_id: str) -> List[dict]:
    """Edges between a person and the viewing user: theirs to you, and yours to them."""
    rel_type = person.relationship_to_user
    if rel_type is None:
        return []
    edges = [_edge(person.id, node_id, rel_type, DEFAULT_USER_EDGE_COLOR)]
    if rel_type.inverse is not None:
        edges.append(_edge(node_id, person.id, rel_type.inverse, DEFAULT_USER_EDGE_COLOR))
    return edges


def relationship_edge(rel: RelationshipRef) -> dict | None:
    if rel.relationship_type is None:
        logger.warning(
            "Relationship %s -> %s has no relationship type; no edge drawn",
            rel.person_id, rel.related_person_id,
        )
        return None
    return _edge(rel.person_id, rel.related_person_id, rel.relationship_type, DEFAULT_EDGE_COLOR)


def inverse_relationship_edge(rel: RelationshipRef) -> dict | None:
    if rel.relationship_type is None or rel.relationship_type.inverse is None:
        return None
    return _edge(rel.related_person_id, rel.person_id, rel.relationship_type.inverse, DEFAULT_EDGE_COLOR)


def _level_edges(rels: Iterable[RelationshipRef]) -> List[dict]:
    # forward edges of a level first, then its inverse edges
    rels = list(rels)
    forward = [relationship_edge(r) for r in rels]
    inverse = [inverse_relationship_edge(r) for r in rels]
    return [e for e in forward + inverse if e is not None]


def _dedupe(edges: Iterable[dict]) -> List[dict]:
    seen = set()
    out = []
    for e in edges:
        key = (e["source"], e["target"], e["type"], e["color"])
        if key in seen:
            continue
        seen.add(key)
        out.append(e)
    return out


def assemble_graph(person: PersonAggregate, viewer_node_id: str) -> dict:
    """Build the node/edge view of ``person``'s one-hop network as seen by the viewer."""
    nodes = [person_node(person, is_center=True), user_node(viewer_node_id)]
    node_ids = {person.id, viewer_node_id}
    edges = user_edges(person, viewer_node_id)

    for rel in person.relationships_from:
        related = rel.related_person
        if related is None:
            continue
        if rel.related_person_id not in node_ids:
            nodes.append(person_node(related))
            node_ids.add(rel.related_person_id)
        edges.extend(user_edges(related, viewer_node_id))

    edges.extend(_level_edges(person.relationships_from))

    # relationships among the people around the focal person
    for rel in person.relationships_from:
        if rel.related_person is None:
            continue
        for e in _level_edges(rel.related_person.relationships_from):
            if e["source"] in node_ids and e["target"] in node_ids:
                edges.append(e)
            else:
                logger.debug("Dropping edge %s -> %s outside the one-hop network",
                             e["source"], e["target"])

    return {"nodes": nodes, "edges": _dedupe(edges)}

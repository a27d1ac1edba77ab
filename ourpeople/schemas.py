"""Dataclasses for people, relationships and exported snapshots."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Mapping, Optional

PARENT = "parent"
CHILD = "child"
SIBLING = "sibling"
SPOUSE = "spouse"
FRIEND = "friend"

RELATIONSHIP_TYPES = (PARENT, CHILD, SIBLING, SPOUSE, FRIEND)

# "A is <type> of B" seen from A's side
INVERSE_TYPES = {
    PARENT: CHILD,
    CHILD: PARENT,
    SIBLING: SIBLING,
    SPOUSE: SPOUSE,
    FRIEND: FRIEND,
}

SYMMETRIC_TYPES = frozenset({SIBLING, SPOUSE, FRIEND})
TERMINAL_TYPES = frozenset({FRIEND})

MALE = "male"
FEMALE = "female"
GENDERS = (MALE, FEMALE)


def normalize_gender(value: Any) -> Optional[str]:
    """Map free-form input to one of :data:`GENDERS` or ``None``."""
    if not isinstance(value, str):
        return None
    value = value.strip().lower()
    if value in ("m", "man", "boy"):
        value = MALE
    elif value in ("f", "woman", "girl"):
        value = FEMALE
    return value if value in GENDERS else None


def check_type(value: str) -> str:
    if value not in RELATIONSHIP_TYPES:
        raise ValueError(f"Invalid relationship type: {value!r}")
    return value


def inverse_type(value: str) -> str:
    return INVERSE_TYPES[check_type(value)]


def _pick(data: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return default


@dataclass
class Person:
    id: str
    name: str
    gender: Optional[str] = None
    photo: Optional[str] = None
    notes: Optional[str] = None
    is_user: bool = False
    created_at: str = ""
    updated_at: str = ""

    def __post_init__(self) -> None:
        self.gender = normalize_gender(self.gender)

    def dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Person":
        return cls(
            id=str(data["id"]),
            name=str(_pick(data, "name", default="")),
            gender=data.get("gender"),
            photo=data.get("photo"),
            notes=data.get("notes"),
            is_user=bool(_pick(data, "is_user", "isUser", default=False)),
            created_at=_pick(data, "created_at", "createdAt", default=""),
            updated_at=_pick(data, "updated_at", "updatedAt", default=""),
        )


@dataclass
class Relationship:
    id: str
    person_a_id: str
    person_b_id: str
    type: str
    created_at: str = ""
    updated_at: str = ""

    def __post_init__(self) -> None:
        check_type(self.type)

    @property
    def person_ids(self) -> tuple[str, str]:
        return self.person_a_id, self.person_b_id

    def involves(self, person_id: str) -> bool:
        return person_id in (self.person_a_id, self.person_b_id)

    def dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Relationship":
        person_a_id = _pick(data, "person_a_id", "personAId")
        person_b_id = _pick(data, "person_b_id", "personBId")
        if person_a_id is None or person_b_id is None:
            raise ValueError(f"Relationship {data.get('id')!r} is missing an endpoint")
        return cls(
            id=str(data["id"]),
            person_a_id=str(person_a_id),
            person_b_id=str(person_b_id),
            type=data["type"],
            created_at=_pick(data, "created_at", "createdAt", default=""),
            updated_at=_pick(data, "updated_at", "updatedAt", default=""),
        )


@dataclass
class Snapshot:
    """Plain export/import shape: every person and every relationship."""

    people: List[Person] = field(default_factory=list)
    relationships: List[Relationship] = field(default_factory=list)

    def dict(self) -> Dict[str, Any]:
        return {
            "people": [person.dict() for person in self.people],
            "relationships": [rel.dict() for rel in self.relationships],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Snapshot":
        people = data.get("people")
        relationships = data.get("relationships")
        if not isinstance(people, list) or not isinstance(relationships, list):
            raise ValueError("Snapshot needs 'people' and 'relationships' lists")
        return cls(
            people=[Person.from_dict(item) for item in people],
            relationships=[Relationship.from_dict(item) for item in relationships],
        )


__all__ = [
    "PARENT",
    "CHILD",
    "SIBLING",
    "SPOUSE",
    "FRIEND",
    "MALE",
    "FEMALE",
    "GENDERS",
    "RELATIONSHIP_TYPES",
    "INVERSE_TYPES",
    "SYMMETRIC_TYPES",
    "TERMINAL_TYPES",
    "Person",
    "Relationship",
    "Snapshot",
    "check_type",
    "inverse_type",
    "normalize_gender",
]

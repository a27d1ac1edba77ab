"""In-memory indexed collections of people and relationships."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from .schemas import Person, Relationship


class EntityStore:
    """Unit of truth the graph and the generators read from.

    The store never performs I/O; :class:`ourpeople.engine.FamilyEngine`
    writes to storage first and only then mirrors the change here.
    """

    def __init__(self) -> None:
        self._people: Dict[str, Person] = {}
        self._relationships: Dict[str, Relationship] = {}

    # -- people ---------------------------------------------------------

    def put_person(self, person: Person) -> None:
        self._people[person.id] = person

    def get_person(self, person_id: str | None) -> Optional[Person]:
        if person_id is None:
            return None
        return self._people.get(person_id)

    def has_person(self, person_id: str) -> bool:
        return person_id in self._people

    def remove_person(self, person_id: str) -> Optional[Person]:
        return self._people.pop(person_id, None)

    def people(self) -> List[Person]:
        return list(self._people.values())

    @property
    def person_count(self) -> int:
        return len(self._people)

    # -- relationships --------------------------------------------------

    def put_relationship(self, relationship: Relationship) -> None:
        self._relationships[relationship.id] = relationship

    def get_relationship(self, relationship_id: str) -> Optional[Relationship]:
        return self._relationships.get(relationship_id)

    def remove_relationship(self, relationship_id: str) -> Optional[Relationship]:
        return self._relationships.pop(relationship_id, None)

    def relationships(self) -> List[Relationship]:
        return list(self._relationships.values())

    def relationships_for(self, person_id: str) -> List[Relationship]:
        return [rel for rel in self._relationships.values() if rel.involves(person_id)]

    def find_relationship(self, person_a_id: str, person_b_id: str, rel_type: str) -> Optional[Relationship]:
        """Exact ordered-pair lookup used to keep creation idempotent."""
        for rel in self._relationships.values():
            if (
                rel.person_a_id == person_a_id
                and rel.person_b_id == person_b_id
                and rel.type == rel_type
            ):
                return rel
        return None

    @property
    def relationship_count(self) -> int:
        return len(self._relationships)

    # -- bulk -----------------------------------------------------------

    def clear(self) -> None:
        self._people.clear()
        self._relationships.clear()

    def load(self, people: Iterable[Person], relationships: Iterable[Relationship]) -> None:
        self.clear()
        for person in people:
            self.put_person(person)
        for rel in relationships:
            self.put_relationship(rel)


__all__ = ["EntityStore"]

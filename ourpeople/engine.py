"""FamilyEngine: the surface the presentation layer talks to.

Reads (``neighbors``, ``explain``, ``summarize``...) are synchronous and work
on the in-memory store and graph. Mutations are coroutines that write to the
storage collaborator first and only then update memory, so an awaited
mutation leaves both layers in agreement. A per-instance lock keeps
concurrent callers from interleaving their bookkeeping.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, replace
from typing import Any, Iterable, List, Mapping, Optional

from .config import EngineConfig
from .explain import Explainer, Explanation
from .graph import KinshipGraph, Path
from .nametag import NametagLine, format_nametag, summarize
from .schemas import PARENT, SPOUSE, Person, Relationship, Snapshot, check_type
from .storage import StorageAdapter
from .store import EntityStore
from .utils import logger, new_id, timestamp

PERSON_FIELDS = ("name", "gender", "photo", "notes", "is_user")


@dataclass
class DirectRelation:
    person: Person
    type: str
    relationship_id: str


@dataclass
class FamilyMember:
    """Input for :meth:`FamilyEngine.quick_add_family`."""

    name: str
    gender: Optional[str] = None


class FamilyEngine:
    def __init__(self, storage: StorageAdapter, config: EngineConfig | None = None) -> None:
        self.storage = storage
        self.config = config or EngineConfig()
        self.store = EntityStore()
        self.graph = KinshipGraph(order=self.config.neighbor_order)
        self.explainer = Explainer(self.store, self.graph, self.config)
        self._perspective_id: Optional[str] = None
        self._lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # loading
    # ------------------------------------------------------------------

    async def initialize(self) -> None:
        """(Re)build memory from the storage collaborator's current state."""

        people = await self.storage.load_people()
        relationships = await self.storage.load_relationships()
        self._rebuild(people, relationships)

    def _rebuild(self, people: Iterable[Person], relationships: Iterable[Relationship]) -> None:
        self.store.clear()
        self.graph.clear()
        for person in people:
            self.store.put_person(person)
            self.graph.add_person(person.id)
        for rel in relationships:
            self.store.put_relationship(rel)
            if self.store.has_person(rel.person_a_id) and self.store.has_person(rel.person_b_id):
                self.graph.add_edge(rel)
            else:
                logger.warning("Relationship %s references a missing person", rel.id)

        if self._perspective_id is not None and not self.store.has_person(self._perspective_id):
            self._perspective_id = None
        if self._perspective_id is None:
            legacy = next((p for p in self.store.people() if p.is_user), None)
            if legacy is not None:
                self._perspective_id = legacy.id
        logger.debug(
            "Loaded %d people and %d relationships",
            self.store.person_count,
            self.store.relationship_count,
        )

    # ------------------------------------------------------------------
    # perspective
    # ------------------------------------------------------------------

    @property
    def perspective_id(self) -> Optional[str]:
        return self._perspective_id

    def perspective(self) -> Optional[Person]:
        return self.store.get_person(self._perspective_id)

    def set_perspective(self, person_id: Optional[str]) -> Optional[Person]:
        """Point "you" at ``person_id``; ``None`` clears it. Unknown ids are ignored."""

        if person_id is None:
            self._perspective_id = None
            return None
        person = self.store.get_person(person_id)
        if person is None:
            logger.debug("Perspective %s not found; keeping %s", person_id, self._perspective_id)
            return None
        self._perspective_id = person_id
        return person

    # ------------------------------------------------------------------
    # people
    # ------------------------------------------------------------------

    def get_person(self, person_id: str) -> Optional[Person]:
        return self.store.get_person(person_id)

    def people(self) -> List[Person]:
        return self.store.people()

    async def add_person(
        self,
        name: str,
        gender: Optional[str] = None,
        photo: Optional[str] = None,
        notes: Optional[str] = None,
        is_user: bool = False,
    ) -> Person:
        now = timestamp()
        person = Person(
            id=new_id(),
            name=name,
            gender=gender,
            photo=photo,
            notes=notes,
            is_user=is_user,
            created_at=now,
            updated_at=now,
        )
        async with self._lock:
            await self.storage.save_person(person)
            self.store.put_person(person)
            self.graph.add_person(person.id)
        logger.debug("Added person %s (%s)", person.name, person.id)
        return person

    async def update_person(self, person_id: str, **changes: Any) -> Optional[Person]:
        unknown = set(changes) - set(PERSON_FIELDS)
        if unknown:
            raise ValueError(f"Unknown person fields: {sorted(unknown)}")
        async with self._lock:
            existing = self.store.get_person(person_id)
            if existing is None:
                return None
            updated = replace(existing, updated_at=timestamp(), **changes)
            await self.storage.save_person(updated)
            self.store.put_person(updated)
        return updated

    async def delete_person(self, person_id: str) -> bool:
        """Remove a person plus every relationship touching them."""

        async with self._lock:
            if not self.store.has_person(person_id):
                return False
            incident = [rel.id for rel in self.store.relationships_for(person_id)]
            # each removal is committed as soon as its storage delete succeeds
            for relationship_id in incident:
                await self.storage.delete_relationship(relationship_id)
                self.store.remove_relationship(relationship_id)
                self.graph.remove_edge(relationship_id)
            await self.storage.delete_person(person_id)

            self.graph.remove_person(person_id)
            self.store.remove_person(person_id)
            if self._perspective_id == person_id:
                self._perspective_id = None
        logger.debug("Deleted person %s and %d relationships", person_id, len(incident))
        return True

    # ------------------------------------------------------------------
    # relationships
    # ------------------------------------------------------------------

    def get_relationship(self, relationship_id: str) -> Optional[Relationship]:
        return self.store.get_relationship(relationship_id)

    def relationships(self) -> List[Relationship]:
        return self.store.relationships()

    async def add_relationship(self, person_a_id: str, person_b_id: str, rel_type: str) -> Optional[Relationship]:
        """Record "A is <type> of B".

        Returns ``None`` when either person is unknown (or both are the same
        person) and the existing record when the fact is already stored.
        """

        check_type(rel_type)
        async with self._lock:
            if not (self.store.has_person(person_a_id) and self.store.has_person(person_b_id)):
                logger.debug("Cannot relate %s and %s: person not found", person_a_id, person_b_id)
                return None
            if person_a_id == person_b_id:
                logger.debug("Ignoring %s relationship of %s with themselves", rel_type, person_a_id)
                return None
            duplicate = self.store.find_relationship(person_a_id, person_b_id, rel_type)
            if duplicate is not None:
                logger.debug("Relationship %s already recorded", duplicate.id)
                return duplicate
            now = timestamp()
            relationship = Relationship(
                id=new_id(),
                person_a_id=person_a_id,
                person_b_id=person_b_id,
                type=rel_type,
                created_at=now,
                updated_at=now,
            )
            await self.storage.save_relationship(relationship)
            self.store.put_relationship(relationship)
            self.graph.add_edge(relationship)
        return relationship

    async def update_relationship(self, relationship_id: str, rel_type: str) -> Optional[Relationship]:
        check_type(rel_type)
        async with self._lock:
            existing = self.store.get_relationship(relationship_id)
            if existing is None:
                return None
            if existing.type == rel_type:
                return existing
            duplicate = self.store.find_relationship(existing.person_a_id, existing.person_b_id, rel_type)
            if duplicate is not None:
                return duplicate
            updated = replace(existing, type=rel_type, updated_at=timestamp())
            await self.storage.save_relationship(updated)
            self.store.put_relationship(updated)
            self.graph.add_edge(updated)
        return updated

    async def delete_relationship(self, relationship_id: str) -> bool:
        async with self._lock:
            if self.store.get_relationship(relationship_id) is None:
                return False
            await self.storage.delete_relationship(relationship_id)
            self.store.remove_relationship(relationship_id)
            self.graph.remove_edge(relationship_id)
        return True

    def neighbors(self, person_id: str) -> List[DirectRelation]:
        relations = []
        for neighbor in self.graph.neighbors(person_id):
            person = self.store.get_person(neighbor.person_id)
            if person is not None:
                relations.append(DirectRelation(person, neighbor.type, neighbor.relationship_id))
        return relations

    async def quick_add_family(
        self,
        person_id: str,
        spouse: FamilyMember | None = None,
        children: Iterable[FamilyMember] = (),
    ) -> List[Person]:
        """Add a spouse and children around ``person_id`` in one go."""

        if not self.store.has_person(person_id):
            return []
        added: List[Person] = []
        spouse_id = None
        if spouse is not None and spouse.name.strip():
            new_spouse = await self.add_person(spouse.name.strip(), gender=spouse.gender)
            await self.add_relationship(new_spouse.id, person_id, SPOUSE)
            spouse_id = new_spouse.id
            added.append(new_spouse)
        for child in children:
            if not child.name.strip():
                continue
            new_child = await self.add_person(child.name.strip(), gender=child.gender)
            await self.add_relationship(person_id, new_child.id, PARENT)
            if spouse_id is not None:
                await self.add_relationship(spouse_id, new_child.id, PARENT)
            added.append(new_child)
        return added

    # ------------------------------------------------------------------
    # reads
    # ------------------------------------------------------------------

    def _viewer(self, perspective_id: Optional[str]) -> Optional[str]:
        return self._perspective_id if perspective_id is None else perspective_id

    def shortest_path(self, from_id: str, to_id: str, max_depth: int | None = None) -> Optional[Path]:
        depth = self.config.max_depth if max_depth is None else max_depth
        return self.graph.shortest_path(from_id, to_id, depth, self.config.terminal_types)

    def explain(self, person_id: str, perspective_id: Optional[str] = None) -> List[str]:
        return self.explainer.explain(person_id, self._viewer(perspective_id))

    def explain_scored(self, person_id: str, perspective_id: Optional[str] = None) -> List[Explanation]:
        return self.explainer.explain_scored(person_id, self._viewer(perspective_id))

    def display_name(self, person_id: str, perspective_id: Optional[str] = None) -> str:
        return self.explainer.display_name(person_id, self._viewer(perspective_id))

    def summarize(self, person_id: str) -> List[NametagLine]:
        return summarize(self.store, self.graph, person_id)

    def nametag(self, person_id: str) -> Optional[str]:
        person = self.store.get_person(person_id)
        if person is None:
            return None
        return format_nametag(person.name, self.summarize(person_id))

    # ------------------------------------------------------------------
    # bulk
    # ------------------------------------------------------------------

    async def export_data(self) -> Snapshot:
        return await self.storage.export_data()

    async def import_data(self, data: Snapshot | Mapping[str, Any]) -> None:
        """Replace everything with ``data`` and reload from storage."""

        snapshot = data if isinstance(data, Snapshot) else Snapshot.from_dict(data)
        async with self._lock:
            await self.storage.import_data(snapshot)
            people = await self.storage.load_people()
            relationships = await self.storage.load_relationships()
            self._rebuild(people, relationships)
        logger.info(
            "Imported %d people and %d relationships",
            self.store.person_count,
            self.store.relationship_count,
        )

    async def clear_all(self) -> None:
        async with self._lock:
            await self.storage.clear_all()
            self.store.clear()
            self.graph.clear()
            self._perspective_id = None


__all__ = ["FamilyEngine", "DirectRelation", "FamilyMember"]

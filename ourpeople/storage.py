"""Persistence collaborators: async storage adapters and a preference store."""

from __future__ import annotations

import asyncio
import os
import sqlite3
from contextlib import closing
from dataclasses import replace
from typing import Any, Callable, Dict, List, Optional, Protocol

from .schemas import Person, Relationship, Snapshot
from .utils import logger


class StorageError(RuntimeError):
    pass


class StorageAdapter(Protocol):
    async def load_people(self) -> List[Person]: ...

    async def load_relationships(self) -> List[Relationship]: ...

    async def save_person(self, person: Person) -> None: ...

    async def delete_person(self, person_id: str) -> None: ...

    async def save_relationship(self, relationship: Relationship) -> None: ...

    async def delete_relationship(self, relationship_id: str) -> None: ...

    async def export_data(self) -> Snapshot: ...

    async def import_data(self, snapshot: Snapshot) -> None: ...

    async def clear_all(self) -> None: ...


class MemoryStorage:
    """Dict-backed adapter useful for testing and embedding."""

    def __init__(self, snapshot: Snapshot | None = None) -> None:
        self._people: Dict[str, Person] = {}
        self._relationships: Dict[str, Relationship] = {}
        if snapshot is not None:
            self._replace(snapshot)

    def _replace(self, snapshot: Snapshot) -> None:
        self._people = {p.id: replace(p) for p in snapshot.people}
        self._relationships = {r.id: replace(r) for r in snapshot.relationships}

    async def load_people(self) -> List[Person]:
        return [replace(p) for p in self._people.values()]

    async def load_relationships(self) -> List[Relationship]:
        return [replace(r) for r in self._relationships.values()]

    async def save_person(self, person: Person) -> None:
        self._people[person.id] = replace(person)

    async def delete_person(self, person_id: str) -> None:
        self._people.pop(person_id, None)

    async def save_relationship(self, relationship: Relationship) -> None:
        self._relationships[relationship.id] = replace(relationship)

    async def delete_relationship(self, relationship_id: str) -> None:
        self._relationships.pop(relationship_id, None)

    async def export_data(self) -> Snapshot:
        return Snapshot(await self.load_people(), await self.load_relationships())

    async def import_data(self, snapshot: Snapshot) -> None:
        self._replace(snapshot)

    async def clear_all(self) -> None:
        self._people.clear()
        self._relationships.clear()


SCHEMA = """
CREATE TABLE IF NOT EXISTS people (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    gender TEXT,
    photo TEXT,
    notes TEXT,
    is_user INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS relationships (
    id TEXT PRIMARY KEY,
    person_a_id TEXT NOT NULL,
    person_b_id TEXT NOT NULL,
    type TEXT NOT NULL,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_relationships_a ON relationships(person_a_id);
CREATE INDEX IF NOT EXISTS idx_relationships_b ON relationships(person_b_id);
CREATE TABLE IF NOT EXISTS preferences (
    key TEXT PRIMARY KEY,
    value TEXT
);
"""

UPSERT_PERSON = """
INSERT INTO people (id, name, gender, photo, notes, is_user, created_at, updated_at)
VALUES (?, ?, ?, ?, ?, ?, ?, ?)
ON CONFLICT(id) DO UPDATE SET
    name = excluded.name,
    gender = excluded.gender,
    photo = excluded.photo,
    notes = excluded.notes,
    is_user = excluded.is_user,
    updated_at = excluded.updated_at
"""

UPSERT_RELATIONSHIP = """
INSERT INTO relationships (id, person_a_id, person_b_id, type, created_at, updated_at)
VALUES (?, ?, ?, ?, ?, ?)
ON CONFLICT(id) DO UPDATE SET
    person_a_id = excluded.person_a_id,
    person_b_id = excluded.person_b_id,
    type = excluded.type,
    updated_at = excluded.updated_at
"""


def _person_row(person: Person) -> tuple:
    return (
        person.id,
        person.name,
        person.gender,
        person.photo,
        person.notes,
        int(person.is_user),
        person.created_at,
        person.updated_at,
    )


def _relationship_row(rel: Relationship) -> tuple:
    return (rel.id, rel.person_a_id, rel.person_b_id, rel.type, rel.created_at, rel.updated_at)


def _ensure_parent_dir(path: str) -> None:
    parent = os.path.dirname(os.path.abspath(path))
    os.makedirs(parent, exist_ok=True)


class SQLiteStorage:
    """SQLite-backed adapter; blocking calls run in a worker thread."""

    def __init__(self, path: str) -> None:
        self.path = path
        _ensure_parent_dir(path)
        self._run(self._init_schema)

    @staticmethod
    def _init_schema(conn: sqlite3.Connection) -> None:
        conn.execute("PRAGMA journal_mode=WAL;")
        conn.executescript(SCHEMA)

    def _run(self, fn: Callable[[sqlite3.Connection], Any]) -> Any:
        try:
            with closing(sqlite3.connect(self.path)) as conn:
                with conn:
                    return fn(conn)
        except sqlite3.Error as exc:
            logger.debug("SQLite failure on %s: %s", self.path, exc)
            raise StorageError(f"Storage operation failed: {exc}") from exc

    async def _call(self, fn: Callable[[sqlite3.Connection], Any]) -> Any:
        return await asyncio.to_thread(self._run, fn)

    async def load_people(self) -> List[Person]:
        def query(conn: sqlite3.Connection) -> List[Person]:
            rows = conn.execute(
                "SELECT id, name, gender, photo, notes, is_user, created_at, updated_at "
                "FROM people ORDER BY rowid"
            ).fetchall()
            return [
                Person(
                    id=row[0],
                    name=row[1],
                    gender=row[2],
                    photo=row[3],
                    notes=row[4],
                    is_user=bool(row[5]),
                    created_at=row[6],
                    updated_at=row[7],
                )
                for row in rows
            ]

        return await self._call(query)

    async def load_relationships(self) -> List[Relationship]:
        def query(conn: sqlite3.Connection) -> List[Relationship]:
            rows = conn.execute(
                "SELECT id, person_a_id, person_b_id, type, created_at, updated_at "
                "FROM relationships ORDER BY rowid"
            ).fetchall()
            return [Relationship(*row) for row in rows]

        return await self._call(query)

    async def save_person(self, person: Person) -> None:
        await self._call(lambda conn: conn.execute(UPSERT_PERSON, _person_row(person)))

    async def delete_person(self, person_id: str) -> None:
        await self._call(lambda conn: conn.execute("DELETE FROM people WHERE id = ?", (person_id,)))

    async def save_relationship(self, relationship: Relationship) -> None:
        await self._call(
            lambda conn: conn.execute(UPSERT_RELATIONSHIP, _relationship_row(relationship))
        )

    async def delete_relationship(self, relationship_id: str) -> None:
        await self._call(
            lambda conn: conn.execute("DELETE FROM relationships WHERE id = ?", (relationship_id,))
        )

    async def export_data(self) -> Snapshot:
        return Snapshot(await self.load_people(), await self.load_relationships())

    async def import_data(self, snapshot: Snapshot) -> None:
        def replace_all(conn: sqlite3.Connection) -> None:
            conn.execute("DELETE FROM relationships")
            conn.execute("DELETE FROM people")
            conn.executemany(UPSERT_PERSON, [_person_row(p) for p in snapshot.people])
            conn.executemany(
                UPSERT_RELATIONSHIP, [_relationship_row(r) for r in snapshot.relationships]
            )

        await self._call(replace_all)

    async def clear_all(self) -> None:
        def wipe(conn: sqlite3.Connection) -> None:
            conn.execute("DELETE FROM relationships")
            conn.execute("DELETE FROM people")

        await self._call(wipe)


class Preferences:
    """Small key-value store kept next to the data (e.g. the current viewer)."""

    def __init__(self, path: str) -> None:
        self.path = path
        _ensure_parent_dir(path)
        with closing(sqlite3.connect(self.path)) as conn:
            conn.executescript(SCHEMA)
            conn.commit()

    def get(self, key: str) -> Optional[str]:
        with closing(sqlite3.connect(self.path)) as conn:
            row = conn.execute("SELECT value FROM preferences WHERE key = ?", (key,)).fetchone()
            if row:
                return row[0]
        return None

    def set(self, key: str, value: str) -> None:
        with closing(sqlite3.connect(self.path)) as conn:
            conn.execute(
                "INSERT OR REPLACE INTO preferences(key, value) VALUES(?, ?)",
                (key, value),
            )
            conn.commit()


__all__ = ["StorageAdapter", "StorageError", "MemoryStorage", "SQLiteStorage", "Preferences"]

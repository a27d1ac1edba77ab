import asyncio
import sqlite3

import pytest

from ourpeople.engine import FamilyEngine
from ourpeople.schemas import Person, Relationship, Snapshot
from ourpeople.storage import MemoryStorage, Preferences, SQLiteStorage, StorageError


def run(coro):
    return asyncio.run(coro)


def sample_snapshot():
    return Snapshot(
        people=[
            Person(id="a", name="Ann", gender="female", notes="n", created_at="t0", updated_at="t0"),
            Person(id="b", name="Ben", gender="male", is_user=True, created_at="t0", updated_at="t0"),
        ],
        relationships=[
            Relationship(id="r1", person_a_id="a", person_b_id="b", type="parent", created_at="t0", updated_at="t0"),
        ],
    )


def test_sqlite_storage_point_writes(tmp_path):
    storage = SQLiteStorage(str(tmp_path / "data" / "people.sqlite"))

    async def scenario():
        snapshot = sample_snapshot()
        for person in snapshot.people:
            await storage.save_person(person)
        await storage.save_relationship(snapshot.relationships[0])
        renamed = Person(id="a", name="Annie", gender="female", created_at="t0", updated_at="t1")
        await storage.save_person(renamed)
        return await storage.load_people(), await storage.load_relationships()

    people, relationships = run(scenario())
    # updates keep the original insertion position
    assert [p.name for p in people] == ["Annie", "Ben"]
    assert people[1].is_user is True
    assert relationships[0].type == "parent"

    async def delete():
        await storage.delete_relationship("r1")
        await storage.delete_person("b")
        return await storage.export_data()

    remaining = run(delete())
    assert [p.id for p in remaining.people] == ["a"]
    assert remaining.relationships == []


def test_sqlite_import_and_clear(tmp_path):
    storage = SQLiteStorage(str(tmp_path / "people.sqlite"))

    async def scenario():
        await storage.save_person(Person(id="old", name="Old", created_at="t", updated_at="t"))
        await storage.import_data(sample_snapshot())
        imported = await storage.export_data()
        await storage.clear_all()
        cleared = await storage.export_data()
        return imported, cleared

    imported, cleared = run(scenario())
    assert [p.id for p in imported.people] == ["a", "b"]
    assert [r.id for r in imported.relationships] == ["r1"]
    assert cleared.people == [] and cleared.relationships == []


def test_sqlite_errors_surface_as_storage_error(tmp_path):
    path = tmp_path / "people.sqlite"
    storage = SQLiteStorage(str(path))
    with sqlite3.connect(path) as conn:
        conn.execute("DROP TABLE people")

    with pytest.raises(StorageError):
        run(storage.load_people())


def test_engine_round_trip_through_sqlite(tmp_path):
    path = str(tmp_path / "people.sqlite")

    async def write():
        engine = FamilyEngine(SQLiteStorage(path))
        await engine.initialize()
        mom = await engine.add_person("Mom", gender="female")
        kid = await engine.add_person("Kid")
        await engine.add_relationship(mom.id, kid.id, "parent")
        return mom.id, kid.id

    async def read():
        engine = FamilyEngine(SQLiteStorage(path))
        await engine.initialize()
        return engine

    mom_id, kid_id = run(write())
    engine = run(read())
    assert engine.explain(mom_id, perspective_id=kid_id) == ["your mom"]


def test_memory_storage_hands_out_copies():
    storage = MemoryStorage(sample_snapshot())
    people = run(storage.load_people())
    people[0].name = "Changed"
    assert run(storage.load_people())[0].name == "Ann"


def test_preferences(tmp_path):
    prefs = Preferences(str(tmp_path / "people.sqlite"))
    assert prefs.get("perspective") is None
    prefs.set("perspective", "abc")
    assert prefs.get("perspective") == "abc"
    prefs.set("perspective", "")
    assert prefs.get("perspective") == ""

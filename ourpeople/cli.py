"""Command line interface for ourpeople."""

from __future__ import annotations

import argparse
import asyncio
import os
from typing import Sequence

from .config import EngineConfig
from .engine import FamilyEngine
from .export import export_graph, export_snapshot, load_snapshot
from .schemas import GENDERS, RELATIONSHIP_TYPES, Person
from .sharing import create_share_link
from .storage import Preferences, SQLiteStorage
from .utils import console, set_log_level

PERSPECTIVE_KEY = "perspective"
DEFAULT_SHARE_URL = "https://ourpeople.app/"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ourpeople",
        description="Explain who someone is through the people you already know",
    )
    parser.add_argument(
        "--db",
        default=os.getenv("OURPEOPLE_DB", "ourpeople.sqlite"),
        help="SQLite database file (default: $OURPEOPLE_DB or ./ourpeople.sqlite)",
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv("OURPEOPLE_LOG_LEVEL", "INFO"),
        help="Python logging level (DEBUG, INFO, WARNING, ERROR)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    add = sub.add_parser("add-person", help="Add a person")
    add.add_argument("name")
    add.add_argument("--gender", choices=GENDERS)
    add.add_argument("--notes")
    add.add_argument("--photo", help="Photo reference (path or URL)")

    update = sub.add_parser("update-person", help="Change a person's details")
    update.add_argument("person", help="Person id or name")
    update.add_argument("--name")
    update.add_argument("--gender", choices=GENDERS)
    update.add_argument("--notes")
    update.add_argument("--photo")

    remove = sub.add_parser("remove-person", help="Delete a person and their relationships")
    remove.add_argument("person", help="Person id or name")

    relate = sub.add_parser("relate", help='Record "A is TYPE of B"')
    relate.add_argument("person_a", help="Person id or name")
    relate.add_argument("type", choices=RELATIONSHIP_TYPES)
    relate.add_argument("person_b", help="Person id or name")

    unrelate = sub.add_parser("unrelate", help="Delete a relationship by id")
    unrelate.add_argument("relationship_id")

    sub.add_parser("people", help="List everyone with their direct relationships")

    explain = sub.add_parser("explain", help="Explain who someone is")
    explain.add_argument("person", help="Person id or name")
    explain.add_argument("--as", dest="viewer", help="Explain from this person's point of view")

    nametag = sub.add_parser("nametag", help="Print a reunion nametag")
    nametag.add_argument("person", help="Person id or name")

    perspective = sub.add_parser("perspective", help="Show or set who 'you' are")
    perspective.add_argument("person", nargs="?", help="Person id or name")
    perspective.add_argument("--clear", action="store_true")

    export = sub.add_parser("export", help="Write all data to a JSON file")
    export.add_argument("path")

    import_ = sub.add_parser("import", help="Replace all data with a JSON export")
    import_.add_argument("path")

    clear = sub.add_parser("clear", help="Delete everything")
    clear.add_argument("--yes", action="store_true", help="Confirm deletion")

    share = sub.add_parser("share", help="Print a share link containing all data")
    share.add_argument("--base-url", default=DEFAULT_SHARE_URL)

    graph_export = sub.add_parser("graph-export", help="Export JSON and GraphML files")
    graph_export.add_argument("out_dir")

    return parser


def resolve_person(engine: FamilyEngine, ref: str) -> Person:
    """Find a person by id, then by case-insensitive name."""

    person = engine.get_person(ref)
    if person is not None:
        return person
    matches = [p for p in engine.people() if p.name.lower() == ref.strip().lower()]
    if not matches:
        raise SystemExit(f"No person matches {ref!r}")
    if len(matches) > 1:
        ids = ", ".join(p.id for p in matches)
        raise SystemExit(f"{ref!r} is ambiguous, use an id: {ids}")
    return matches[0]


async def open_engine(db_path: str, preferences: Preferences) -> FamilyEngine:
    engine = FamilyEngine(SQLiteStorage(db_path), EngineConfig.from_env())
    await engine.initialize()
    # an empty value means the viewer was cleared on purpose, so the legacy
    # is_user flag must not bring it back
    saved = preferences.get(PERSPECTIVE_KEY)
    if saved is not None:
        engine.set_perspective(saved or None)
    return engine


def _sync_perspective(engine: FamilyEngine, preferences: Preferences) -> None:
    if engine.perspective_id is not None:
        preferences.set(PERSPECTIVE_KEY, engine.perspective_id)
    elif preferences.get(PERSPECTIVE_KEY) is not None:
        preferences.set(PERSPECTIVE_KEY, "")


def _print_people(engine: FamilyEngine) -> None:
    for person in engine.people():
        marker = " (you)" if person.id == engine.perspective_id else ""
        console.print(f"{engine.display_name(person.id)}{marker}  [{person.id}]", markup=False)
        for relation in engine.neighbors(person.id):
            console.print(
                f"    {relation.type}: {relation.person.name}  [{relation.relationship_id}]",
                markup=False,
            )


async def run_command(args: argparse.Namespace) -> None:
    preferences = Preferences(args.db)
    engine = await open_engine(args.db, preferences)
    command = args.command

    if command == "add-person":
        person = await engine.add_person(args.name, gender=args.gender, photo=args.photo, notes=args.notes)
        console.print(person.id, markup=False)
    elif command == "update-person":
        person = resolve_person(engine, args.person)
        changes = {
            key: value
            for key, value in (
                ("name", args.name),
                ("gender", args.gender),
                ("notes", args.notes),
                ("photo", args.photo),
            )
            if value is not None
        }
        await engine.update_person(person.id, **changes)
    elif command == "remove-person":
        person = resolve_person(engine, args.person)
        await engine.delete_person(person.id)
        console.log(f"Removed {person.name}")
    elif command == "relate":
        a = resolve_person(engine, args.person_a)
        b = resolve_person(engine, args.person_b)
        rel = await engine.add_relationship(a.id, b.id, args.type)
        if rel is None:
            raise SystemExit("Relationship not recorded")
        console.print(rel.id, markup=False)
    elif command == "unrelate":
        if not await engine.delete_relationship(args.relationship_id):
            raise SystemExit(f"No relationship {args.relationship_id!r}")
    elif command == "people":
        _print_people(engine)
    elif command == "explain":
        person = resolve_person(engine, args.person)
        viewer = resolve_person(engine, args.viewer).id if args.viewer else None
        console.print(engine.display_name(person.id, viewer), markup=False)
        for sentence in engine.explain(person.id, viewer):
            console.print(f"  - {sentence}", markup=False)
    elif command == "nametag":
        person = resolve_person(engine, args.person)
        console.print(engine.nametag(person.id), markup=False)
    elif command == "perspective":
        if args.clear:
            engine.set_perspective(None)
        elif args.person:
            engine.set_perspective(resolve_person(engine, args.person).id)
        current = engine.perspective()
        console.print(f"You are {current.name}" if current else "No perspective set", markup=False)
    elif command == "export":
        export_snapshot(await engine.export_data(), args.path)
        console.log(f"Exported to {args.path}")
    elif command == "import":
        if not os.path.exists(args.path):
            raise SystemExit(f"Missing file {args.path}")
        try:
            snapshot = load_snapshot(args.path)
        except (ValueError, KeyError, TypeError) as exc:
            raise SystemExit(f"Invalid export file: {exc}") from exc
        await engine.import_data(snapshot)
        console.log(f"Imported {len(snapshot.people)} people")
    elif command == "clear":
        if not args.yes:
            raise SystemExit("Refusing to delete everything without --yes")
        await engine.clear_all()
        console.log("All data cleared")
    elif command == "share":
        console.print(create_share_link(await engine.export_data(), args.base_url), markup=False)
    elif command == "graph-export":
        paths = await export_graph(engine, args.out_dir)
        console.log(paths)

    _sync_perspective(engine, preferences)


def main(argv: Sequence[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    set_log_level(args.log_level)
    asyncio.run(run_command(args))


if __name__ == "__main__":  # pragma: no cover
    main()

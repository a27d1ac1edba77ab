"""Snapshot and graph export utilities."""

from __future__ import annotations

import json
import os
from typing import Dict

import networkx as nx

from .engine import FamilyEngine
from .schemas import Snapshot
from .utils import console


def export_snapshot(snapshot: Snapshot, path: str) -> str:
    directory = os.path.dirname(os.path.abspath(path))
    os.makedirs(directory, exist_ok=True)
    with open(path, "w", encoding="utf-8") as fh:
        json.dump(snapshot.dict(), fh, indent=2)
    return path


def load_snapshot(path: str) -> Snapshot:
    with open(path, "r", encoding="utf-8") as fh:
        return Snapshot.from_dict(json.load(fh))


def build_export_graph(engine: FamilyEngine) -> nx.MultiDiGraph:
    """One edge per stored fact ("A is <type> of B"), people as labelled nodes.

    The GraphML writer only accepts scalar attributes, so missing values are
    written as empty strings.
    """

    graph = nx.MultiDiGraph()
    for person in engine.people():
        graph.add_node(
            person.id,
            label=person.name,
            gender=person.gender or "",
            display_name=engine.display_name(person.id),
        )
    for rel in engine.relationships():
        if rel.person_a_id in graph and rel.person_b_id in graph:
            graph.add_edge(rel.person_a_id, rel.person_b_id, key=rel.id, relation=rel.type)
    return graph


async def export_graph(engine: FamilyEngine, out_dir: str) -> Dict[str, str]:
    os.makedirs(out_dir, exist_ok=True)
    snapshot = await engine.export_data()
    people_path = os.path.join(out_dir, "people.json")
    relationships_path = os.path.join(out_dir, "relationships.json")
    graphml_path = os.path.join(out_dir, "graph.graphml")

    with open(people_path, "w", encoding="utf-8") as fh:
        json.dump([person.dict() for person in snapshot.people], fh, indent=2)
    with open(relationships_path, "w", encoding="utf-8") as fh:
        json.dump([rel.dict() for rel in snapshot.relationships], fh, indent=2)
    nx.write_graphml(build_export_graph(engine), graphml_path)
    console.log("GraphML export ready", graphml_path)

    return {
        "people": people_path,
        "relationships": relationships_path,
        "graphml": graphml_path,
    }


__all__ = ["export_snapshot", "load_snapshot", "build_export_graph", "export_graph"]

"""Kinship graph construction and shortest-path search."""

from __future__ import annotations

import itertools
from collections import deque
from dataclasses import dataclass, field
from typing import Collection, Dict, List, NamedTuple, Optional, Tuple

import networkx as nx

from .schemas import TERMINAL_TYPES, Relationship, inverse_type
from .utils import logger

NEIGHBOR_ORDERS = ("insertion", "id")


class Neighbor(NamedTuple):
    person_id: str
    type: str
    relationship_id: str


@dataclass
class Path:
    """Person chain plus the edge-type chain walked between them."""

    person_ids: List[str]
    types: List[str] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.types)

    @property
    def source(self) -> str:
        return self.person_ids[0]

    @property
    def target(self) -> str:
        return self.person_ids[-1]

    def extend(self, neighbor: Neighbor) -> "Path":
        return Path(self.person_ids + [neighbor.person_id], self.types + [neighbor.type])


class KinshipGraph:
    """Adjacency index over people with two directed edges per relationship.

    For a stored fact "A is <type> of B" the edge ``B -> A`` carries
    ``type`` (B follows it to reach A) and ``A -> B`` carries the inverse
    (A's child, A's sibling...). Edges are keyed by relationship id so a
    relationship is removed from both directions in one call.
    """

    def __init__(self, order: str = "insertion") -> None:
        if order not in NEIGHBOR_ORDERS:
            raise ValueError(f"Unknown neighbor order: {order!r}")
        self.order = order
        self.graph = nx.MultiDiGraph()
        self._endpoints: Dict[str, Tuple[str, str]] = {}
        self._seq = itertools.count()

    def __contains__(self, person_id: object) -> bool:
        return person_id in self.graph

    def __len__(self) -> int:
        return len(self._endpoints)

    def add_person(self, person_id: str) -> None:
        if person_id not in self.graph:
            self.graph.add_node(person_id)

    def remove_person(self, person_id: str) -> List[str]:
        """Drop a person and every incident edge; return the relationship ids removed."""
        removed = self.relationship_ids_for(person_id)
        for relationship_id in removed:
            self._endpoints.pop(relationship_id, None)
        if person_id in self.graph:
            self.graph.remove_node(person_id)
        return removed

    def add_edge(self, relationship: Relationship) -> None:
        a, b = relationship.person_ids
        if a == b:
            logger.debug("Ignoring self relationship %s", relationship.id)
            return
        if relationship.id in self._endpoints:
            self.remove_edge(relationship.id)
        self.add_person(a)
        self.add_person(b)
        self.graph.add_edge(
            a,
            b,
            key=relationship.id,
            type=inverse_type(relationship.type),
            seq=next(self._seq),
        )
        self.graph.add_edge(
            b,
            a,
            key=relationship.id,
            type=relationship.type,
            seq=next(self._seq),
        )
        self._endpoints[relationship.id] = (a, b)

    def remove_edge(self, relationship_id: str) -> bool:
        endpoints = self._endpoints.pop(relationship_id, None)
        if endpoints is None:
            return False
        a, b = endpoints
        for u, v in ((a, b), (b, a)):
            if self.graph.has_edge(u, v, key=relationship_id):
                self.graph.remove_edge(u, v, key=relationship_id)
        return True

    def has_edge(self, relationship_id: str) -> bool:
        return relationship_id in self._endpoints

    def relationship_ids_for(self, person_id: str) -> List[str]:
        return [neighbor.relationship_id for neighbor in self.neighbors(person_id)]

    def neighbors(self, person_id: str) -> List[Neighbor]:
        if person_id not in self.graph:
            return []
        edges = [
            (v, data["type"], key, data["seq"])
            for _, v, key, data in self.graph.out_edges(person_id, keys=True, data=True)
        ]
        if self.order == "id":
            edges.sort(key=lambda edge: (edge[0], edge[2]))
        else:
            edges.sort(key=lambda edge: edge[3])
        return [Neighbor(v, rel_type, key) for v, rel_type, key, _ in edges]

    def neighbors_of_type(self, person_id: str, rel_type: str) -> List[str]:
        return [n.person_id for n in self.neighbors(person_id) if n.type == rel_type]

    def clear(self) -> None:
        self.graph.clear()
        self._endpoints.clear()

    def shortest_path(
        self,
        from_id: str,
        to_id: str,
        max_depth: int = 4,
        terminal_types: Collection[str] = TERMINAL_TYPES,
    ) -> Optional[Path]:
        return shortest_path(self, from_id, to_id, max_depth, terminal_types)


def shortest_path(
    graph: KinshipGraph,
    from_id: str,
    to_id: str,
    max_depth: int = 4,
    terminal_types: Collection[str] = TERMINAL_TYPES,
) -> Optional[Path]:
    """Breadth-first search from ``from_id`` to ``to_id``.

    Nodes are marked visited when enqueued, so the first hit is a shortest
    route. A node whose chain already has ``max_depth`` hops is not expanded.
    Edges of a terminal type are only followed when they land on ``to_id``.
    Returns ``None`` when no route exists within those limits.
    """

    if from_id == to_id:
        return Path([from_id])
    queue: deque[Path] = deque([Path([from_id])])
    visited = {from_id}
    while queue:
        current = queue.popleft()
        if len(current) >= max_depth:
            continue
        for neighbor in graph.neighbors(current.target):
            if neighbor.person_id in visited:
                continue
            if neighbor.type in terminal_types and neighbor.person_id != to_id:
                continue
            step = current.extend(neighbor)
            if neighbor.person_id == to_id:
                return step
            visited.add(neighbor.person_id)
            queue.append(step)
    return None


__all__ = ["KinshipGraph", "Neighbor", "Path", "shortest_path", "NEIGHBOR_ORDERS"]

"""Reunion-style nametags: "I'm Joe - Father of Karen, Amy; Grandpa to Abby"."""

from __future__ import annotations

from typing import Dict, List, NamedTuple, Optional

from .graph import KinshipGraph
from .schemas import CHILD, FEMALE, MALE, PARENT, SIBLING, SPOUSE
from .store import EntityStore
from .utils import join_names

# (female, male, neutral) wording keyed by group, in display order
LINE_LABELS = (
    ("spouse", ("Wife of", "Husband of", "Married to")),
    ("children", ("Mother of", "Father of", "Parent of")),
    ("grandchildren", ("Grandma to", "Grandpa to", "Grandparent to")),
    ("parents", ("Daughter of", "Son of", "Child of")),
    ("siblings", ("Sister of", "Brother of", "Sibling of")),
)

GROUP_TYPES = {
    SPOUSE: "spouse",
    CHILD: "children",
    PARENT: "parents",
    SIBLING: "siblings",
}


class NametagLine(NamedTuple):
    label: str
    names: List[str]


def _gendered(labels: tuple, gender: Optional[str]) -> str:
    female, male, neutral = labels
    if gender == FEMALE:
        return female
    if gender == MALE:
        return male
    return neutral


def summarize(store: EntityStore, graph: KinshipGraph, person_id: str) -> List[NametagLine]:
    person = store.get_person(person_id)
    if person is None:
        return []

    groups: Dict[str, Dict[str, str]] = {key: {} for key, _ in LINE_LABELS}
    children: List[str] = []
    for neighbor in graph.neighbors(person_id):
        group = GROUP_TYPES.get(neighbor.type)
        if group is None:
            continue
        other = store.get_person(neighbor.person_id)
        if other is None:
            continue
        groups[group].setdefault(other.id, other.name)
        if neighbor.type == CHILD:
            children.append(other.id)

    # grandchildren are one extra hop and never stored directly
    for child_id in dict.fromkeys(children):
        for grandchild_id in graph.neighbors_of_type(child_id, CHILD):
            grandchild = store.get_person(grandchild_id)
            if grandchild is not None and grandchild_id != person_id:
                groups["grandchildren"].setdefault(grandchild.id, grandchild.name)

    lines: List[NametagLine] = []
    for key, labels in LINE_LABELS:
        names = list(groups[key].values())
        if names:
            lines.append(NametagLine(_gendered(labels, person.gender), names))
    return lines


def format_nametag(name: str, lines: List[NametagLine]) -> str:
    if not lines:
        return f"I'm {name}"
    body = "; ".join(f"{line.label} {join_names(line.names)}" for line in lines)
    return f"I'm {name} - {body}"


__all__ = ["NametagLine", "summarize", "format_nametag", "LINE_LABELS"]

"""Plain-language explanations of who someone is, relative to a viewer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from .config import EngineConfig
from .graph import KinshipGraph, Path
from .labels import relationship_word, resolve, title_for
from .schemas import CHILD, PARENT, SIBLING, SPOUSE, Person, inverse_type
from .store import EntityStore

SELF_SENTENCE = "This is you!"

DIRECT_LABEL_SCORE = 100
DIRECT_CHAIN_SCORE = 90
REFERENCE_SCORE = 70
FALLBACK_SCORE = 50

CLOSE_TYPES = (PARENT, SIBLING, SPOUSE, CHILD)


@dataclass
class Explanation:
    sentence: str
    score: int


def direct_chain_score(hops: int) -> int:
    # stays above every reference-derived phrase
    return max(DIRECT_CHAIN_SCORE - 5 * max(hops - 2, 0), REFERENCE_SCORE + 1)


def reference_score(hops: int) -> int:
    return REFERENCE_SCORE - 10 * hops


def rank(explanations: Iterable[Explanation], limit: int) -> List[Explanation]:
    """Drop repeated sentences (keeping the best score) and order by score."""

    best: Dict[str, Explanation] = {}
    for explanation in explanations:
        current = best.get(explanation.sentence)
        if current is None or current.score < explanation.score:
            best[explanation.sentence] = explanation
    ordered = sorted(best.values(), key=lambda item: item.score, reverse=True)
    return ordered[:limit]


class Explainer:
    """Turns graph paths into sentences such as "your grandma" or "Alice's husband"."""

    def __init__(self, store: EntityStore, graph: KinshipGraph, config: EngineConfig | None = None) -> None:
        self.store = store
        self.graph = graph
        self.config = config or EngineConfig()

    def _path(self, from_id: str, to_id: str, depth: int) -> Optional[Path]:
        return self.graph.shortest_path(from_id, to_id, depth, self.config.terminal_types)

    def name_chain(self, path: Path, anchor: str) -> Optional[str]:
        """Describe ``path`` starting from ``anchor`` ("your", "Alice's").

        A shortcut label wins when the table has one; otherwise two hops are
        spelled out through the middle person and longer chains name the
        first person along the way.
        """

        if len(path) == 0:
            return None
        target = self.store.get_person(path.target)
        if target is None:
            return None
        label = resolve(path.types, target.gender)
        if label:
            return f"{anchor} {label}"
        middle = self.store.get_person(path.person_ids[1])
        if middle is None:
            return None
        if len(path) == 2:
            first = relationship_word(path.types[0], middle.gender)
            second = relationship_word(path.types[1], target.gender)
            return f"{anchor} {first}'s {second}"
        return f"connected through {middle.name}"

    def reference_people(self, perspective_id: str) -> List[Person]:
        """Close relations of the viewer usable as naming anchors."""

        neighbors = self.graph.neighbors(perspective_id)
        ids: List[str] = [n.person_id for n in neighbors if n.type in CLOSE_TYPES]
        for parent_id in (n.person_id for n in neighbors if n.type == PARENT):
            ids.extend(self.graph.neighbors_of_type(parent_id, PARENT))
        for child_id in (n.person_id for n in neighbors if n.type == CHILD):
            ids.extend(self.graph.neighbors_of_type(child_id, SPOUSE))
        people = []
        for person_id in dict.fromkeys(ids):
            person = self.store.get_person(person_id)
            if person is not None and person_id != perspective_id:
                people.append(person)
        return people

    def _direct(self, perspective: Person, target: Person) -> tuple[Optional[Path], List[Explanation]]:
        path = self._path(perspective.id, target.id, self.config.max_depth)
        if path is None or len(path) == 0:
            return path, []
        label = resolve(path.types, target.gender)
        if label:
            return path, [Explanation(f"your {label}", DIRECT_LABEL_SCORE)]
        sentence = self.name_chain(path, "your")
        if sentence is None:
            return path, []
        return path, [Explanation(sentence, direct_chain_score(len(path)))]

    def _through_references(
        self, perspective: Person, target: Person, direct: Optional[Path]
    ) -> List[Explanation]:
        results: List[Explanation] = []
        spouses = set(self.graph.neighbors_of_type(perspective.id, SPOUSE))
        for reference in self.reference_people(perspective.id):
            if reference.id == target.id:
                continue
            # "Chris's mom" adds nothing once "your mother-in-law" was said
            if reference.id in spouses and direct is not None and reference.id in direct.person_ids:
                continue
            path = self._path(reference.id, target.id, self.config.reference_depth)
            if path is None or len(path) == 0:
                continue
            if reference.id in spouses and perspective.id in path.person_ids:
                continue
            sentence = self.name_chain(path, f"{reference.name}'s")
            if sentence:
                results.append(Explanation(sentence, reference_score(len(path))))
        return results

    def _fallback(self, target: Person) -> List[Explanation]:
        results: List[Explanation] = []
        for neighbor in self.graph.neighbors(target.id):
            if len(results) >= self.config.fallback_limit:
                break
            other = self.store.get_person(neighbor.person_id)
            if other is None:
                continue
            # the edge says what the neighbor is to the target; flip it
            word = relationship_word(inverse_type(neighbor.type), target.gender)
            results.append(Explanation(f"{other.name}'s {word}", FALLBACK_SCORE))
        return results

    def explain_scored(self, target_id: str, perspective_id: Optional[str]) -> List[Explanation]:
        target = self.store.get_person(target_id)
        if target is None:
            return []
        perspective = self.store.get_person(perspective_id)
        if perspective is not None and perspective.id == target.id:
            return [Explanation(SELF_SENTENCE, DIRECT_LABEL_SCORE)]

        results: List[Explanation] = []
        if perspective is not None:
            direct, results = self._direct(perspective, target)
            results.extend(self._through_references(perspective, target, direct))
        if not results:
            results = self._fallback(target)
        return rank(results, self.config.max_explanations)

    def explain(self, target_id: str, perspective_id: Optional[str]) -> List[str]:
        return [item.sentence for item in self.explain_scored(target_id, perspective_id)]

    def display_name(self, person_id: str, perspective_id: Optional[str]) -> str:
        """Name with a familiar title when one applies ("Aunt Betty")."""

        person = self.store.get_person(person_id)
        if person is None:
            return "Unknown"
        if perspective_id is None or perspective_id == person_id:
            return person.name
        if not self.store.has_person(perspective_id):
            return person.name
        path = self._path(perspective_id, person_id, self.config.max_depth)
        if path is None or len(path) == 0:
            return person.name
        title = title_for(resolve(path.types, person.gender))
        return f"{title} {person.name}" if title else person.name


__all__ = [
    "Explainer",
    "Explanation",
    "SELF_SENTENCE",
    "rank",
    "direct_chain_score",
    "reference_score",
]

"""Shortcut labels for edge-type chains ("grandma", "uncle", "cousin")."""

from __future__ import annotations

from typing import Dict, NamedTuple, Optional, Sequence, Tuple

from .schemas import CHILD, FEMALE, FRIEND, MALE, PARENT, SIBLING, SPOUSE


class Label(NamedTuple):
    neutral: str
    female: Optional[str] = None
    male: Optional[str] = None

    def pick(self, gender: Optional[str]) -> str:
        if gender == FEMALE and self.female:
            return self.female
        if gender == MALE and self.male:
            return self.male
        return self.neutral


# Chains read from the viewer outwards: (PARENT, SIBLING) is "my parent's sibling".
SHORTCUT_LABELS: Dict[Tuple[str, ...], Label] = {
    (PARENT,): Label("parent", "mom", "dad"),
    (CHILD,): Label("child", "daughter", "son"),
    (SIBLING,): Label("sibling", "sister", "brother"),
    (SPOUSE,): Label("spouse", "wife", "husband"),
    (FRIEND,): Label("friend"),
    # grandparents and grandchildren
    (PARENT, PARENT): Label("grandparent", "grandma", "grandpa"),
    (PARENT, PARENT, PARENT): Label("great-grandparent", "great-grandma", "great-grandpa"),
    (CHILD, CHILD): Label("grandchild", "granddaughter", "grandson"),
    (CHILD, CHILD, CHILD): Label("great-grandchild", "great-granddaughter", "great-grandson"),
    # aunts, uncles, nieces, nephews, cousins
    (PARENT, SIBLING): Label("aunt/uncle", "aunt", "uncle"),
    (PARENT, PARENT, SIBLING): Label("great-aunt/uncle", "great-aunt", "great-uncle"),
    (SIBLING, CHILD): Label("niece/nephew", "niece", "nephew"),
    (SIBLING, CHILD, CHILD): Label("grandniece/grandnephew", "grandniece", "grandnephew"),
    (PARENT, SIBLING, CHILD): Label("cousin"),
    # in-laws
    (SPOUSE, PARENT): Label("parent-in-law", "mother-in-law", "father-in-law"),
    (SPOUSE, PARENT, PARENT): Label("grandparent-in-law", "grandma-in-law", "grandpa-in-law"),
    (SPOUSE, SIBLING): Label("sibling-in-law", "sister-in-law", "brother-in-law"),
    (SIBLING, SPOUSE): Label("sibling-in-law", "sister-in-law", "brother-in-law"),
    (CHILD, SPOUSE): Label("child-in-law", "daughter-in-law", "son-in-law"),
    (CHILD, CHILD, SPOUSE): Label("grandchild-in-law", "granddaughter-in-law", "grandson-in-law"),
    (PARENT, SIBLING, SPOUSE): Label("aunt/uncle", "aunt", "uncle"),
    (SPOUSE, SIBLING, CHILD): Label("niece/nephew", "niece", "nephew"),
    # step-family; a parent's spouse is always reported as a step-parent,
    # the data model has no way to tell an original partner from a remarriage
    (PARENT, SPOUSE): Label("step-parent", "step-mom", "step-dad"),
    (PARENT, SPOUSE, CHILD): Label("step-sibling", "step-sister", "step-brother"),
}

LONGEST_CHAIN = max(len(chain) for chain in SHORTCUT_LABELS)

TITLES = {
    "aunt": "Aunt",
    "uncle": "Uncle",
    "grandma": "Grandma",
    "grandpa": "Grandpa",
    "great-grandma": "Great-Grandma",
    "great-grandpa": "Great-Grandpa",
    "cousin": "Cousin",
}


def resolve(types: Sequence[str], gender: Optional[str] = None) -> Optional[str]:
    """Return the shortcut label for an exact chain, or ``None``."""

    entry = SHORTCUT_LABELS.get(tuple(types))
    if entry is None:
        return None
    return entry.pick(gender)


def relationship_word(rel_type: str, gender: Optional[str] = None) -> str:
    """Single-hop word such as "mom", "brother" or "friend"."""

    entry = SHORTCUT_LABELS.get((rel_type,))
    if entry is None:
        return rel_type
    return entry.pick(gender)


def title_for(label: Optional[str]) -> Optional[str]:
    if not label:
        return None
    return TITLES.get(label)


__all__ = [
    "Label",
    "SHORTCUT_LABELS",
    "LONGEST_CHAIN",
    "TITLES",
    "resolve",
    "relationship_word",
    "title_for",
]

"""Engine tunables."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from typing import Mapping, Optional, Tuple

from .graph import NEIGHBOR_ORDERS
from .schemas import FRIEND


@dataclass(frozen=True)
class EngineConfig:
    max_depth: int = 4
    reference_depth: int = 2
    max_explanations: int = 4
    fallback_limit: int = 3
    terminal_types: Tuple[str, ...] = field(default=(FRIEND,))
    neighbor_order: str = "insertion"

    def __post_init__(self) -> None:
        if self.neighbor_order not in NEIGHBOR_ORDERS:
            raise ValueError(f"Unknown neighbor order: {self.neighbor_order!r}")
        if self.max_depth < 1 or self.reference_depth < 1:
            raise ValueError("Search depths must be at least 1")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "EngineConfig":
        env = os.environ if environ is None else environ
        config = cls()
        overrides = {}
        if env.get("OURPEOPLE_MAX_DEPTH"):
            overrides["max_depth"] = int(env["OURPEOPLE_MAX_DEPTH"])
        if env.get("OURPEOPLE_MAX_EXPLANATIONS"):
            overrides["max_explanations"] = int(env["OURPEOPLE_MAX_EXPLANATIONS"])
        if env.get("OURPEOPLE_NEIGHBOR_ORDER"):
            overrides["neighbor_order"] = env["OURPEOPLE_NEIGHBOR_ORDER"].strip().lower()
        return replace(config, **overrides) if overrides else config


__all__ = ["EngineConfig"]

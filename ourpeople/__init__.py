"""ourpeople package initialization."""

from importlib.metadata import version, PackageNotFoundError

from .config import EngineConfig
from .engine import FamilyEngine, FamilyMember
from .schemas import Person, Relationship, Snapshot
from .storage import MemoryStorage, SQLiteStorage, StorageError

__all__ = [
    "__version__",
    "EngineConfig",
    "FamilyEngine",
    "FamilyMember",
    "MemoryStorage",
    "Person",
    "Relationship",
    "SQLiteStorage",
    "Snapshot",
    "StorageError",
]

try:
    __version__ = version("ourpeople")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.1.0"

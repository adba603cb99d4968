from __future__ import annotations

from .base import ArtifactStore
from .memory import MemoryArtifactStore
from .sql import SqlArtifactStore, build_engine

__all__ = ["ArtifactStore", "MemoryArtifactStore", "SqlArtifactStore", "build_engine"]

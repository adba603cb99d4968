from __future__ import annotations

from appsynth.errors import (
    JSONExtractionError,
    ModelInvocationError,
    PayloadShapeError,
    PersistenceError,
    SynthesisError,
)
from appsynth.gateway import ModelGateway
from appsynth.service import SynthesisService

__version__ = "0.1.0"

__all__ = [
    "JSONExtractionError",
    "ModelGateway",
    "ModelInvocationError",
    "PayloadShapeError",
    "PersistenceError",
    "SynthesisError",
    "SynthesisService",
]

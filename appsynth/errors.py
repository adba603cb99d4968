from __future__ import annotations


class SynthesisError(Exception):
    pass


class ModelInvocationError(SynthesisError):
    pass


class JSONExtractionError(SynthesisError):
    def __init__(self, message: str, raw_text: str) -> None:
        super().__init__(message)
        self.raw_text = raw_text


class PayloadShapeError(JSONExtractionError):
    """Extracted JSON does not have the shape the stage expects."""


class PersistenceError(SynthesisError):
    pass

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Dict, Optional, Protocol


@dataclass
class LLMResponse:
    raw_text: str
    usage: Optional[Dict[str, Optional[int]]] = None


class LLMAdapter(Protocol):
    name: str

    def generate(self, prompt: str) -> str:
        raise NotImplementedError

    def complete(self, prompt: str) -> LLMResponse:
        return LLMResponse(raw_text=self.generate(prompt))


def env_int(key: str, default: str) -> int:
    return int(os.getenv(key, default))


def env_float(key: str, default: str) -> float:
    return float(os.getenv(key, default))


def is_transient(err: Exception) -> bool:
    msg = str(err).lower()
    return any(s in msg for s in ["503", "unavailable", "429", "too many", "timeout", "temporarily"])

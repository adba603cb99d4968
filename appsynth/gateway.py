from __future__ import annotations

from pathlib import Path
from typing import Optional

from appsynth.adapters.llm_base import LLMAdapter
from appsynth.errors import JSONExtractionError, ModelInvocationError
from appsynth.parsing.extract import snippet
from appsynth.utils.io import write_text
from appsynth.utils.time import utc_timestamp


class ModelGateway:
    """Single point of network I/O to the model provider.

    Every failure, including an empty reply, comes out as ModelInvocationError.
    When ``raw_dir`` is set each raw reply is written there for inspection.
    """

    def __init__(self, adapter: LLMAdapter, raw_dir: Optional[Path] = None) -> None:
        self.adapter = adapter
        self.raw_dir = Path(raw_dir) if raw_dir else None

    def invoke(self, prompt: str, label: str = "call") -> str:
        provider = getattr(self.adapter, "name", type(self.adapter).__name__)
        print(f"[gateway] provider={provider} label={label} prompt_chars={len(prompt)}")
        try:
            response = self.adapter.complete(prompt)
        except ModelInvocationError:
            raise
        except Exception as exc:
            raise ModelInvocationError(f"{provider} call failed for {label}: {exc}") from exc

        raw_text = response.raw_text or ""
        if not raw_text.strip():
            raise ModelInvocationError(f"{provider} returned an empty response for {label}.")

        self._dump(label, raw_text)
        return raw_text

    def record_extraction_failure(self, label: str, error: JSONExtractionError) -> None:
        print(f"[extract] label={label} failed: {snippet(error.raw_text)}")
        path = self._dump(f"{label}_extraction_failed", error.raw_text)
        if path is not None:
            print(f"[extract] raw response saved to {path}")

    def _dump(self, label: str, raw_text: str) -> Optional[Path]:
        if self.raw_dir is None:
            return None
        path = self.raw_dir / f"{utc_timestamp()}_{label}.txt"
        write_text(path, raw_text)
        return path

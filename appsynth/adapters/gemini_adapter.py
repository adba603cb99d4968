from __future__ import annotations

import os
import random
import time
from typing import List

from google import genai
from google.genai import types

from appsynth.errors import ModelInvocationError

from .llm_base import LLMAdapter, LLMResponse, env_float, env_int, is_transient


class GeminiAdapter(LLMAdapter):
    name = "gemini"

    def __init__(self) -> None:
        api_key = os.getenv("GEMINI_API_KEY")
        if not api_key:
            raise RuntimeError("GEMINI_API_KEY is not set.")

        timeout_ms = int(env_float("ORCH_REQUEST_TIMEOUT_SECONDS", "120") * 1000)
        self.client = genai.Client(
            api_key=api_key,
            http_options=types.HttpOptions(timeout=timeout_ms),
        )

        primary = os.getenv("GEMINI_MODEL", "gemini-2.0-flash")
        fallbacks = [
            item.strip()
            for item in os.getenv("GEMINI_FALLBACK_MODELS", "").split(",")
            if item.strip()
        ]
        self.model_candidates: List[str] = [primary, *fallbacks]

        self.max_attempts = env_int("ORCH_MAX_ATTEMPTS", "1")
        self.base_delay = env_float("GEMINI_BASE_DELAY_SECONDS", "1.0")

    def complete(self, prompt: str) -> LLMResponse:
        config = types.GenerateContentConfig(
            temperature=env_float("ORCH_TEMPERATURE", "0.2"),
            max_output_tokens=env_int("ORCH_MAX_OUTPUT_TOKENS", "4096"),
        )
        last_err: Exception | None = None

        for model in self.model_candidates:
            for attempt in range(1, self.max_attempts + 1):
                try:
                    print(f"[gemini] model={model} attempt={attempt}/{self.max_attempts}")
                    response = self.client.models.generate_content(
                        model=model,
                        contents=prompt,
                        config=config,
                    )
                    text = getattr(response, "text", None)
                    if not text:
                        raise ModelInvocationError("Gemini returned empty content.")
                    return LLMResponse(raw_text=text)

                except Exception as e:
                    last_err = e
                    if not is_transient(e) or attempt >= self.max_attempts:
                        break

                    delay = self.base_delay * (2 ** (attempt - 1)) + random.random() * 0.5
                    print(f"[gemini] transient error: {e} -> sleeping {delay:.2f}s")
                    time.sleep(delay)

            if model != self.model_candidates[-1]:
                print(f"[gemini] switching model after failures: {model}")

        raise ModelInvocationError(
            "Gemini generate_content failed for all candidate models. "
            f"Last error: {last_err}"
        ) from last_err

    def generate(self, prompt: str) -> str:
        return self.complete(prompt).raw_text

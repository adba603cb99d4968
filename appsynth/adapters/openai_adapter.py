from __future__ import annotations

import os
import time

from openai import OpenAI
from openai import APIConnectionError, APITimeoutError, RateLimitError, InternalServerError

from appsynth.errors import ModelInvocationError

from .llm_base import LLMAdapter, LLMResponse, env_float, env_int


class OpenAIAdapter(LLMAdapter):
    name = "openai"

    def __init__(self) -> None:
        self.api_key = os.getenv("OPENAI_API_KEY")
        if not self.api_key:
            raise RuntimeError("OPENAI_API_KEY is not set.")
        self.model = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
        self.max_attempts = env_int("ORCH_MAX_ATTEMPTS", "1")
        self.json_mode = os.getenv("OPENAI_JSON_MODE", "false").lower() in {"1", "true", "yes"}
        # SDK-level retries are disabled; attempts are counted here.
        self.client = OpenAI(
            api_key=self.api_key,
            timeout=env_float("ORCH_REQUEST_TIMEOUT_SECONDS", "120"),
            max_retries=0,
        )

    def complete(self, prompt: str) -> LLMResponse:
        max_tokens = env_int("ORCH_MAX_OUTPUT_TOKENS", "4096")
        temperature = env_float("ORCH_TEMPERATURE", "0.2")
        extra = {"response_format": {"type": "json_object"}} if self.json_mode else {}
        attempt = 0
        backoff = 1.0
        while True:
            attempt += 1
            try:
                response = self.client.chat.completions.create(
                    model=self.model,
                    messages=[{"role": "user", "content": prompt}],
                    max_tokens=max_tokens,
                    temperature=temperature,
                    **extra,
                )
                content = response.choices[0].message.content
                if not content:
                    raise ModelInvocationError("OpenAI returned empty content.")
                usage = getattr(response, "usage", None)
                if usage:
                    usage_payload = {
                        "prompt_tokens": getattr(usage, "prompt_tokens", None),
                        "completion_tokens": getattr(usage, "completion_tokens", None),
                        "total_tokens": getattr(usage, "total_tokens", None),
                    }
                    print(
                        f"[openai] model={self.model} "
                        f"prompt_tokens={usage_payload['prompt_tokens']} "
                        f"completion_tokens={usage_payload['completion_tokens']} "
                        f"total_tokens={usage_payload['total_tokens']}"
                    )
                else:
                    usage_payload = None
                    print("[openai] usage not provided by SDK")
                return LLMResponse(raw_text=content, usage=usage_payload)
            except RateLimitError as exc:
                code = getattr(exc, "code", None)
                if code == "insufficient_quota":
                    raise ModelInvocationError(
                        "OpenAI API quota exceeded. Please enable billing in your OpenAI account."
                    ) from exc
                if attempt >= self.max_attempts:
                    raise
            except (APITimeoutError, APIConnectionError, InternalServerError):
                if attempt >= self.max_attempts:
                    raise
            print(f"[openai] transient error, attempt={attempt}/{self.max_attempts} sleeping {backoff:.1f}s")
            time.sleep(backoff)
            backoff *= 2

    def generate(self, prompt: str) -> str:
        return self.complete(prompt).raw_text

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from appsynth.errors import JSONExtractionError

_FENCED_JSON = re.compile(r"```json\s*(.*?)```", flags=re.DOTALL | re.IGNORECASE)


@dataclass(frozen=True)
class Extracted:
    value: Any


Strategy = Callable[[str], Optional[Extracted]]


def _try_parse(text: str) -> Optional[Extracted]:
    # deeply nested input exhausts the recursion limit instead of failing to decode
    try:
        parsed = json.loads(text)
    except (ValueError, RecursionError):
        return None
    if not isinstance(parsed, (dict, list)):
        return None
    return Extracted(parsed)


def parse_whole(text: str) -> Optional[Extracted]:
    return _try_parse(text)


def parse_fenced(text: str) -> Optional[Extracted]:
    match = _FENCED_JSON.search(text)
    if match is None:
        return None
    return _try_parse(match.group(1))


def parse_span(text: str) -> Optional[Extracted]:
    starts = [index for index in (text.find("{"), text.find("[")) if index != -1]
    ends = [index for index in (text.rfind("}"), text.rfind("]")) if index != -1]
    if not starts or not ends:
        return None
    start, end = min(starts), max(ends)
    if end < start:
        return None
    return _try_parse(text[start : end + 1])


STRATEGIES: List[Strategy] = [parse_whole, parse_fenced, parse_span]


def snippet(raw_text: str, limit: int = 200) -> str:
    flat = raw_text.strip().replace("\n", " ")
    return (flat[:limit] + "...") if len(flat) > limit else flat


def extract_json(raw_text: str) -> Any:
    for strategy in STRATEGIES:
        result = strategy(raw_text)
        if result is not None:
            return result.value

    raise JSONExtractionError(
        f"No JSON object found in response. Snippet: {snippet(raw_text)}",
        raw_text=raw_text,
    )

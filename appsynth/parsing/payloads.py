from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List

from jsonschema import ValidationError, validate

from appsynth.errors import PayloadShapeError
from appsynth.models import (
    Action,
    ComponentAction,
    ComponentSpec,
    EntitySpec,
    IterationReply,
    PageAction,
    PageSpec,
)
from appsynth.utils.io import read_text

SCHEMAS_DIR = Path(__file__).resolve().parents[1] / "schemas"

ACTION_SCHEMAS = {
    "page": "page_action.schema.json",
    "component": "component_action.schema.json",
}


@lru_cache(maxsize=None)
def load_schema(name: str) -> Dict:
    return json.loads(read_text(SCHEMAS_DIR / name))


def _check(instance: Any, schema_name: str, raw_text: str, where: str = "") -> None:
    try:
        validate(instance=instance, schema=load_schema(schema_name))
    except ValidationError as exc:
        path = "/".join(str(part) for part in exc.absolute_path)
        location = where + (f"/{path}" if path else "")
        raise PayloadShapeError(
            f"{schema_name} violated at '{location or '/'}': {exc.message}",
            raw_text=raw_text,
        ) from exc


def _unwrap(value: Any, key: str) -> Any:
    # Some models wrap the list: {"entities": [...]}
    if isinstance(value, dict) and isinstance(value.get(key), list):
        return value[key]
    return value


def decode_entities(value: Any, raw_text: str) -> List[EntitySpec]:
    items = _unwrap(value, "entities")
    _check(items, "entities.schema.json", raw_text)
    return [EntitySpec(name=item["name"], fields=dict(item["fields"])) for item in items]


def decode_components(value: Any, raw_text: str) -> List[ComponentSpec]:
    items = _unwrap(value, "components")
    _check(items, "components.schema.json", raw_text)
    return [ComponentSpec(name=item["name"], code=item["code"]) for item in items]


def decode_pages(value: Any, raw_text: str) -> List[PageSpec]:
    items = _unwrap(value, "pages")
    _check(items, "pages.schema.json", raw_text)
    return [
        PageSpec(name=item["name"], route=item["route"], code=item["code"])
        for item in items
    ]


def decode_action(item: Dict, index: int, raw_text: str) -> Action:
    kind = item["type"]
    schema_name = ACTION_SCHEMAS.get(kind)
    if schema_name is None:
        raise PayloadShapeError(
            f"Unknown action type {kind!r} at actions/{index}", raw_text=raw_text
        )
    _check(item, schema_name, raw_text, where=f"actions/{index}")
    if kind == "page":
        return PageAction(name=item["name"], route=item["route"], code=item["code"])
    return ComponentAction(name=item["name"], code=item["code"])


def decode_iteration_reply(value: Any, raw_text: str) -> IterationReply:
    """Decode the whole reply up front; one bad action rejects the batch."""
    _check(value, "iteration_reply.schema.json", raw_text)
    actions = [
        decode_action(item, index, raw_text)
        for index, item in enumerate(value["actions"])
    ]
    message = value.get("message")
    if isinstance(message, str) and not message.strip():
        message = None
    return IterationReply(message=message, actions=actions)

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

from appsynth.models import (
    FIELD_TYPES,
    ActiveFile,
    Architecture,
    ChatMessage,
    Component,
    ComponentSpec,
    Entity,
    EntitySpec,
)
from appsynth.utils.io import read_text

PROMPTS_DIR = Path(__file__).resolve().parent

HISTORY_WINDOW = 5

_PLACEHOLDER = re.compile(r"\{\{([A-Z_]+)\}\}")


class PromptCompiler:
    def __init__(self, prompts_dir: Path = PROMPTS_DIR, history_window: int = HISTORY_WINDOW) -> None:
        self.prompts_dir = Path(prompts_dir)
        self.history_window = history_window

    def schema_prompt(self, user_prompt: str) -> str:
        return self._render(
            "schema",
            {
                "FIELD_TYPES": ", ".join(FIELD_TYPES),
                "USER_PROMPT": user_prompt,
            },
        )

    def components_prompt(
        self, user_prompt: str, entities: Sequence[Entity | EntitySpec]
    ) -> str:
        return self._render(
            "components",
            {
                "USER_PROMPT": user_prompt,
                "ENTITIES": self._entities_json(entities),
            },
        )

    def pages_prompt(
        self,
        user_prompt: str,
        entities: Sequence[Entity | EntitySpec],
        components: Sequence[Component | ComponentSpec],
    ) -> str:
        component_payload = [{"name": item.name, "code": item.code} for item in components]
        return self._render(
            "pages",
            {
                "USER_PROMPT": user_prompt,
                "ENTITIES": self._entities_json(entities),
                "COMPONENTS": json.dumps(component_payload, indent=2) if component_payload else "none",
            },
        )

    def iteration_prompt(
        self,
        architecture: Architecture,
        user_message: str,
        active_file: Optional[ActiveFile] = None,
    ) -> str:
        components = "\n".join(f"- {item.name}" for item in architecture.components) or "none"
        pages = "\n".join(f"- {item.name} ({item.route})" for item in architecture.pages) or "none"
        return self._render(
            "iteration",
            {
                "ENTITIES": self._entities_json(architecture.entities),
                "COMPONENTS": components,
                "PAGES": pages,
                "HISTORY": self._history(architecture.messages),
                "ACTIVE_FILE": self._active_file(active_file),
                "USER_MESSAGE": user_message,
            },
        )

    def recent_messages(self, messages: Iterable[ChatMessage]) -> List[ChatMessage]:
        ordered = list(messages)
        if self.history_window <= 0:
            return []
        return ordered[-self.history_window :]

    def _history(self, messages: Iterable[ChatMessage]) -> str:
        recent = self.recent_messages(messages)
        if not recent:
            return "none"
        return "\n".join(f"{message.role}: {message.content}" for message in recent)

    def _active_file(self, active_file: Optional[ActiveFile]) -> str:
        if active_file is None:
            return ""
        return (
            f"\nACTIVE FILE (currently open in the editor): {active_file.name}\n"
            f"```\n{active_file.content}\n```\n"
        )

    def _entities_json(self, entities: Sequence[Entity | EntitySpec]) -> str:
        if not entities:
            return "none"
        payload = [{"name": item.name, "fields": item.fields} for item in entities]
        return json.dumps(payload, indent=2)

    def _render(self, name: str, values: Dict[str, str]) -> str:
        template = read_text(self.prompts_dir / f"{name}.md")
        # Single pass, so user text containing a placeholder is left alone.
        return _PLACEHOLDER.sub(lambda match: values.get(match.group(1), match.group(0)), template)

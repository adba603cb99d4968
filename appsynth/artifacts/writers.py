from __future__ import annotations

from pathlib import Path
from typing import List

from appsynth.models import Architecture
from appsynth.utils.io import write_text


def render_architecture_summary(architecture: Architecture) -> str:
    project = architecture.project
    lines: List[str] = [
        f"# {project.name}",
        "",
        f"Status: {project.status}",
        "",
        f"> {project.prompt}",
        "",
        "## Entities",
    ]
    if architecture.entities:
        lines.extend(["", "| Entity | Field | Type |", "| --- | --- | --- |"])
        for entity in architecture.entities:
            for field_name, field_type in entity.fields.items():
                lines.append(f"| {entity.name} | {field_name} | {field_type} |")
    else:
        lines.extend(["", "_none_"])

    lines.extend(["", "## Components", ""])
    lines.extend([f"- {component.name}" for component in architecture.components] or ["_none_"])

    lines.extend(["", "## Pages", ""])
    lines.extend([f"- {page.name} (`{page.route}`)" for page in architecture.pages] or ["_none_"])

    if architecture.messages:
        lines.extend(["", "## Conversation", ""])
        lines.extend([f"- **{message.role}**: {message.content}" for message in architecture.messages])
    return "\n".join(lines) + "\n"


def write_architecture_summary(path: Path, architecture: Architecture) -> None:
    write_text(path, render_architecture_summary(architecture))

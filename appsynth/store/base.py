from __future__ import annotations

from typing import Dict, Optional, Protocol

from appsynth.models import (
    Architecture,
    ChatMessage,
    Component,
    Entity,
    Page,
    Project,
)


class ArtifactStore(Protocol):
    """Durable storage for projects and their generated artifacts.

    Entities are append-only. Components and pages are upserted on
    ``(project_id, name)``. Each call commits on its own; callers get no
    transaction spanning several calls. Failures raise PersistenceError.
    Architectures list every collection in creation order; an upsert keeps
    the position of the row it updates.
    """

    def create_project(self, prompt: str, name: str) -> Project:
        ...

    def get_project(self, project_id: str) -> Optional[Project]:
        ...

    def set_project_status(self, project_id: str, status: str) -> Project:
        ...

    def create_entity(self, project_id: str, name: str, fields: Dict[str, str]) -> Entity:
        ...

    def upsert_component(self, project_id: str, name: str, code: str) -> Component:
        ...

    def upsert_page(self, project_id: str, name: str, route: str, code: str) -> Page:
        ...

    def append_chat_message(self, project_id: str, role: str, content: str) -> ChatMessage:
        ...

    def load_project_architecture(self, project_id: str) -> Architecture:
        ...

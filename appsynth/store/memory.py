from __future__ import annotations

import copy
import threading
import uuid
from typing import Dict, List, Optional, Tuple

from appsynth.errors import PersistenceError
from appsynth.models import (
    STATUS_PENDING,
    Architecture,
    ChatMessage,
    Component,
    Entity,
    Page,
    Project,
)
from appsynth.utils.time import utc_now


def _new_id() -> str:
    return str(uuid.uuid4())


class MemoryArtifactStore:
    """Dict-backed ArtifactStore. Returned records are copies."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._projects: Dict[str, Project] = {}
        self._entities: List[Entity] = []
        self._components: Dict[Tuple[str, str], Component] = {}
        self._pages: Dict[Tuple[str, str], Page] = {}
        self._messages: List[ChatMessage] = []

    def create_project(self, prompt: str, name: str) -> Project:
        now = utc_now()
        project = Project(
            id=_new_id(),
            prompt=prompt,
            name=name,
            status=STATUS_PENDING,
            created_at=now,
            updated_at=now,
        )
        with self._lock:
            self._projects[project.id] = project
            return copy.copy(project)

    def get_project(self, project_id: str) -> Optional[Project]:
        with self._lock:
            project = self._projects.get(project_id)
            return copy.copy(project) if project else None

    def set_project_status(self, project_id: str, status: str) -> Project:
        with self._lock:
            project = self._require_project(project_id)
            project.status = status
            project.updated_at = utc_now()
            return copy.copy(project)

    def create_entity(self, project_id: str, name: str, fields: Dict[str, str]) -> Entity:
        with self._lock:
            self._require_project(project_id)
            entity = Entity(id=_new_id(), project_id=project_id, name=name, fields=dict(fields))
            self._entities.append(entity)
            return copy.deepcopy(entity)

    def upsert_component(self, project_id: str, name: str, code: str) -> Component:
        with self._lock:
            self._require_project(project_id)
            key = (project_id, name)
            component = self._components.get(key)
            if component is None:
                component = Component(id=_new_id(), project_id=project_id, name=name, code=code)
                self._components[key] = component
            else:
                component.code = code
            return copy.copy(component)

    def upsert_page(self, project_id: str, name: str, route: str, code: str) -> Page:
        with self._lock:
            self._require_project(project_id)
            key = (project_id, name)
            page = self._pages.get(key)
            if page is None:
                page = Page(id=_new_id(), project_id=project_id, name=name, route=route, code=code)
                self._pages[key] = page
            else:
                page.route = route
                page.code = code
            return copy.copy(page)

    def append_chat_message(self, project_id: str, role: str, content: str) -> ChatMessage:
        with self._lock:
            self._require_project(project_id)
            message = ChatMessage(
                id=_new_id(),
                project_id=project_id,
                role=role,
                content=content,
                created_at=utc_now(),
            )
            self._messages.append(message)
            return copy.copy(message)

    def load_project_architecture(self, project_id: str) -> Architecture:
        with self._lock:
            project = self._require_project(project_id)
            return Architecture(
                project=copy.copy(project),
                entities=[copy.deepcopy(e) for e in self._entities if e.project_id == project_id],
                components=[copy.copy(c) for c in self._components.values() if c.project_id == project_id],
                pages=[copy.copy(p) for p in self._pages.values() if p.project_id == project_id],
                messages=[copy.copy(m) for m in self._messages if m.project_id == project_id],
            )

    def _require_project(self, project_id: str) -> Project:
        project = self._projects.get(project_id)
        if project is None:
            raise PersistenceError(f"Project not found: {project_id}")
        return project

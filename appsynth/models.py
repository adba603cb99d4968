from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Union

FIELD_TYPES = ("String", "Int", "Boolean", "DateTime", "Json")

ROLE_USER = "user"
ROLE_ASSISTANT = "assistant"

STATUS_PENDING = "pending"
STATUS_SCHEMA = "schema"
STATUS_COMPONENTS = "components"
STATUS_PAGES = "pages"
STATUS_COMPLETED = "completed"


@dataclass
class Project:
    id: str
    prompt: str
    name: str
    status: str
    created_at: datetime
    updated_at: datetime


@dataclass
class Entity:
    id: str
    project_id: str
    name: str
    # field name -> one of FIELD_TYPES, insertion ordered
    fields: Dict[str, str]


@dataclass
class Component:
    id: str
    project_id: str
    name: str
    code: str


@dataclass
class Page:
    id: str
    project_id: str
    name: str
    route: str
    code: str


@dataclass
class ChatMessage:
    id: str
    project_id: str
    role: str
    content: str
    created_at: datetime


@dataclass
class Architecture:
    project: Project
    entities: List[Entity] = field(default_factory=list)
    components: List[Component] = field(default_factory=list)
    pages: List[Page] = field(default_factory=list)
    messages: List[ChatMessage] = field(default_factory=list)


@dataclass(frozen=True)
class EntitySpec:
    name: str
    fields: Dict[str, str]


@dataclass(frozen=True)
class ComponentSpec:
    name: str
    code: str


@dataclass(frozen=True)
class PageSpec:
    name: str
    route: str
    code: str


@dataclass(frozen=True)
class ComponentAction:
    name: str
    code: str


@dataclass(frozen=True)
class PageAction:
    name: str
    route: str
    code: str


Action = Union[ComponentAction, PageAction]


@dataclass(frozen=True)
class IterationReply:
    message: Optional[str]
    actions: List[Action]


@dataclass(frozen=True)
class ActiveFile:
    name: str
    content: str


@dataclass
class SynthesisResult:
    project_id: str
    entities: List[Entity]
    components: List[Component]
    pages: List[Page]
    status: str = STATUS_COMPLETED


@dataclass
class IterationResult:
    message: str
    applied_count: int

from __future__ import annotations

from typing import Any, Callable, List, Optional, TypeVar

from appsynth.errors import JSONExtractionError
from appsynth.gateway import ModelGateway
from appsynth.models import (
    STATUS_COMPLETED,
    STATUS_COMPONENTS,
    STATUS_PAGES,
    STATUS_SCHEMA,
    Component,
    Entity,
    Page,
    SynthesisResult,
)
from appsynth.parsing.extract import extract_json
from appsynth.parsing.payloads import decode_components, decode_entities, decode_pages
from appsynth.prompts.compiler import PromptCompiler
from appsynth.store.base import ArtifactStore

T = TypeVar("T")

STAGES = (STATUS_SCHEMA, STATUS_COMPONENTS, STATUS_PAGES, STATUS_COMPLETED)


def run_model_turn(
    gateway: ModelGateway,
    label: str,
    prompt: str,
    decode: Callable[[Any, str], T],
) -> T:
    raw_text = gateway.invoke(prompt, label=label)
    try:
        return decode(extract_json(raw_text), raw_text)
    except JSONExtractionError as exc:
        gateway.record_extraction_failure(label, exc)
        raise


class SynthesisPipeline:
    """Builds a new project: schema, then components, then pages.

    Each stage persists its output before the next one starts. A failure
    propagates as-is and leaves earlier stages in the store. Entities are
    appended, so running twice on one project duplicates them, while
    components and pages are upserted by name.
    """

    def __init__(
        self,
        store: ArtifactStore,
        gateway: ModelGateway,
        compiler: Optional[PromptCompiler] = None,
    ) -> None:
        self.store = store
        self.gateway = gateway
        self.compiler = compiler or PromptCompiler()

    def run(self, project_id: str, prompt: str) -> SynthesisResult:
        entities = self._schema_stage(project_id, prompt)
        components = self._components_stage(project_id, prompt, entities)
        pages = self._pages_stage(project_id, prompt, entities, components)

        self.store.set_project_status(project_id, STATUS_COMPLETED)
        print(f"[synthesis] project={project_id} stage={STATUS_COMPLETED}")
        return SynthesisResult(
            project_id=project_id,
            entities=entities,
            components=components,
            pages=pages,
        )

    def _schema_stage(self, project_id: str, prompt: str) -> List[Entity]:
        self._enter(project_id, STATUS_SCHEMA)
        specs = run_model_turn(
            self.gateway, STATUS_SCHEMA, self.compiler.schema_prompt(prompt), decode_entities
        )
        entities = [
            self.store.create_entity(project_id, spec.name, spec.fields) for spec in specs
        ]
        print(f"[synthesis] project={project_id} entities={len(entities)}")
        return entities

    def _components_stage(
        self, project_id: str, prompt: str, entities: List[Entity]
    ) -> List[Component]:
        self._enter(project_id, STATUS_COMPONENTS)
        specs = run_model_turn(
            self.gateway,
            STATUS_COMPONENTS,
            self.compiler.components_prompt(prompt, entities),
            decode_components,
        )
        components = [
            self.store.upsert_component(project_id, spec.name, spec.code) for spec in specs
        ]
        print(f"[synthesis] project={project_id} components={len(components)}")
        return components

    def _pages_stage(
        self,
        project_id: str,
        prompt: str,
        entities: List[Entity],
        components: List[Component],
    ) -> List[Page]:
        self._enter(project_id, STATUS_PAGES)
        specs = run_model_turn(
            self.gateway,
            STATUS_PAGES,
            self.compiler.pages_prompt(prompt, entities, components),
            decode_pages,
        )
        pages = [
            self.store.upsert_page(project_id, spec.name, spec.route, spec.code)
            for spec in specs
        ]
        print(f"[synthesis] project={project_id} pages={len(pages)}")
        return pages

    def _enter(self, project_id: str, stage: str) -> None:
        self.store.set_project_status(project_id, stage)
        print(f"[synthesis] project={project_id} stage={stage}")

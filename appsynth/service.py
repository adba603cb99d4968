from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional

from appsynth.gateway import ModelGateway
from appsynth.models import ActiveFile, Architecture, IterationResult, Project, SynthesisResult
from appsynth.pipeline_iteration import IterationPipeline
from appsynth.pipeline_synthesis import SynthesisPipeline
from appsynth.prompts.compiler import PromptCompiler
from appsynth.store.base import ArtifactStore

DEFAULT_PROJECT_NAME = "New Project"


class SynthesisService:
    """Entry points used by the HTTP layer.

    Calls on the same project run one at a time, so two iterations never
    interleave their upserts. Calls on different projects do not block each
    other.
    """

    def __init__(
        self,
        store: ArtifactStore,
        gateway: ModelGateway,
        compiler: Optional[PromptCompiler] = None,
    ) -> None:
        self.store = store
        compiler = compiler or PromptCompiler()
        self.synthesis = SynthesisPipeline(store, gateway, compiler)
        self.iteration = IterationPipeline(store, gateway, compiler)
        # project id -> [lock, number of callers holding or waiting on it]
        self._locks: Dict[str, List] = {}
        self._locks_guard = threading.Lock()

    def create_project(self, prompt: str, name: Optional[str] = None) -> Project:
        return self.store.create_project(prompt, name or DEFAULT_PROJECT_NAME)

    def start_synthesis(self, project_id: str, prompt: str) -> SynthesisResult:
        with self._project_lock(project_id):
            return self.synthesis.run(project_id, prompt)

    def apply_iteration(
        self,
        project_id: str,
        message: str,
        active_file: Optional[ActiveFile] = None,
    ) -> IterationResult:
        with self._project_lock(project_id):
            return self.iteration.run(project_id, message, active_file)

    def get_architecture(self, project_id: str) -> Architecture:
        return self.store.load_project_architecture(project_id)

    @contextmanager
    def _project_lock(self, project_id: str) -> Iterator[None]:
        with self._locks_guard:
            entry = self._locks.setdefault(project_id, [threading.Lock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._locks_guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[project_id]

"""
Tests for SynthesisService per-project serialization
"""
import json
import threading
import time

import pytest

from appsynth.adapters.llm_base import LLMResponse
from appsynth.errors import PersistenceError
from appsynth.gateway import ModelGateway
from appsynth.service import SynthesisService
from appsynth.store.memory import MemoryArtifactStore

REPLY = {"message": "ok", "actions": [{"type": "component", "name": "Header", "code": "x"}]}


class SlowAdapter:
    """Counts how many model calls are in flight at once"""

    name = "slow"

    def __init__(self, barrier=None):
        self.barrier = barrier
        self.active = 0
        self.max_active = 0
        self.lock = threading.Lock()

    def complete(self, prompt):
        with self.lock:
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        try:
            if self.barrier is not None:
                self.barrier.wait()
            else:
                time.sleep(0.05)
        finally:
            with self.lock:
                self.active -= 1
        return LLMResponse(raw_text=json.dumps(REPLY))


def _run_in_threads(calls):
    errors = []

    def worker(fn):
        try:
            fn()
        except Exception as exc:  # collected for the assertion below
            errors.append(exc)

    threads = [threading.Thread(target=worker, args=(fn,)) for fn in calls]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=10)
    return errors


class TestSynthesisService:
    """Test suite for SynthesisService"""

    @pytest.fixture
    def store(self):
        return MemoryArtifactStore()

    def test_create_project_default_name(self, store):
        service = SynthesisService(store, ModelGateway(SlowAdapter()))
        project = service.create_project("Build a todo app")
        assert project.name == "New Project"
        assert project.status == "pending"

    def test_same_project_iterations_do_not_overlap(self, store):
        adapter = SlowAdapter()
        service = SynthesisService(store, ModelGateway(adapter))
        project = service.create_project("Build a todo app")

        errors = _run_in_threads(
            [lambda: service.apply_iteration(project.id, f"edit {i}") for i in range(3)]
        )

        assert errors == []
        assert adapter.max_active == 1
        arch = service.get_architecture(project.id)
        assert len(arch.components) == 1
        assert [m.role for m in arch.messages] == ["user", "assistant"] * 3
        assert service._locks == {}

    def test_different_projects_run_concurrently(self, store):
        adapter = SlowAdapter(barrier=threading.Barrier(2, timeout=5))
        service = SynthesisService(store, ModelGateway(adapter))
        first = service.create_project("Build a todo app")
        second = service.create_project("Build a blog")

        errors = _run_in_threads(
            [
                lambda: service.apply_iteration(first.id, "edit"),
                lambda: service.apply_iteration(second.id, "edit"),
            ]
        )

        assert errors == []
        assert adapter.max_active == 2
        assert service._locks == {}

    def test_lock_released_after_failure(self, store):
        service = SynthesisService(store, ModelGateway(SlowAdapter()))
        with pytest.raises(PersistenceError):
            service.apply_iteration("missing", "edit")
        assert service._locks == {}


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

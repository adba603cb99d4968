"""
Shared fixtures: an in-memory store and a scripted model adapter.
"""
import json

import pytest

from appsynth.adapters.llm_base import LLMResponse
from appsynth.gateway import ModelGateway
from appsynth.service import SynthesisService
from appsynth.store.memory import MemoryArtifactStore


class ScriptedAdapter:
    """Replays canned replies in order; an Exception entry is raised instead."""

    name = "scripted"

    def __init__(self, *replies):
        self.replies = list(replies)
        self.prompts = []

    def queue(self, *replies):
        self.replies.extend(replies)

    def complete(self, prompt):
        self.prompts.append(prompt)
        if not self.replies:
            raise AssertionError("unexpected model call")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        if not isinstance(reply, str):
            reply = json.dumps(reply)
        return LLMResponse(raw_text=reply)

    def generate(self, prompt):
        return self.complete(prompt).raw_text


TODO_SCHEMA = [{"name": "Task", "fields": {"title": "String", "done": "Boolean"}}]
TODO_COMPONENTS = [{"name": "TaskItem", "code": "export const TaskItem = () => <li>Task</li>"}]
TODO_PAGES = [
    {"name": "Home", "route": "/", "code": "export default function Home() { return <main /> }"},
    {"name": "TasksApi", "route": "/api/tasks", "code": "export async function GET() {}"},
]


@pytest.fixture
def store():
    return MemoryArtifactStore()


@pytest.fixture
def adapter():
    return ScriptedAdapter()


@pytest.fixture
def gateway(adapter):
    return ModelGateway(adapter)


@pytest.fixture
def service(store, gateway):
    return SynthesisService(store, gateway)


@pytest.fixture
def project(store):
    return store.create_project("Build a todo app", "Todo")

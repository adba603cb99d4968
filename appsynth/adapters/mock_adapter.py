from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from .llm_base import LLMAdapter, LLMResponse


@dataclass
class MockAdapter(LLMAdapter):
    scenario: str = "default"
    name = "mock"

    def complete(self, prompt: str) -> LLMResponse:
        payload = self._build_payload(prompt)
        return LLMResponse(raw_text=json.dumps(payload))

    def generate(self, prompt: str) -> str:
        return self.complete(prompt).raw_text

    def _build_payload(self, prompt: str) -> Any:
        if "TASK: iteration_actions" in prompt:
            return {
                "message": "Added a header",
                "actions": [
                    {
                        "type": "component",
                        "name": "Header",
                        "code": "export const Header = () => <header className='p-4 border-b'>Tasks</header>",
                    }
                ],
            }
        if "TASK: page_set" in prompt:
            return [
                {
                    "name": "Dashboard",
                    "route": "/dashboard",
                    "code": "export default function Dashboard() { return <div>Dashboard</div> }",
                }
            ]
        if "TASK: component_set" in prompt:
            return [
                {
                    "name": "ProjectCard",
                    "code": "export const ProjectCard = () => <div className='p-4 border'>Project</div>",
                },
                {
                    "name": "TaskItem",
                    "code": "export const TaskItem = () => <div className='flex gap-2'>Task</div>",
                },
            ]
        return [
            {"name": "Project", "fields": {"title": "String", "status": "String"}},
            {"name": "Task", "fields": {"title": "String", "completed": "Boolean"}},
        ]

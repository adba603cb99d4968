from __future__ import annotations

from typing import List, Optional

from appsynth.gateway import ModelGateway
from appsynth.models import (
    ROLE_ASSISTANT,
    ROLE_USER,
    Action,
    ActiveFile,
    IterationResult,
    PageAction,
)
from appsynth.parsing.payloads import decode_iteration_reply
from appsynth.pipeline_synthesis import run_model_turn
from appsynth.prompts.compiler import PromptCompiler
from appsynth.store.base import ArtifactStore


def summarize_actions(actions: List[Action]) -> str:
    if not actions:
        return "No changes were needed."
    names = ", ".join(
        f"{'page' if isinstance(action, PageAction) else 'component'} {action.name}"
        for action in actions
    )
    return f"Applied {len(actions)} change(s): {names}."


class IterationPipeline:
    """Applies one conversational edit to an existing project.

    The user message is recorded before the model is called. The reply is
    decoded in full before anything is written, so a malformed action rejects
    the whole batch. Actions are then upserted in order (later ones win on
    the same name) with no transaction around the loop. The assistant reply
    is recorded only after every action went through.
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

    def run(
        self,
        project_id: str,
        user_message: str,
        active_file: Optional[ActiveFile] = None,
    ) -> IterationResult:
        architecture = self.store.load_project_architecture(project_id)
        self.store.append_chat_message(project_id, ROLE_USER, user_message)

        prompt = self.compiler.iteration_prompt(architecture, user_message, active_file)
        reply = run_model_turn(self.gateway, "iteration", prompt, decode_iteration_reply)
        print(f"[iteration] project={project_id} actions={len(reply.actions)}")

        for action in reply.actions:
            self._apply(project_id, action)

        message = reply.message or summarize_actions(reply.actions)
        self.store.append_chat_message(project_id, ROLE_ASSISTANT, message)
        return IterationResult(message=message, applied_count=len(reply.actions))

    def _apply(self, project_id: str, action: Action) -> None:
        if isinstance(action, PageAction):
            self.store.upsert_page(project_id, action.name, action.route, action.code)
            print(f"[iteration] project={project_id} upsert page={action.name} route={action.route}")
        else:
            self.store.upsert_component(project_id, action.name, action.code)
            print(f"[iteration] project={project_id} upsert component={action.name}")

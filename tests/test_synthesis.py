"""
Tests for SynthesisPipeline (schema -> components -> pages)
"""
import pytest

from appsynth.errors import JSONExtractionError, ModelInvocationError, PayloadShapeError
from appsynth.gateway import ModelGateway
from appsynth.pipeline_synthesis import SynthesisPipeline
from tests.conftest import TODO_COMPONENTS, TODO_PAGES, TODO_SCHEMA


class TestSynthesisPipeline:
    """Test suite for SynthesisPipeline"""

    @pytest.fixture
    def pipeline(self, store, gateway):
        return SynthesisPipeline(store, gateway)

    def test_todo_app_schema(self, pipeline, store, adapter, project):
        adapter.queue(TODO_SCHEMA, TODO_COMPONENTS, TODO_PAGES)
        result = pipeline.run(project.id, "Build a todo app")

        arch = store.load_project_architecture(project.id)
        assert len(arch.entities) == 1
        assert arch.entities[0].name == "Task"
        assert arch.entities[0].fields == {"title": "String", "done": "Boolean"}
        assert [c.name for c in arch.components] == ["TaskItem"]
        assert {p.route for p in arch.pages} == {"/", "/api/tasks"}
        assert arch.project.status == "completed"
        assert result.status == "completed"
        assert len(result.pages) == 2

    def test_stages_run_in_order_and_see_prior_output(self, pipeline, adapter, project):
        adapter.queue(TODO_SCHEMA, TODO_COMPONENTS, TODO_PAGES)
        pipeline.run(project.id, "Build a todo app")

        schema_prompt, components_prompt, pages_prompt = adapter.prompts
        assert "TASK: entity_schema" in schema_prompt
        assert "TASK: component_set" in components_prompt
        assert '"Task"' in components_prompt
        assert "TASK: page_set" in pages_prompt
        assert '"TaskItem"' in pages_prompt

    def test_component_failure_keeps_schema(self, pipeline, store, adapter, project):
        adapter.queue(TODO_SCHEMA, ModelInvocationError("quota exceeded"))

        with pytest.raises(ModelInvocationError):
            pipeline.run(project.id, "Build a todo app")

        arch = store.load_project_architecture(project.id)
        assert [e.name for e in arch.entities] == ["Task"]
        assert arch.components == []
        assert arch.pages == []
        assert arch.project.status == "components"

    def test_unparseable_pages_propagate(self, pipeline, store, adapter, project):
        adapter.queue(TODO_SCHEMA, TODO_COMPONENTS, "Sorry, I ran out of ideas for pages.")

        with pytest.raises(JSONExtractionError) as excinfo:
            pipeline.run(project.id, "Build a todo app")

        assert excinfo.value.raw_text == "Sorry, I ran out of ideas for pages."
        arch = store.load_project_architecture(project.id)
        assert len(arch.components) == 1
        assert arch.pages == []
        assert arch.project.status == "pages"

    def test_nested_garbage_is_saved_for_diagnosis(self, store, adapter, project, tmp_path):
        pipeline = SynthesisPipeline(store, ModelGateway(adapter, raw_dir=tmp_path))
        adapter.queue("[" * 100000)

        with pytest.raises(JSONExtractionError):
            pipeline.run(project.id, "Build a todo app")

        dumps = list(tmp_path.glob("*_schema_extraction_failed.txt"))
        assert len(dumps) == 1
        assert dumps[0].read_text(encoding="utf-8") == "[" * 100000

    def test_invalid_field_type_stops_before_persisting(self, pipeline, store, adapter, project):
        adapter.queue([{"name": "Task", "fields": {"title": "Varchar"}}])

        with pytest.raises(PayloadShapeError):
            pipeline.run(project.id, "Build a todo app")

        assert store.load_project_architecture(project.id).entities == []

    def test_fenced_model_output(self, pipeline, store, adapter, project):
        fenced = 'Here is your schema:\n```json\n[{"name": "Task", "fields": {"title": "String"}}]\n```'
        adapter.queue(fenced, "[]", "[]")
        pipeline.run(project.id, "Build a todo app")
        assert store.load_project_architecture(project.id).entities[0].fields == {"title": "String"}

    def test_rerun_duplicates_entities_but_not_components(self, pipeline, store, adapter, project):
        adapter.queue(TODO_SCHEMA, TODO_COMPONENTS, TODO_PAGES)
        adapter.queue(TODO_SCHEMA, TODO_COMPONENTS, TODO_PAGES)
        pipeline.run(project.id, "Build a todo app")
        pipeline.run(project.id, "Build a todo app")

        arch = store.load_project_architecture(project.id)
        assert [e.name for e in arch.entities] == ["Task", "Task"]
        assert len(arch.components) == 1
        assert len(arch.pages) == 2


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

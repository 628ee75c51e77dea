import dataclasses

import pytest

from src.agents.workflow.state import WorkflowResult, WorkflowState


class TestWorkflowState:
    def test_initial_state_is_empty(self):
        state = WorkflowState()

        assert state.articles == ()
        assert state.summary is None
        assert state.themes == ()
        assert state.image_prompt is None
        assert state.image_url is None
        assert not state.failed

    def test_state_is_immutable(self):
        state = WorkflowState()

        with pytest.raises(dataclasses.FrozenInstanceError):
            state.summary = "changed"

    def test_advance_returns_new_state(self):
        state = WorkflowState()
        advanced = state.advance(summary="s", themes=("a", "b"))

        assert state.summary is None
        assert advanced.summary == "s"
        assert advanced.themes == ("a", "b")

    def test_first_error_wins(self):
        state = WorkflowState().with_error("first").with_error("second")

        assert state.failed
        assert state.error == "first"

    def test_with_error_keeps_produced_fields(self):
        state = WorkflowState(summary="s", image_prompt="p").with_error("boom")

        assert state.summary == "s"
        assert state.image_prompt == "p"


class TestWorkflowResult:
    def test_from_state_and_analysis(self):
        state = WorkflowState(summary="test", themes=("x", "y"), image_prompt="P", image_url="H")
        result = WorkflowResult.from_state(state)

        assert result.analysis == "test\n\nThemes: x, y"
        assert result.to_dict() == {
            "summary": "test",
            "themes": ["x", "y"],
            "image_prompt": "P",
            "image_url": "H",
        }

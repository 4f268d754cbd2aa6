"""Tests for pipeline state tracking."""

from __future__ import annotations

import pytest

from sitegen.errors import StateTransitionError
from sitegen.orchestration import PipelineState, PipelineStatus, StageStatus
from sitegen.result import ErrorKind, StageResult


@pytest.fixture
def state() -> PipelineState:
    return PipelineState(["plan", "style"])


class TestStageLifecycle:
    """Tests for StageState transitions."""

    def test_initial_state(self, state):
        stage = state.get("plan")

        assert stage.status == StageStatus.PENDING
        assert stage.progress == 0
        assert stage.result is None

    def test_run_to_completion(self, state):
        state.start("plan")
        state.transition("plan", StageStatus.RUNNING, progress=40, message="calling provider")
        result = StageResult.success({"sections": []}, used_fallback=True)
        final = state.transition("plan", StageStatus.COMPLETED, message="done", result=result)

        assert final.status == StageStatus.COMPLETED
        assert final.progress == 100
        assert final.result is result
        assert final.started_at is not None
        assert final.duration_seconds is not None
        assert state.value("plan") == {"sections": []}
        assert state.fallback_stages() == ["plan"]

    def test_terminal_is_immutable(self, state):
        state.start("plan")
        state.transition("plan", StageStatus.COMPLETED, result=StageResult.success(1))

        with pytest.raises(StateTransitionError, match="already completed"):
            state.transition("plan", StageStatus.RUNNING, progress=50)
        with pytest.raises(StateTransitionError):
            state.transition("plan", StageStatus.FAILED)

    def test_cannot_start_twice(self, state):
        state.start("plan")

        with pytest.raises(StateTransitionError, match="cannot start"):
            state.start("plan")

    def test_pending_cannot_complete(self, state):
        with pytest.raises(StateTransitionError, match="not allowed"):
            state.transition("plan", StageStatus.COMPLETED)

    def test_pending_can_be_skipped(self, state):
        skipped = state.transition("style", StageStatus.SKIPPED, message="upstream unavailable")

        assert skipped.status == StageStatus.SKIPPED
        assert skipped.progress == 0
        assert skipped.started_at is None

    def test_unknown_stage(self, state):
        with pytest.raises(StateTransitionError, match="Unknown"):
            state.transition("ghost", StageStatus.RUNNING)

    def test_progress_never_decreases(self, state):
        state.start("plan")
        state.transition("plan", StageStatus.RUNNING, progress=60)
        stage = state.transition("plan", StageStatus.RUNNING, progress=20)

        assert stage.progress == 60

    def test_progress_clamped(self, state):
        state.start("plan")
        stage = state.transition("plan", StageStatus.RUNNING, progress=250)

        assert stage.progress == 100

    def test_failed_result_has_no_value(self, state):
        state.start("plan")
        state.transition(
            "plan",
            StageStatus.FAILED,
            result=StageResult.failure(ErrorKind.INTERNAL_ERROR, "boom"),
        )

        assert state.value("plan") is None
        assert state.completed_results() == {}
        assert state.stages_with(StageStatus.FAILED) == ["plan"]


class TestPipelineStatus:
    """Tests for run-level status and serialization."""

    def test_mark_lifecycle(self, state):
        assert state.status == PipelineStatus.PENDING

        state.mark_started()
        assert state.status == PipelineStatus.RUNNING

        state.mark_completed()
        assert state.status == PipelineStatus.SUCCESS
        assert state.duration_seconds is not None

    def test_mark_cancelled(self, state):
        state.mark_started()
        state.mark_cancelled("user stop")

        assert state.status == PipelineStatus.CANCELLED
        assert state.failure_reason == "user stop"

    def test_summary(self, state):
        state.start("plan")
        state.transition("plan", StageStatus.COMPLETED, result=StageResult.success(1))
        state.transition("style", StageStatus.SKIPPED)

        summary = state.get_summary()

        assert summary["stages"]["completed"] == 1
        assert summary["stages"]["skipped"] == 1
        assert summary["stages"]["pending"] == 0

    def test_to_dict(self, state):
        data = state.to_dict()

        assert data["status"] == "pending"
        assert set(data["stages"]) == {"plan", "style"}
        assert data["stages"]["plan"]["status"] == "pending"

"""Tests for the wave scheduler."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from sitegen.cancellation import CancellationToken
from sitegen.config import GeneratorSettings
from sitegen.orchestration import (
    DependencyGraph,
    PipelineState,
    ProgressReporter,
    StageStatus,
    WaveScheduler,
    build_default_graph,
)
from sitegen.orchestration.scheduler import DEADLINE_REASON
from sitegen.result import ErrorKind, StageResult
from sitegen.stages import BaseStage


class EchoStage(BaseStage):
    """Test stage that returns its id after an optional sleep."""

    def __init__(self, stage_id: str, delay: float = 0.0, result: StageResult | None = None):
        self.stage_id = stage_id
        self.delay = delay
        self.result = result
        self.received: dict[str, Any] | None = None

    async def execute(self, inputs, config, context):
        self.received = dict(inputs)
        context.report(50, "halfway")
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.result is not None:
            return self.result
        return StageResult.success(self.stage_id)

    def fallback(self, inputs, config):
        return self.stage_id


class ExplodingStage(EchoStage):
    async def execute(self, inputs, config, context):
        raise RuntimeError("stage bug")


class WaitingStage(EchoStage):
    """Blocks until the run is cancelled."""

    async def execute(self, inputs, config, context):
        await context.cancel_token.wait()
        return StageResult.failure(ErrorKind.CANCELLED, context.cancel_token.reason)


def run_graph(graph, config, settings=None, token=None):
    token = token or CancellationToken()
    state = PipelineState(graph.stage_ids)
    reporter = ProgressReporter(graph.stage_ids)
    scheduler = WaveScheduler(graph, None, settings or GeneratorSettings(), reporter, token)
    asyncio.run(scheduler.run(config, state))
    return scheduler, state, reporter


def first_index(history, stage_id, statuses):
    for index, event in enumerate(history):
        if event.stage_id == stage_id and event.status in statuses:
            return index
    raise AssertionError(f"{stage_id} never reached {statuses}")


@pytest.fixture
def diamond():
    """a -> (b, c) -> d"""
    graph = DependencyGraph()
    stages = {
        "a": EchoStage("a"),
        "b": EchoStage("b", delay=0.02),
        "c": EchoStage("c"),
        "d": EchoStage("d"),
    }
    graph.add(stages["a"])
    graph.add(stages["b"], depends_on=["a"])
    graph.add(stages["c"], depends_on=["a"])
    graph.add(stages["d"], depends_on=["b", "c"])
    return graph, stages


class TestWaveOrdering:
    """A stage never starts before all of its dependencies are terminal."""

    def test_diamond(self, acme_config, diamond):
        graph, stages = diamond

        _, state, reporter = run_graph(graph, acme_config)

        terminal = {StageStatus.COMPLETED, StageStatus.FAILED, StageStatus.SKIPPED}
        for stage_id in graph.stage_ids:
            started = first_index(reporter.history, stage_id, {StageStatus.RUNNING})
            for dep in graph.dependencies(stage_id):
                assert first_index(reporter.history, dep, terminal) < started

        assert stages["d"].received == {"b": "b", "c": "c"}
        assert all(s.status == StageStatus.COMPLETED for s in state.snapshot().values())

    def test_wave_runs_concurrently(self, acme_config):
        graph = DependencyGraph()
        for stage_id in ("x", "y", "z"):
            graph.add(EchoStage(stage_id, delay=0.1))

        async def run():
            state = PipelineState(graph.stage_ids)
            scheduler = WaveScheduler(
                graph, None, GeneratorSettings(), ProgressReporter(graph.stage_ids),
                CancellationToken(),
            )
            started = asyncio.get_running_loop().time()
            await scheduler.run(acme_config, state)
            return asyncio.get_running_loop().time() - started

        assert asyncio.run(run()) < 0.25

    def test_default_graph_offline(self, acme_config):
        _, state, reporter = run_graph(build_default_graph(), acme_config)

        assert state.stages_with(StageStatus.COMPLETED) == build_default_graph().stage_ids
        assert state.fallback_stages() == build_default_graph().stage_ids
        assert reporter.overall == 100


class TestFailures:
    """Tests for failed, skipped and aborted stages."""

    def test_failure_skips_dependents(self, acme_config):
        graph = DependencyGraph()
        graph.add(EchoStage("a", result=StageResult.failure(ErrorKind.INTERNAL_ERROR, "nope")))
        graph.add(EchoStage("b"))
        graph.add(EchoStage("c"), depends_on=["a"])

        _, state, _ = run_graph(graph, acme_config)

        assert state.get("a").status == StageStatus.FAILED
        assert state.get("b").status == StageStatus.COMPLETED
        assert state.get("c").status == StageStatus.SKIPPED
        assert state.get("c").message == "upstream unavailable: a"

    def test_exception_becomes_internal_error(self, acme_config):
        graph = DependencyGraph()
        graph.add(ExplodingStage("boom"))
        graph.add(EchoStage("fine"))

        _, state, _ = run_graph(graph, acme_config)

        result = state.result("boom")
        assert state.get("boom").status == StageStatus.FAILED
        assert result.error == ErrorKind.INTERNAL_ERROR
        assert "RuntimeError" in result.message
        assert state.get("fine").status == StageStatus.COMPLETED

    def test_configuration_invalid_aborts(self, acme_config):
        graph = DependencyGraph()
        graph.add(EchoStage(
            "a", result=StageResult.failure(ErrorKind.CONFIGURATION_INVALID, "industry missing")
        ))
        graph.add(EchoStage("b"))
        graph.add(EchoStage("later"), depends_on=["b"])

        scheduler, state, _ = run_graph(graph, acme_config)

        assert scheduler.aborted_reason == "industry missing"
        assert state.get("b").status == StageStatus.COMPLETED
        assert state.get("later").status == StageStatus.SKIPPED
        assert state.get("later").message == "pipeline aborted"


class TestCancellation:
    """Tests for cancellation and the deadline."""

    def test_cancelled_before_start(self, acme_config, diamond):
        graph, stages = diamond
        token = CancellationToken()
        token.cancel("stop")

        _, state, _ = run_graph(graph, acme_config, token=token)

        assert state.stages_with(StageStatus.SKIPPED) == graph.stage_ids
        assert state.get("a").message == "stop"
        assert stages["a"].received is None

    def test_cancel_between_waves(self, acme_config):
        graph = DependencyGraph()
        token = CancellationToken()
        graph.add(EchoStage("first"))
        graph.add(EchoStage("second"), depends_on=["first"])

        state = PipelineState(graph.stage_ids)
        reporter = ProgressReporter(graph.stage_ids)

        def stop_after_first(event):
            if event.stage_id == "first" and event.status == StageStatus.COMPLETED:
                token.cancel("user stop")

        reporter.subscribe(stop_after_first)
        scheduler = WaveScheduler(graph, None, GeneratorSettings(), reporter, token)
        asyncio.run(scheduler.run(acme_config, state))

        assert state.get("first").status == StageStatus.COMPLETED
        assert state.get("second").status == StageStatus.SKIPPED
        assert state.get("second").message == "user stop"

    def test_deadline(self, acme_config):
        graph = DependencyGraph()
        graph.add(EchoStage("quick"))
        graph.add(WaitingStage("slow"), depends_on=["quick"])
        graph.add(EchoStage("after"), depends_on=["slow"])
        settings = GeneratorSettings(pipeline_deadline_seconds=0.05)

        scheduler, state, _ = run_graph(graph, acme_config, settings=settings)

        assert scheduler.deadline_exceeded
        assert state.get("quick").status == StageStatus.COMPLETED
        assert state.get("slow").status == StageStatus.SKIPPED
        assert state.get("slow").result.error == ErrorKind.CANCELLED
        assert state.get("after").status == StageStatus.SKIPPED
        assert state.get("after").message == DEADLINE_REASON

    def test_no_deadline_when_fast(self, acme_config, diamond):
        graph, _ = diamond
        settings = GeneratorSettings(pipeline_deadline_seconds=5.0)

        scheduler, state, _ = run_graph(graph, acme_config, settings=settings)

        assert not scheduler.deadline_exceeded
        assert state.stages_with(StageStatus.COMPLETED) == graph.stage_ids

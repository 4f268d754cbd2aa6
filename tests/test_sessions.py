"""Tests for the session registry."""

from __future__ import annotations

import asyncio

import pytest

from sitegen.config import load_settings
from sitegen.orchestration import (
    FailureKind,
    PipelineFailure,
    PipelineOrchestrator,
    SessionRegistry,
)


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def registry(clock) -> SessionRegistry:
    return SessionRegistry(ttl_seconds=60, max_sessions=3, clock=clock)


def new_session(registry):
    return registry.create(PipelineOrchestrator(adapter=None))


class TestSessionLifecycle:
    """Tests for creating and finishing sessions."""

    def test_create_and_get(self, registry):
        session = new_session(registry)

        assert registry.get(session.id) is session
        assert session.status == "running"
        assert len(registry) == 1

    def test_finish_with_artifact(self, registry, acme_config):
        session = new_session(registry)
        outcome = asyncio.run(session.orchestrator.generate(acme_config))

        registry.finish(session.id, outcome)

        assert session.status == "completed"
        data = session.to_dict()
        assert data["progress"] == 100
        assert data["state"]["status"] == "success"

    def test_finish_cancelled(self, registry):
        session = new_session(registry)

        registry.finish(session.id, PipelineFailure(FailureKind.CANCELLED, "stop"))

        assert session.status == "cancelled"

    def test_finish_failed(self, registry):
        session = new_session(registry)

        registry.finish(session.id, PipelineFailure(FailureKind.REQUIRED_STAGE_MISSING, "no copy"))

        assert session.status == "failed"

    def test_finish_unknown(self, registry):
        with pytest.raises(KeyError):
            registry.finish("missing", PipelineFailure(FailureKind.CANCELLED, "stop"))

    def test_remove(self, registry):
        session = new_session(registry)

        assert registry.remove(session.id)
        assert not registry.remove(session.id)
        assert registry.get(session.id) is None


class TestEviction:
    """Tests for TTL and capacity eviction."""

    def test_running_sessions_never_evicted(self, registry, clock):
        session = new_session(registry)
        clock.now += 10_000

        assert registry.evict_expired() == []
        assert registry.get(session.id) is session

    def test_ttl(self, registry, clock):
        session = new_session(registry)
        registry.finish(session.id, PipelineFailure(FailureKind.CANCELLED, "stop"))

        clock.now += 59
        assert registry.evict_expired() == []

        clock.now += 1
        assert registry.evict_expired() == [session.id]
        assert registry.get(session.id) is None

    def test_capacity_evicts_oldest_finished(self, registry, clock):
        sessions = [new_session(registry) for _ in range(4)]
        for session in sessions[:2]:
            clock.now += 1
            registry.finish(session.id, PipelineFailure(FailureKind.CANCELLED, "stop"))

        evicted = registry.evict_expired()

        assert evicted == [sessions[0].id]
        assert len(registry) == 3

    def test_periodic_eviction(self, registry, clock):
        session = new_session(registry)
        registry.finish(session.id, PipelineFailure(FailureKind.CANCELLED, "stop"))
        clock.now += 120

        async def run():
            task = asyncio.ensure_future(registry.run_eviction(interval=0.01))
            await asyncio.sleep(0.05)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

        asyncio.run(run())

        assert len(registry) == 0


class TestFromSettings:
    """Tests for sizing a registry from generator settings."""

    def test_settings_file_controls_eviction(self, tmp_path, clock):
        path = tmp_path / "settings.yaml"
        path.write_text("session_ttl_seconds: 5\nmax_sessions: 1\n")
        registry = SessionRegistry.from_settings(load_settings(path, env={}), clock=clock)

        assert registry.ttl_seconds == 5
        assert registry.max_sessions == 1

        first, second = new_session(registry), new_session(registry)
        registry.finish(first.id, PipelineFailure(FailureKind.CANCELLED, "stop"))
        assert registry.evict_expired() == [first.id]

        registry.finish(second.id, PipelineFailure(FailureKind.CANCELLED, "stop"))
        clock.now += 5
        assert registry.evict_expired() == [second.id]

    def test_defaults(self):
        registry = SessionRegistry.from_settings(load_settings(env={}))

        assert registry.ttl_seconds == 3600
        assert registry.max_sessions == 100

"""In-memory registry of generation runs with explicit eviction."""

from __future__ import annotations

import asyncio
import logging
import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable

from sitegen.config.settings import GeneratorSettings
from sitegen.orchestration.orchestrator import PipelineFailure, PipelineOrchestrator, PipelineOutcome

logger = logging.getLogger(__name__)


@dataclass
class GenerationSession:
    """One orchestrator run tracked by the registry."""

    orchestrator: PipelineOrchestrator
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: float = 0.0
    finished_at: float | None = None
    outcome: PipelineOutcome | None = None

    @property
    def finished(self) -> bool:
        return self.finished_at is not None

    @property
    def status(self) -> str:
        if not self.finished:
            return "running"
        if isinstance(self.outcome, PipelineFailure):
            return "cancelled" if self.outcome.cancelled else "failed"
        return "completed"

    def to_dict(self) -> dict[str, Any]:
        state = self.orchestrator.state
        return {
            "id": self.id,
            "status": self.status,
            "created_at": self.created_at,
            "finished_at": self.finished_at,
            "progress": self.orchestrator.reporter.overall if self.orchestrator.reporter else 0,
            "state": state.to_dict() if state else None,
        }


class SessionRegistry:
    """Tracks runs by id.

    Finished sessions are kept for ttl_seconds after they finish, then
    dropped by evict_expired(). Running sessions are never evicted. When
    more than max_sessions are held, the oldest finished ones go first.
    """

    def __init__(
        self,
        ttl_seconds: float = 3600,
        max_sessions: int = 100,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self.max_sessions = max_sessions
        self._clock = clock
        self._lock = threading.Lock()
        self._sessions: dict[str, GenerationSession] = {}

    @classmethod
    def from_settings(
        cls, settings: GeneratorSettings, clock: Callable[[], float] = time.monotonic
    ) -> SessionRegistry:
        """Build a registry sized by the session_ttl_seconds and max_sessions settings."""
        return cls(
            ttl_seconds=settings.session_ttl_seconds,
            max_sessions=settings.max_sessions,
            clock=clock,
        )

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def create(self, orchestrator: PipelineOrchestrator) -> GenerationSession:
        session = GenerationSession(orchestrator=orchestrator, created_at=self._clock())
        with self._lock:
            self._sessions[session.id] = session
        logger.debug("session %s created", session.id)
        return session

    def get(self, session_id: str) -> GenerationSession | None:
        with self._lock:
            return self._sessions.get(session_id)

    def finish(self, session_id: str, outcome: PipelineOutcome) -> GenerationSession:
        """Record a run's outcome and start its TTL.

        Raises:
            KeyError: If the session is unknown.
        """
        with self._lock:
            session = self._sessions[session_id]
            session.outcome = outcome
            session.finished_at = self._clock()
        return session

    def remove(self, session_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def evict_expired(self) -> list[str]:
        """Drop expired and over-capacity finished sessions.

        Returns:
            Ids of the evicted sessions.
        """
        now = self._clock()
        evicted: list[str] = []
        with self._lock:
            finished = sorted(
                (s for s in self._sessions.values() if s.finished),
                key=lambda s: s.finished_at,
            )
            for session in finished:
                if now - session.finished_at >= self.ttl_seconds:
                    evicted.append(session.id)

            overflow = len(self._sessions) - len(evicted) - self.max_sessions
            for session in finished:
                if overflow <= 0:
                    break
                if session.id not in evicted:
                    evicted.append(session.id)
                    overflow -= 1

            for session_id in evicted:
                del self._sessions[session_id]

        if evicted:
            logger.info("evicted %d sessions", len(evicted))
        return evicted

    async def run_eviction(self, interval: float = 60.0) -> None:
        """Evict periodically until the task is cancelled."""
        while True:
            await asyncio.sleep(interval)
            self.evict_expired()

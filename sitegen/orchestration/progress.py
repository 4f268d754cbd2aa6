"""Progress reporting for pipeline runs."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Iterable

from sitegen.orchestration.state import StageStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProgressEvent:
    """One stage transition, with the run's aggregate progress."""

    stage_id: str
    status: StageStatus
    progress: int
    message: str = ""
    overall: int = 0
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "stage_id": self.stage_id,
            "status": self.status.value,
            "progress": self.progress,
            "message": self.message,
            "overall": self.overall,
            "timestamp": self.timestamp.isoformat(),
        }


ProgressListener = Callable[[ProgressEvent], None]


class ProgressReporter:
    """Aggregates per-stage progress and pushes events to subscribers.

    The aggregate is round(100 * sum(progress) / (100 * n)) over stages
    that are not skipped. Reported values never decrease within a run,
    neither per stage nor in aggregate.
    """

    def __init__(self, stage_ids: Iterable[str]):
        self._lock = threading.Lock()
        self._stages: dict[str, tuple[StageStatus, int]] = {
            sid: (StageStatus.PENDING, 0) for sid in stage_ids
        }
        self._listeners: list[ProgressListener] = []
        self._overall = 0
        self.history: list[ProgressEvent] = []

    def subscribe(self, listener: ProgressListener) -> Callable[[], None]:
        """Register a listener, called synchronously on every transition.

        Returns:
            A function that removes the listener.
        """
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def on_stage_transition(
        self,
        stage_id: str,
        status: StageStatus,
        progress: int,
        message: str = "",
    ) -> ProgressEvent:
        """Record a stage's new status and progress and notify listeners."""
        with self._lock:
            _, previous = self._stages.get(stage_id, (StageStatus.PENDING, 0))
            progress = max(previous, min(100, max(0, int(progress))))
            if status in (StageStatus.COMPLETED, StageStatus.FAILED):
                progress = 100
            self._stages[stage_id] = (status, progress)

            self._overall = max(self._overall, self._aggregate())
            event = ProgressEvent(
                stage_id=stage_id,
                status=status,
                progress=progress,
                message=message,
                overall=self._overall,
            )
            self.history.append(event)
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(event)
            except Exception:
                logger.exception("Progress listener failed for %s", stage_id)

        return event

    @property
    def overall(self) -> int:
        """Highest aggregate reported so far."""
        with self._lock:
            return self._overall

    def aggregate(self) -> int:
        """Current aggregate, not clamped to previous values."""
        with self._lock:
            return self._aggregate()

    def _aggregate(self) -> int:
        active = [p for status, p in self._stages.values() if status != StageStatus.SKIPPED]
        if not active:
            return 0
        return round(100 * sum(active) / (100 * len(active)))

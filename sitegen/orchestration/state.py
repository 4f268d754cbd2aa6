"""State management for pipeline execution."""

from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Any, Iterable

from sitegen.errors import StateTransitionError
from sitegen.result import StageResult


class PipelineStatus(Enum):
    """Overall status of a pipeline execution."""

    PENDING = "pending"
    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"
    CANCELLED = "cancelled"


class StageStatus(Enum):
    """Status of a single stage."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"

    @property
    def is_terminal(self) -> bool:
        return self in (StageStatus.COMPLETED, StageStatus.FAILED, StageStatus.SKIPPED)


_ALLOWED = {
    StageStatus.PENDING: {StageStatus.RUNNING, StageStatus.FAILED, StageStatus.SKIPPED},
    StageStatus.RUNNING: {
        StageStatus.RUNNING,
        StageStatus.COMPLETED,
        StageStatus.FAILED,
        StageStatus.SKIPPED,
    },
}


@dataclass(frozen=True)
class StageState:
    """Snapshot of one stage. Replaced, never mutated, on each transition."""

    stage_id: str
    status: StageStatus = StageStatus.PENDING
    progress: int = 0
    message: str = ""
    result: StageResult | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None

    @property
    def duration_seconds(self) -> float | None:
        """Calculate duration in seconds if completed."""
        if self.started_at and self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "stage_id": self.stage_id,
            "status": self.status.value,
            "progress": self.progress,
            "message": self.message,
            "used_fallback": self.result.used_fallback if self.result else None,
            "provider_id": self.result.provider_id if self.result else None,
            "error": self.result.error.value if self.result and self.result.error else None,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "duration_seconds": self.duration_seconds,
        }


class PipelineState:
    """Per-run map of stage id to StageState.

    transition() is the single serialization point for stage updates.
    It enforces the lifecycle: terminal states never change, a stage
    enters RUNNING at most once, and progress never decreases.
    """

    def __init__(self, stage_ids: Iterable[str]):
        self._lock = threading.RLock()
        self._stages: dict[str, StageState] = {sid: StageState(sid) for sid in stage_ids}
        self.status = PipelineStatus.PENDING
        self.started_at: datetime | None = None
        self.completed_at: datetime | None = None
        self.failure_reason = ""

    def transition(
        self,
        stage_id: str,
        status: StageStatus,
        progress: int | None = None,
        message: str = "",
        result: StageResult | None = None,
    ) -> StageState:
        """Apply a status and/or progress change.

        Args:
            stage_id: Stage to update.
            status: New status; RUNNING -> RUNNING is a progress update.
            progress: New progress 0-100. Lower values than the current one are ignored.
            message: Milestone description.
            result: Terminal StageResult.

        Returns:
            The stage's new snapshot.

        Raises:
            StateTransitionError: On an illegal transition.
        """
        with self._lock:
            current = self._stages.get(stage_id)
            if current is None:
                raise StateTransitionError(f"Unknown stage: {stage_id}")
            if current.status.is_terminal:
                raise StateTransitionError(
                    f"{stage_id} is already {current.status.value}"
                )
            if status not in _ALLOWED[current.status]:
                raise StateTransitionError(
                    f"{stage_id}: {current.status.value} -> {status.value} not allowed"
                )

            now = datetime.now()
            new_progress = current.progress
            if progress is not None:
                new_progress = max(current.progress, min(100, max(0, int(progress))))
            if status in (StageStatus.COMPLETED, StageStatus.FAILED):
                new_progress = 100

            updated = replace(
                current,
                status=status,
                progress=new_progress,
                message=message or current.message,
                result=result if result is not None else current.result,
                started_at=current.started_at or (now if status == StageStatus.RUNNING else None),
                completed_at=now if status.is_terminal else None,
            )
            self._stages[stage_id] = updated
            return updated

    def start(self, stage_id: str, message: str = "started") -> StageState:
        """Move a pending stage to RUNNING.

        Raises:
            StateTransitionError: If the stage is not pending, so a stage
                can never have two concurrent executions.
        """
        with self._lock:
            status = self._stages[stage_id].status
            if status != StageStatus.PENDING:
                raise StateTransitionError(f"{stage_id} cannot start: already {status.value}")
            return self.transition(stage_id, StageStatus.RUNNING, progress=0, message=message)

    def get(self, stage_id: str) -> StageState:
        with self._lock:
            return self._stages[stage_id]

    def snapshot(self) -> dict[str, StageState]:
        with self._lock:
            return dict(self._stages)

    def result(self, stage_id: str) -> StageResult | None:
        return self.get(stage_id).result

    def value(self, stage_id: str) -> Any:
        """Output of a stage that succeeded, else None."""
        result = self.result(stage_id)
        if result is not None and result.is_success:
            return result.value
        return None

    def completed_results(self) -> dict[str, StageResult]:
        """Successful results of completed stages."""
        return {
            sid: state.result
            for sid, state in self.snapshot().items()
            if state.status == StageStatus.COMPLETED and state.result is not None
        }

    def fallback_stages(self) -> list[str]:
        return [
            sid for sid, result in self.completed_results().items() if result.used_fallback
        ]

    def stages_with(self, status: StageStatus) -> list[str]:
        return [sid for sid, state in self.snapshot().items() if state.status == status]

    @property
    def duration_seconds(self) -> float | None:
        """Calculate total duration in seconds if completed."""
        if self.started_at and self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None

    def mark_started(self) -> None:
        """Mark the pipeline as started."""
        self.status = PipelineStatus.RUNNING
        self.started_at = datetime.now()

    def mark_completed(self, success: bool = True, reason: str = "") -> None:
        """Mark the pipeline as completed."""
        self.status = PipelineStatus.SUCCESS if success else PipelineStatus.FAILED
        self.failure_reason = reason
        self.completed_at = datetime.now()

    def mark_cancelled(self, reason: str = "") -> None:
        """Mark the pipeline as cancelled."""
        self.status = PipelineStatus.CANCELLED
        self.failure_reason = reason
        self.completed_at = datetime.now()

    def get_summary(self) -> dict[str, Any]:
        """Get a summary of the pipeline state."""
        stage_summary = {status.value: 0 for status in StageStatus}
        for state in self.snapshot().values():
            stage_summary[state.status.value] += 1

        return {
            "status": self.status.value,
            "duration_seconds": self.duration_seconds,
            "stages": stage_summary,
            "fallback_stages": self.fallback_stages(),
        }

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "status": self.status.value,
            "failure_reason": self.failure_reason,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "duration_seconds": self.duration_seconds,
            "stages": {sid: state.to_dict() for sid, state in self.snapshot().items()},
        }

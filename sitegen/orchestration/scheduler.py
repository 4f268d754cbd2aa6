"""Wave scheduler: runs each wave of stages concurrently, in strict wave order."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from sitegen.cancellation import CancellationToken
from sitegen.config.business import BusinessConfiguration
from sitegen.config.settings import GeneratorSettings
from sitegen.llm.adapter import ProviderAdapter
from sitegen.orchestration.graph import DependencyGraph
from sitegen.orchestration.progress import ProgressReporter
from sitegen.orchestration.state import PipelineState, StageStatus
from sitegen.result import ErrorKind, StageResult
from sitegen.stages.base import StageContext

logger = logging.getLogger(__name__)

DEADLINE_REASON = "pipeline deadline exceeded"


class WaveScheduler:
    """Executes a dependency graph wave by wave.

    Every stage in a wave starts together; the next wave starts only
    after all of them reach a terminal result. Fallback results count as
    completed. A CONFIGURATION_INVALID result aborts the remaining waves.
    Cancellation and the optional deadline skip the remaining waves and
    abort in-flight provider calls through the shared token.
    """

    def __init__(
        self,
        graph: DependencyGraph,
        adapter: ProviderAdapter | None,
        settings: GeneratorSettings,
        reporter: ProgressReporter,
        cancel_token: CancellationToken,
    ):
        self.graph = graph
        self.adapter = adapter
        self.settings = settings
        self.reporter = reporter
        self.cancel_token = cancel_token
        self.state: PipelineState | None = None
        self.aborted_reason = ""
        self.deadline_exceeded = False

    async def run(self, config: BusinessConfiguration, state: PipelineState) -> PipelineState:
        """Run every wave to completion, abort or cancellation.

        Args:
            config: Immutable business configuration shared by all stages.
            state: Fresh state with every stage pending.

        Returns:
            The same state, with every stage terminal.
        """
        self.state = state
        loop = asyncio.get_running_loop()
        self.cancel_token.bind(loop)

        deadline_handle = None
        if self.settings.pipeline_deadline_seconds:
            deadline_handle = loop.call_later(
                self.settings.pipeline_deadline_seconds, self._on_deadline
            )

        waves = self.graph.waves
        try:
            for index, wave in enumerate(waves):
                if self.cancel_token.cancelled:
                    self._skip_remaining(waves[index:], self.cancel_token.reason or "cancelled")
                    break

                logger.info("wave %d/%d: %s", index + 1, len(waves), ", ".join(wave))
                runnable: list[tuple[str, dict[str, Any]]] = []
                for stage_id in wave:
                    inputs, missing = self._inputs_for(stage_id)
                    if missing:
                        self._update(
                            stage_id,
                            StageStatus.SKIPPED,
                            message=f"upstream unavailable: {', '.join(missing)}",
                        )
                        continue
                    state.start(stage_id)
                    self._report(stage_id, "started")
                    runnable.append((stage_id, inputs))

                results = await asyncio.gather(
                    *(self._run_stage(stage_id, inputs, config) for stage_id, inputs in runnable)
                )

                fatal = None
                for (stage_id, _), result in zip(runnable, results):
                    self._record(stage_id, result)
                    if result.error == ErrorKind.CONFIGURATION_INVALID:
                        fatal = result

                if fatal is not None:
                    self.aborted_reason = fatal.message
                    logger.error("aborting remaining waves: %s", fatal.message)
                    self._skip_remaining(waves[index + 1:], "pipeline aborted")
                    break
        finally:
            if deadline_handle is not None:
                deadline_handle.cancel()

        return state

    def _on_deadline(self) -> None:
        logger.warning("%s after %ss", DEADLINE_REASON, self.settings.pipeline_deadline_seconds)
        self.deadline_exceeded = True
        self.cancel_token.cancel(DEADLINE_REASON)

    def _inputs_for(self, stage_id: str) -> tuple[dict[str, Any], list[str]]:
        inputs: dict[str, Any] = {}
        missing: list[str] = []
        for dep in self.graph.dependencies(stage_id):
            dep_state = self.state.get(dep)
            value = self.state.value(dep)
            if dep_state.status != StageStatus.COMPLETED or value is None:
                missing.append(dep)
            else:
                inputs[dep] = value
        return inputs, missing

    async def _run_stage(
        self,
        stage_id: str,
        inputs: dict[str, Any],
        config: BusinessConfiguration,
    ) -> StageResult:
        stage = self.graph.nodes[stage_id].stage
        context = StageContext(
            stage_id=stage_id,
            adapter=self.adapter,
            provider_ids=self.settings.providers_for(stage_id, stage.kind),
            cancel_token=self.cancel_token,
            reporter=self._on_milestone,
            max_concurrency=self.settings.max_image_concurrency,
        )
        try:
            return await stage.execute(inputs, config, context)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.exception("%s raised unexpectedly", stage_id)
            return StageResult.failure(ErrorKind.INTERNAL_ERROR, f"{type(e).__name__}: {e}")

    def _on_milestone(self, stage_id: str, progress: int, message: str) -> None:
        self._update(stage_id, StageStatus.RUNNING, progress=progress, message=message)

    def _record(self, stage_id: str, result: StageResult) -> None:
        if result.is_success:
            message = "completed with fallback" if result.used_fallback else "completed"
            self._update(stage_id, StageStatus.COMPLETED, message=message, result=result)
        elif result.is_cancelled:
            self._update(stage_id, StageStatus.SKIPPED, message="cancelled", result=result)
        else:
            self._update(stage_id, StageStatus.FAILED, message=result.message, result=result)

    def _skip_remaining(self, waves: tuple[tuple[str, ...], ...], reason: str) -> None:
        for wave in waves:
            for stage_id in wave:
                if self.state.get(stage_id).status == StageStatus.PENDING:
                    self._update(stage_id, StageStatus.SKIPPED, message=reason)

    def _update(
        self,
        stage_id: str,
        status: StageStatus,
        progress: int | None = None,
        message: str = "",
        result: StageResult | None = None,
    ) -> None:
        snapshot = self.state.transition(stage_id, status, progress, message, result)
        self.reporter.on_stage_transition(stage_id, snapshot.status, snapshot.progress, message)

    def _report(self, stage_id: str, message: str) -> None:
        snapshot = self.state.get(stage_id)
        self.reporter.on_stage_transition(stage_id, snapshot.status, snapshot.progress, message)

"""Pipeline orchestrator: runs the wave scheduler and assembles the site."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, AsyncIterator, Callable

from sitegen.cancellation import CancellationToken
from sitegen.config.business import BusinessConfiguration
from sitegen.config.settings import GeneratorSettings
from sitegen.llm.adapter import ProviderAdapter
from sitegen.orchestration.graph import DependencyGraph, build_default_graph
from sitegen.orchestration.progress import ProgressEvent, ProgressListener, ProgressReporter
from sitegen.orchestration.scheduler import WaveScheduler
from sitegen.orchestration.state import PipelineState, StageStatus
from sitegen.result import StageResult
from sitegen.stages.schemas import (
    DesignStrategy,
    ImageAsset,
    ImageSet,
    Layout,
    SectionCopy,
    SectionPlan,
    SEOMetadata,
    StyleSystem,
)

logger = logging.getLogger(__name__)


class FailureKind(Enum):
    """Why a run produced no site."""

    CONFIGURATION_INVALID = "ConfigurationInvalid"
    CANCELLED = "Cancelled"
    REQUIRED_STAGE_MISSING = "RequiredStageMissing"
    DEADLINE_EXCEEDED = "DeadlineExceeded"


@dataclass
class SiteArtifact:
    """Everything the downstream writer needs to emit a site.

    Optional parts are None when their stage was skipped, for example
    after the pipeline deadline passed.
    """

    project_name: str
    slug: str
    section_plan: SectionPlan
    style_system: StyleSystem
    layout: Layout
    copy: list[SectionCopy]
    design_strategy: DesignStrategy | None = None
    images: ImageSet | None = None
    seo_metadata: SEOMetadata | None = None
    fallback_stages: list[str] = field(default_factory=list)
    stage_results: dict[str, StageResult] = field(default_factory=dict)

    @property
    def hero_image(self) -> ImageAsset | None:
        if self.images is None:
            return None
        for asset in self.images.assets:
            if asset.purpose == "hero":
                return asset
        return None

    def copy_for(self, section_key: str) -> SectionCopy | None:
        for item in self.copy:
            if item.section_key == section_key:
                return item
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "project_name": self.project_name,
            "slug": self.slug,
            "design_strategy": self.design_strategy.to_dict() if self.design_strategy else None,
            "section_plan": self.section_plan.to_dict(),
            "style_system": self.style_system.to_dict(),
            "layout": self.layout.to_dict(),
            "images": [asset.to_dict() for asset in self.images.assets]
            if self.images is not None else [],
            "copy": [item.to_dict() for item in self.copy],
            "seo_metadata": self.seo_metadata.to_dict() if self.seo_metadata else None,
            "fallback_stages": list(self.fallback_stages),
            "stages": {sid: result.to_dict() for sid, result in self.stage_results.items()},
        }


@dataclass
class PipelineFailure:
    """Terminal outcome of a run that produced no site.

    Attributes:
        kind: Failure category.
        reason: Human readable explanation.
        partial_results: Outputs of stages that completed before the failure.
        state: Final pipeline state.
    """

    kind: FailureKind
    reason: str
    partial_results: dict[str, Any] = field(default_factory=dict)
    state: PipelineState | None = None

    @property
    def cancelled(self) -> bool:
        return self.kind == FailureKind.CANCELLED

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "reason": self.reason,
            "completed_stages": sorted(self.partial_results),
            "state": self.state.to_dict() if self.state else None,
        }


PipelineOutcome = SiteArtifact | PipelineFailure


class PipelineOrchestrator:
    """Drives one generation run.

    An orchestrator owns a single cancellation token, so use a fresh
    instance per run. cancel() may be called from any thread.

    Example:
        orchestrator = PipelineOrchestrator(adapter, settings)
        outcome = await orchestrator.generate(config)
        if isinstance(outcome, PipelineFailure):
            ...
    """

    def __init__(
        self,
        adapter: ProviderAdapter | None,
        settings: GeneratorSettings | None = None,
        graph: DependencyGraph | None = None,
    ):
        """Initialize the orchestrator.

        Args:
            adapter: Provider adapter; None runs every stage on its fallback.
            settings: Runtime settings; defaults when omitted.
            graph: Stage graph; the standard site pipeline when omitted.
        """
        self.adapter = adapter
        self.settings = settings or GeneratorSettings()
        self.graph = graph or build_default_graph()
        self.cancel_token = CancellationToken()
        self.state: PipelineState | None = None
        self.reporter: ProgressReporter | None = None
        self._listeners: list[ProgressListener] = []

    def subscribe(self, listener: ProgressListener) -> Callable[[], None]:
        """Receive every ProgressEvent of the run.

        Returns:
            A function that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def cancel(self, reason: str = "cancelled by caller") -> None:
        """Request cancellation. Completed stage outputs are kept."""
        logger.info("cancellation requested: %s", reason)
        self.cancel_token.cancel(reason)

    async def generate(self, config: BusinessConfiguration) -> PipelineOutcome:
        """Run the pipeline to a terminal outcome.

        Never raises for stage or provider errors; those end up as
        fallback results or as a PipelineFailure.
        """
        stage_ids = self.graph.stage_ids
        state = PipelineState(stage_ids)
        reporter = ProgressReporter(stage_ids)
        reporter.subscribe(self._dispatch)
        self.state = state
        self.reporter = reporter
        state.mark_started()

        missing = config.missing_fields()
        if missing:
            reason = f"Missing required configuration fields: {', '.join(missing)}"
            logger.error(reason)
            for stage_id in stage_ids:
                state.transition(stage_id, StageStatus.SKIPPED, message=reason)
                reporter.on_stage_transition(stage_id, StageStatus.SKIPPED, 0, reason)
            state.mark_completed(success=False, reason=reason)
            return PipelineFailure(FailureKind.CONFIGURATION_INVALID, reason, state=state)

        logger.info("generating site for %s (%s)", config.project_name, config.slug)
        scheduler = WaveScheduler(
            graph=self.graph,
            adapter=self.adapter,
            settings=self.settings,
            reporter=reporter,
            cancel_token=self.cancel_token,
        )
        await scheduler.run(config, state)
        partial = {sid: result.value for sid, result in state.completed_results().items()}

        if scheduler.aborted_reason:
            state.mark_completed(success=False, reason=scheduler.aborted_reason)
            return PipelineFailure(
                FailureKind.CONFIGURATION_INVALID, scheduler.aborted_reason, partial, state
            )

        if self.cancel_token.cancelled and not scheduler.deadline_exceeded:
            reason = self.cancel_token.reason
            state.mark_cancelled(reason)
            logger.warning("run cancelled; kept %d completed stages", len(partial))
            return PipelineFailure(FailureKind.CANCELLED, reason, partial, state)

        missing_required = [sid for sid in self.graph.required_stages if state.value(sid) is None]
        if missing_required:
            kind = (
                FailureKind.DEADLINE_EXCEEDED
                if scheduler.deadline_exceeded
                else FailureKind.REQUIRED_STAGE_MISSING
            )
            reason = f"Required stages produced no output: {', '.join(missing_required)}"
            state.mark_completed(success=False, reason=reason)
            return PipelineFailure(kind, reason, partial, state)

        artifact = self._assemble(config, state)
        state.mark_completed(success=True)
        logger.info(
            "site assembled in %.1fs, fallback stages: %s",
            state.duration_seconds or 0.0,
            ", ".join(artifact.fallback_stages) or "none",
        )
        return artifact

    async def stream(self, config: BusinessConfiguration) -> AsyncIterator[ProgressEvent | PipelineOutcome]:
        """Yield ProgressEvents as they happen, then the terminal outcome.

        Closing the iterator early cancels the run.
        """
        queue: asyncio.Queue = asyncio.Queue()
        done = object()
        unsubscribe = self.subscribe(queue.put_nowait)
        task = asyncio.ensure_future(self.generate(config))
        task.add_done_callback(lambda _: queue.put_nowait(done))
        try:
            while True:
                item = await queue.get()
                if item is done:
                    break
                yield item
            yield task.result()
        finally:
            unsubscribe()
            if not task.done():
                self.cancel("stream closed")
                await task

    def _dispatch(self, event: ProgressEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Progress listener failed for %s", event.stage_id)

    def _assemble(self, config: BusinessConfiguration, state: PipelineState) -> SiteArtifact:
        images: ImageSet | None = state.value("image_generator")
        seo: SEOMetadata | None = state.value("seo_generator")

        artifact = SiteArtifact(
            project_name=config.project_name,
            slug=config.slug,
            design_strategy=state.value("design_strategy"),
            section_plan=state.value("section_planner"),
            style_system=state.value("style_designer"),
            layout=state.value("layout_generator"),
            images=images,
            copy=state.value("copywriter"),
            seo_metadata=seo,
            fallback_stages=state.fallback_stages(),
            stage_results={
                sid: snapshot.result
                for sid, snapshot in state.snapshot().items()
                if snapshot.result is not None
            },
        )

        hero = artifact.hero_image
        if seo is not None and hero is not None and not hero.placeholder:
            artifact.seo_metadata = replace(seo, og_image=hero.url)
        return artifact

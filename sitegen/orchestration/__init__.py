"""Orchestration of the site generation pipeline."""

from sitegen.cancellation import CancellationToken
from sitegen.orchestration.graph import DependencyGraph, StageNode, build_default_graph
from sitegen.orchestration.orchestrator import (
    FailureKind,
    PipelineFailure,
    PipelineOrchestrator,
    SiteArtifact,
)
from sitegen.orchestration.progress import ProgressEvent, ProgressReporter
from sitegen.orchestration.scheduler import WaveScheduler
from sitegen.orchestration.sessions import GenerationSession, SessionRegistry
from sitegen.orchestration.state import PipelineState, PipelineStatus, StageState, StageStatus

__all__ = [
    # Graph and scheduling
    "CancellationToken",
    "DependencyGraph",
    "StageNode",
    "WaveScheduler",
    "build_default_graph",
    # State and progress
    "PipelineState",
    "PipelineStatus",
    "StageState",
    "StageStatus",
    "ProgressEvent",
    "ProgressReporter",
    # Orchestrator
    "FailureKind",
    "PipelineFailure",
    "PipelineOrchestrator",
    "SiteArtifact",
    # Sessions
    "GenerationSession",
    "SessionRegistry",
]

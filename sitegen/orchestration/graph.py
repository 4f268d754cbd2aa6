"""Static stage dependency graph and its partition into waves."""

from __future__ import annotations

from dataclasses import dataclass, field

from sitegen.errors import GraphError
from sitegen.stages import (
    BaseStage,
    CopywriterStage,
    DesignStrategyStage,
    ImageGeneratorStage,
    ImagePlannerStage,
    LayoutGeneratorStage,
    SectionPlannerStage,
    SEOGeneratorStage,
    StyleDesignerStage,
)


@dataclass
class StageNode:
    """A stage in the dependency graph."""

    stage: BaseStage
    depends_on: list[str] = field(default_factory=list)
    required: bool = False  # A run without this stage's output is a failure

    @property
    def stage_id(self) -> str:
        return self.stage.stage_id


class DependencyGraph:
    """Stages and their data dependencies.

    Waves are computed once, on first access, and the graph is frozen
    from then on.
    """

    def __init__(self) -> None:
        self.nodes: dict[str, StageNode] = {}
        self._waves: tuple[tuple[str, ...], ...] | None = None

    def add(
        self,
        stage: BaseStage,
        depends_on: list[str] | None = None,
        required: bool = False,
    ) -> StageNode:
        """Register a stage.

        Args:
            stage: The stage executor.
            depends_on: Stage ids whose outputs this stage consumes.
            required: Whether the site cannot be assembled without it.

        Returns:
            The new node.
        """
        if self._waves is not None:
            raise GraphError("Graph is frozen once waves have been computed")
        if stage.stage_id in self.nodes:
            raise GraphError(f"Duplicate stage: {stage.stage_id}")
        node = StageNode(stage=stage, depends_on=list(depends_on or []), required=required)
        self.nodes[stage.stage_id] = node
        return node

    @property
    def waves(self) -> tuple[tuple[str, ...], ...]:
        if self._waves is None:
            self._waves = self._build_waves()
        return self._waves

    @property
    def stage_ids(self) -> list[str]:
        return list(self.nodes)

    @property
    def required_stages(self) -> list[str]:
        return [sid for sid, node in self.nodes.items() if node.required]

    def dependencies(self, stage_id: str) -> list[str]:
        return list(self.nodes[stage_id].depends_on)

    def wave_of(self, stage_id: str) -> int:
        """Zero-based wave index of a stage."""
        for index, wave in enumerate(self.waves):
            if stage_id in wave:
                return index
        raise KeyError(stage_id)

    def _build_waves(self) -> tuple[tuple[str, ...], ...]:
        """Topological levels: wave n holds stages whose deps are all in waves < n."""
        for node in self.nodes.values():
            unknown = [dep for dep in node.depends_on if dep not in self.nodes]
            if unknown:
                raise GraphError(f"{node.stage_id} depends on unknown stages: {unknown}")

        waves: list[tuple[str, ...]] = []
        remaining = list(self.nodes)
        completed: set[str] = set()

        while remaining:
            # Registration order is kept inside a wave
            wave = tuple(
                sid for sid in remaining
                if all(dep in completed for dep in self.nodes[sid].depends_on)
            )
            if not wave:
                raise GraphError(f"Dependency cycle among: {', '.join(remaining)}")

            waves.append(wave)
            completed.update(wave)
            remaining = [sid for sid in remaining if sid not in completed]

        return tuple(waves)


def build_default_graph() -> DependencyGraph:
    """The site generation pipeline.

    Waves: (design_strategy, section_planner, style_designer),
    (layout_generator,), (image_planner, copywriter),
    (image_generator, seo_generator).
    """
    graph = DependencyGraph()
    graph.add(DesignStrategyStage())
    graph.add(SectionPlannerStage(), required=True)
    graph.add(StyleDesignerStage(), required=True)
    graph.add(LayoutGeneratorStage(), depends_on=["section_planner"], required=True)
    graph.add(ImagePlannerStage(), depends_on=["layout_generator", "style_designer"])
    graph.add(CopywriterStage(), depends_on=["section_planner", "layout_generator"], required=True)
    graph.add(ImageGeneratorStage(), depends_on=["image_planner"])
    graph.add(
        SEOGeneratorStage(),
        depends_on=["design_strategy", "layout_generator", "copywriter", "image_planner"],
    )
    return graph

"""Tests for the stage dependency graph."""

from __future__ import annotations

import pytest

from sitegen.errors import GraphError
from sitegen.orchestration import DependencyGraph, build_default_graph
from sitegen.stages import (
    CopywriterStage,
    DesignStrategyStage,
    LayoutGeneratorStage,
    SectionPlannerStage,
)


class TestDefaultGraph:
    """Tests for the site generation graph."""

    def test_waves(self):
        graph = build_default_graph()

        assert graph.waves == (
            ("design_strategy", "section_planner", "style_designer"),
            ("layout_generator",),
            ("image_planner", "copywriter"),
            ("image_generator", "seo_generator"),
        )

    def test_required_stages(self):
        graph = build_default_graph()

        assert graph.required_stages == [
            "section_planner",
            "style_designer",
            "layout_generator",
            "copywriter",
        ]

    def test_every_dependency_in_earlier_wave(self):
        graph = build_default_graph()

        for stage_id in graph.stage_ids:
            for dep in graph.dependencies(stage_id):
                assert graph.wave_of(dep) < graph.wave_of(stage_id)

    def test_stage_inputs_declared_as_dependencies(self):
        """A stage only reads outputs the graph makes it wait for."""
        graph = build_default_graph()

        for stage_id, node in graph.nodes.items():
            assert set(node.stage.inputs) <= set(node.depends_on)


class TestGraphValidation:
    """Tests for graph construction errors."""

    def test_unknown_dependency(self):
        graph = DependencyGraph()
        graph.add(LayoutGeneratorStage(), depends_on=["section_planner"])

        with pytest.raises(GraphError, match="unknown"):
            _ = graph.waves

    def test_cycle(self):
        graph = DependencyGraph()
        graph.add(SectionPlannerStage(), depends_on=["layout_generator"])
        graph.add(LayoutGeneratorStage(), depends_on=["section_planner"])

        with pytest.raises(GraphError, match="cycle"):
            _ = graph.waves

    def test_duplicate_stage(self):
        graph = DependencyGraph()
        graph.add(CopywriterStage())

        with pytest.raises(GraphError, match="Duplicate"):
            graph.add(CopywriterStage())

    def test_frozen_after_waves(self):
        graph = DependencyGraph()
        graph.add(SectionPlannerStage())
        _ = graph.waves

        with pytest.raises(GraphError, match="frozen"):
            graph.add(DesignStrategyStage())

    def test_wave_of_unknown(self):
        graph = DependencyGraph()

        with pytest.raises(KeyError):
            graph.wave_of("missing")

"""Tests for progress aggregation."""

from __future__ import annotations

import logging

from sitegen.orchestration import ProgressReporter, StageStatus


class TestAggregate:
    """Tests for the aggregate progress figure."""

    def test_mean_of_stage_progress(self):
        reporter = ProgressReporter(["a", "b", "c", "d"])

        reporter.on_stage_transition("a", StageStatus.COMPLETED, 100)
        reporter.on_stage_transition("b", StageStatus.RUNNING, 50)

        assert reporter.aggregate() == 38  # round(150 / 4)
        assert reporter.overall == 38

    def test_skipped_stages_excluded(self):
        reporter = ProgressReporter(["a", "b"])

        reporter.on_stage_transition("a", StageStatus.COMPLETED, 100)
        event = reporter.on_stage_transition("b", StageStatus.SKIPPED, 0)

        assert reporter.aggregate() == 100
        assert event.overall == 100

    def test_failed_counts_as_finished(self):
        reporter = ProgressReporter(["a"])

        event = reporter.on_stage_transition("a", StageStatus.FAILED, 10)

        assert event.progress == 100
        assert event.overall == 100

    def test_nothing_active(self):
        assert ProgressReporter([]).aggregate() == 0


class TestMonotonicity:
    """Reported progress never moves backwards."""

    def test_stage_progress_clamped(self):
        reporter = ProgressReporter(["a"])

        reporter.on_stage_transition("a", StageStatus.RUNNING, 80)
        event = reporter.on_stage_transition("a", StageStatus.RUNNING, 20)

        assert event.progress == 80

    def test_overall_clamped(self):
        """A late skip that would lower the mean does not lower what was reported."""
        reporter = ProgressReporter(["a", "b"])

        reporter.on_stage_transition("a", StageStatus.RUNNING, 90)
        reporter.on_stage_transition("b", StageStatus.RUNNING, 10)
        reporter.on_stage_transition("a", StageStatus.SKIPPED, 90)
        event = reporter.on_stage_transition("b", StageStatus.RUNNING, 20)

        assert reporter.aggregate() == 20
        assert event.overall == 50

        history = [e.overall for e in reporter.history]
        assert history == sorted(history)

    def test_out_of_range_values(self):
        reporter = ProgressReporter(["a"])

        assert reporter.on_stage_transition("a", StageStatus.RUNNING, -5).progress == 0
        assert reporter.on_stage_transition("a", StageStatus.RUNNING, 500).progress == 100


class TestListeners:
    """Tests for subscription."""

    def test_listener_receives_events(self):
        reporter = ProgressReporter(["a"])
        events = []
        reporter.subscribe(events.append)

        reporter.on_stage_transition("a", StageStatus.RUNNING, 10, "started")

        assert len(events) == 1
        assert events[0].stage_id == "a"
        assert events[0].message == "started"
        assert events[0].to_dict()["status"] == "running"

    def test_unsubscribe(self):
        reporter = ProgressReporter(["a"])
        events = []
        unsubscribe = reporter.subscribe(events.append)

        unsubscribe()
        unsubscribe()
        reporter.on_stage_transition("a", StageStatus.RUNNING, 10)

        assert events == []

    def test_failing_listener_isolated(self, caplog):
        reporter = ProgressReporter(["a"])
        events = []

        def broken(event):
            raise RuntimeError("listener bug")

        reporter.subscribe(broken)
        reporter.subscribe(events.append)

        with caplog.at_level(logging.ERROR):
            reporter.on_stage_transition("a", StageStatus.RUNNING, 10)

        assert len(events) == 1
        assert "Progress listener failed" in caplog.text

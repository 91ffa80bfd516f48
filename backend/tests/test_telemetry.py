"""
Tests for the telemetry hub and task metrics.
"""

from mowbot.core.coverage import Point
from mowbot.core.telemetry import DiagnosticKind, TaskMetrics, TelemetryHub


class TestTaskMetrics:
    def test_record_step(self):
        metrics = TaskMetrics()
        metrics.record_step(1.0)
        metrics.record_step(3.0)

        assert metrics.ticks_executed == 2
        assert metrics.last_step_ms == 3.0
        assert metrics.max_step_ms == 3.0
        assert metrics.mean_step_ms == 2.0

    def test_mean_without_steps(self):
        assert TaskMetrics().mean_step_ms == 0.0

    def test_to_dict_includes_mean(self):
        data = TaskMetrics().to_dict()
        assert data["mean_step_ms"] == 0.0
        assert "running_time" in data


class TestTelemetryHub:
    """Bounded buffers and diagnostic events."""

    def test_samples_grouped_by_time(self):
        hub = TelemetryHub()
        hub.record_sample(0.0, "a", 1)
        hub.record_sample(0.0, "b", 2)
        hub.record_sample(0.1, "a", 3)
        assert list(hub.samples) == [{"time": 0.0, "a": 1.0, "b": 2.0}, {"time": 0.1, "a": 3.0}]

    def test_samples_bounded(self):
        hub = TelemetryHub(history=5)
        for i in range(10):
            hub.record_sample(float(i), "x", i)
        assert len(hub.samples) == 5
        assert hub.samples[0]["time"] == 5.0

    def test_non_numeric_samples_dropped(self):
        hub = TelemetryHub()
        hub.record_sample(0.0, "flag", True)
        hub.record_sample(0.0, "inf", float("inf"))
        hub.record_sample(0.0, "text", "3")
        assert list(hub.samples) == []

    def test_console_bounded(self):
        hub = TelemetryHub(console_history=2)
        for line in ["a", "b", "c"]:
            hub.write_console(line)
        assert list(hub.console) == ["b", "c"]

    def test_watch_keys_bounded(self):
        hub = TelemetryHub(watch_limit=3)
        for i in range(10):
            hub.set_watch(f"k{i}", i)
        hub.set_watch("k0", "updated")

        assert hub.watches == {"k0": "updated", "k1": 1, "k2": 2}

        event = hub.emit(DiagnosticKind.PERIODIC, TaskMetrics())
        assert len(event.watches) == 3

    def test_watch_limit_from_config(self):
        from mowbot.config import get_settings
        assert TelemetryHub().watch_limit == get_settings().brain.WATCH_LIMIT

    def test_emit_snapshots_watches(self):
        hub = TelemetryHub()
        hub.set_watch("task", "MOWING")
        event = hub.emit(DiagnosticKind.ALERT, TaskMetrics(fault_count=1), "boom")
        hub.set_watch("task", "IDLE")

        assert event.watches == {"task": "MOWING"}
        assert event.to_dict()["kind"] == "ALERT"
        assert event.to_dict()["message"] == "boom"
        assert event.metrics["fault_count"] == 1

    def test_clear_diagnostics(self):
        hub = TelemetryHub()
        hub.emit(DiagnosticKind.STOP, TaskMetrics())
        hub.clear_diagnostics()
        assert len(hub.diagnostics) == 0

    def test_reset_keeps_diagnostics(self):
        hub = TelemetryHub()
        hub.write_console("x")
        hub.set_watch("k", 1)
        hub.emit(DiagnosticKind.STOP, TaskMetrics())
        hub.reset()

        assert list(hub.console) == []
        assert hub.watches == {}
        assert len(hub.diagnostics) == 1

    def test_snapshot(self):
        hub = TelemetryHub()
        hub.draw_text(1.0, 2.0, 3.0, "hi")
        hub.draw_path([Point(0.0, 1.0)])
        snapshot = hub.snapshot()

        assert snapshot["debug"]["text"] == {"x": 1.0, "y": 2.0, "z": 3.0, "message": "hi"}
        assert snapshot["debug"]["path"] == [{"x": 0.0, "z": 1.0}]

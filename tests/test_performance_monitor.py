"""
Tests for Performance Monitor
==============================
"""

import time

import pytest

from handpose.modules.utils.performance_monitor import PerformanceMonitor


class TestPerformanceMonitor:
    """Test suite for stage latency and tick rate tracking."""

    def test_measure_records_stage(self):
        monitor = PerformanceMonitor()
        with monitor.measure("smoothing"):
            time.sleep(0.002)
        assert monitor.get_stage_latency("smoothing") >= 1.0

    def test_measure_records_on_exception(self):
        monitor = PerformanceMonitor()
        with pytest.raises(RuntimeError):
            with monitor.measure("frame_build"):
                raise RuntimeError("stage failed")
        assert "frame_build" in monitor.get_all_latencies()

    def test_unknown_stage_is_zero(self):
        assert PerformanceMonitor().get_stage_latency("missing") == 0.0

    def test_rolling_window(self):
        monitor = PerformanceMonitor(window_size=3)
        for value in (100.0, 1.0, 2.0, 3.0):
            monitor.record("stage", value)
        assert monitor.get_stage_latency("stage") == pytest.approx(2.0)

    def test_over_budget(self):
        monitor = PerformanceMonitor(frame_budget_ms=1.0)
        monitor.record("stage", 0.5)
        monitor.record("stage", 1.5)
        monitor.record("stage", 3.0)
        assert monitor.over_budget_count == 2

    def test_fps_needs_two_intervals(self):
        monitor = PerformanceMonitor()
        monitor.tick()
        time.sleep(0.001)
        monitor.tick()
        assert monitor.fps == 0.0
        time.sleep(0.001)
        monitor.tick()
        assert 0.0 < monitor.fps < 1000.0

    def test_report(self):
        monitor = PerformanceMonitor()
        monitor.record("smoothing", 0.25)
        monitor.tick()
        report = monitor.get_report()
        assert report["total_ticks"] == 1
        assert report["latencies_ms"] == {"smoothing": 0.25}
        assert set(report) == {"fps", "total_ticks", "over_budget", "uptime_seconds", "latencies_ms", "p95_ms"}
        monitor.print_report()

    def test_reset(self):
        monitor = PerformanceMonitor()
        monitor.record("stage", 5.0)
        monitor.tick()
        monitor.reset()
        assert monitor.get_all_latencies() == {}
        assert monitor.over_budget_count == 0
        assert monitor.get_report()["total_ticks"] == 0

    def test_p95_tracks_tail(self):
        monitor = PerformanceMonitor()
        for _ in range(19):
            monitor.record("stage", 1.0)
        monitor.record("stage", 21.0)
        report = monitor.get_report()
        assert report["latencies_ms"]["stage"] == pytest.approx(2.0)
        assert 1.0 < report["p95_ms"]["stage"] <= 21.0

"""
Per-stage latency tracking for the pose pipeline.

Detector callbacks (``frame_build``) and render ticks (``smoothing``)
record from different threads, so every window is guarded by one lock.
Stage samples are compared against a per-frame budget; the pose math is
expected to stay well under a millisecond.
"""

import time
import logging
import threading
from collections import deque
from contextlib import contextmanager

import numpy as np

logger = logging.getLogger(__name__)


class _StageWindow:
    """Rolling latency samples of one stage (ms)."""

    __slots__ = ("samples", "over_budget")

    def __init__(self, size: int):
        self.samples = deque(maxlen=size)
        self.over_budget = 0

    def mean(self) -> float:
        return float(np.mean(self.samples)) if self.samples else 0.0

    def percentile(self, q: float) -> float:
        return float(np.percentile(self.samples, q)) if self.samples else 0.0


class PerformanceMonitor:
    """Render tick rate plus rolling per-stage latency against a budget."""

    def __init__(self, window_size=100, frame_budget_ms=1.0):
        self._window_size = window_size
        self._budget_ms = frame_budget_ms
        self._lock = threading.Lock()
        self._stages = {}
        self._intervals = deque(maxlen=window_size)
        self._last_tick = None
        self._ticks = 0
        self._started = time.time()

    @contextmanager
    def measure(self, stage_name: str):
        """Time the ``with`` body as one sample of ``stage_name``, even if it raises."""
        start = time.perf_counter()
        try:
            yield
        finally:
            self.record(stage_name, (time.perf_counter() - start) * 1000.0)

    def record(self, stage_name: str, elapsed_ms: float):
        late = elapsed_ms > self._budget_ms
        with self._lock:
            window = self._stages.get(stage_name)
            if window is None:
                window = self._stages[stage_name] = _StageWindow(self._window_size)
            window.samples.append(elapsed_ms)
            if late:
                window.over_budget += 1
        if late:
            logger.debug("Stage '%s' over budget: %.3fms > %.2fms",
                         stage_name, elapsed_ms, self._budget_ms)

    def tick(self):
        """Mark one render tick."""
        now = time.perf_counter()
        with self._lock:
            if self._last_tick is not None:
                self._intervals.append(now - self._last_tick)
            self._last_tick = now
            self._ticks += 1

    @property
    def fps(self) -> float:
        """Ticks per second over the rolling window (0 until two intervals exist)."""
        with self._lock:
            if len(self._intervals) < 2:
                return 0.0
            mean_interval = float(np.mean(self._intervals))
        return 1.0 / mean_interval if mean_interval > 0 else 0.0

    def get_stage_latency(self, stage_name: str) -> float:
        """Mean latency of a stage in ms (0.0 if never recorded)."""
        with self._lock:
            window = self._stages.get(stage_name)
            return window.mean() if window else 0.0

    def get_all_latencies(self) -> dict:
        with self._lock:
            return {name: window.mean() for name, window in self._stages.items()}

    @property
    def over_budget_count(self) -> int:
        with self._lock:
            return sum(window.over_budget for window in self._stages.values())

    def get_report(self) -> dict:
        with self._lock:
            p95 = {name: round(window.percentile(95), 3) for name, window in self._stages.items()}
        return {
            "fps": round(self.fps, 1),
            "total_ticks": self._ticks,
            "over_budget": self.over_budget_count,
            "uptime_seconds": round(time.time() - self._started, 1),
            "latencies_ms": {name: round(ms, 3) for name, ms in self.get_all_latencies().items()},
            "p95_ms": p95,
        }

    def print_report(self):
        report = self.get_report()
        logger.info("=" * 60)
        logger.info("POSE PIPELINE PERFORMANCE")
        logger.info("=" * 60)
        logger.info("Render rate:    %.1f ticks/s (%d ticks)", report["fps"], report["total_ticks"])
        logger.info("Over budget:    %d samples > %.2fms", report["over_budget"], self._budget_ms)
        logger.info("Uptime:         %.1fs", report["uptime_seconds"])
        logger.info("-" * 40)
        logger.info("%-18s %9s %9s", "stage", "mean ms", "p95 ms")
        for stage, mean_ms in report["latencies_ms"].items():
            logger.info("%-18s %9.3f %9.3f", stage, mean_ms, report["p95_ms"][stage])
        logger.info("=" * 60)

    def reset(self):
        with self._lock:
            self._stages.clear()
            self._intervals.clear()
            self._last_tick = None
            self._ticks = 0
            self._started = time.time()

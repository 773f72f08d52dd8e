"""
Tests for Event Bus and Logging Utilities
==========================================
"""

import logging

import pytest

from conftest import make_hand
from handpose.core.events import EventBus, Events
from handpose.core.pipeline import FrameOrchestrator
from handpose.modules.utils.logger import InteractionLogger, log_timing, setup_logging


class TestEventBus:
    """Test suite for publish/subscribe."""

    def test_singleton(self):
        assert EventBus() is EventBus()

    def test_emit_passes_kwargs(self):
        bus = EventBus()
        received = []
        bus.subscribe("custom", lambda **kw: received.append(kw))
        bus.emit("custom", a=1, b="two")
        assert received == [{"a": 1, "b": "two"}]

    def test_priority_order(self):
        bus = EventBus()
        order = []
        bus.subscribe("ordered", lambda **kw: order.append("low"), priority=0)
        bus.subscribe("ordered", lambda **kw: order.append("high"), priority=10)
        bus.emit("ordered")
        assert order == ["high", "low"]

    def test_equal_priority_keeps_subscription_order(self):
        bus = EventBus()
        order = []
        for label in ("first", "second", "third"):
            bus.subscribe("ordered", lambda _label=label, **kw: order.append(_label))
        assert bus.emit("ordered") == 3
        assert order == ["first", "second", "third"]

    def test_unsubscribe(self):
        bus = EventBus()
        received = []

        def handler(**kwargs):
            received.append(kwargs)

        bus.subscribe("custom", handler)
        assert bus.unsubscribe("custom", handler)
        assert not bus.unsubscribe("custom", handler)
        assert bus.emit("custom", x=1) == 0
        assert received == []

    def test_handler_errors_are_isolated(self, caplog):
        bus = EventBus()
        received = []

        def broken(**kwargs):
            raise ValueError("boom")

        bus.subscribe("custom", broken, priority=1)
        bus.subscribe("custom", lambda **kw: received.append(kw))
        with caplog.at_level(logging.ERROR):
            assert bus.emit("custom", x=1) == 1
        assert received == [{"x": 1}]
        assert "boom" in caplog.text

    def test_disabled_bus(self):
        bus = EventBus()
        received = []
        bus.subscribe("custom", lambda **kw: received.append(kw))
        bus.set_enabled(False)
        bus.emit("custom")
        assert received == []
        assert bus.get_history() == []

    def test_history(self):
        bus = EventBus()
        for i in range(5):
            bus.emit("tick", index=i)
        history = bus.get_history(last_n=2)
        assert len(history) == 2
        assert history[-1].name == "tick"
        assert history[-1].data_keys == ("index",)

    def test_clear_and_count(self):
        bus = EventBus()
        bus.subscribe("a", lambda **kw: None)
        bus.subscribe("b", lambda **kw: None)
        assert bus.listener_count == 2
        bus.clear("a")
        assert bus.listener_count == 1
        bus.clear()
        assert bus.listener_count == 0


class TestInteractionLogger:
    """Test suite for interaction event recording."""

    def test_records_pipeline_events(self):
        bus = EventBus()
        interaction_log = InteractionLogger()
        interaction_log.attach(bus)

        orchestrator = FrameOrchestrator(event_bus=bus)
        orchestrator.on_results([make_hand(pinch=0.01)])
        orchestrator.on_results([make_hand(pinch=0.2)])
        orchestrator.on_results([])
        orchestrator.pause()

        assert interaction_log.count(Events.HAND_DETECTED) == 1
        assert interaction_log.count(Events.PINCH_STARTED) == 1
        assert interaction_log.count(Events.PINCH_RELEASED) == 1
        assert interaction_log.count(Events.HAND_LOST) == 1
        assert interaction_log.count(Events.TRACKING_PAUSED) == 1
        assert interaction_log.total_events == 5

    def test_history_limit(self):
        interaction_log = InteractionLogger(max_history=3)
        for i in range(5):
            interaction_log.log_event("custom", index=i)
        history = interaction_log.get_history()
        assert len(history) == 3
        assert history[0].details == {"index": 2}
        assert interaction_log.count("custom") == 5
        assert len(interaction_log.get_history(last_n=1)) == 1

    def test_world_scale_not_tracked(self):
        assert Events.WORLD_SCALE_CHANGED not in InteractionLogger.TRACKED_EVENTS


class TestLoggingHelpers:
    """Test suite for logging setup and timing."""

    @pytest.fixture
    def restore_root_logger(self):
        root = logging.getLogger()
        handlers, level = list(root.handlers), root.level
        yield
        for handler in root.handlers:
            handler.close()
        root.handlers[:] = handlers
        root.setLevel(level)

    def test_setup_console_only(self, restore_root_logger):
        root = setup_logging(level="debug")
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1

    def test_setup_with_file(self, tmp_path, restore_root_logger):
        log_file = tmp_path / "logs" / "handpose.log"
        root = setup_logging(level="INFO", log_file=str(log_file), max_size_mb=1, backup_count=1)
        logging.getLogger("handpose.test").warning("written to file")
        for handler in root.handlers:
            handler.flush()
        assert log_file.exists()
        assert "written to file" in log_file.read_text()

    def test_unknown_level_defaults_to_info(self, restore_root_logger):
        assert setup_logging(level="chatty").level == logging.INFO

    def test_log_timing_preserves_result(self, caplog):
        @log_timing
        def add(a, b):
            return a + b

        with caplog.at_level(logging.DEBUG):
            assert add(2, 3) == 5
        assert add.__name__ == "add"
        assert "add took" in caplog.text

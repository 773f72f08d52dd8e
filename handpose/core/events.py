"""
Event bus for hand interaction notifications.

The orchestrator announces state transitions (hand enter/exit, pinch,
sleep mode, viewport changes). The renderer, tutorial overlays and the
interaction logger listen without the pipeline importing any of them.

Usage:
    bus = EventBus()
    bus.subscribe(Events.PINCH_STARTED, on_grab)
    bus.emit(Events.PINCH_STARTED, position=(0.0, 1.2, 0.0))
"""

import time
import logging
import itertools
import threading
from collections import deque, namedtuple
from typing import Callable, Dict, List

logger = logging.getLogger(__name__)

EventRecord = namedtuple("EventRecord", ["name", "timestamp", "data_keys"])

_Listener = namedtuple("_Listener", ["priority", "seq", "callback"])


def _callback_name(callback) -> str:
    return getattr(callback, "__name__", repr(callback))


class EventBus:
    """Synchronous pub/sub shared by the whole application.

    Listeners run on the emitting thread, highest priority first and in
    subscription order within one priority. A listener that raises is
    logged and skipped; the remaining listeners still run.
    """

    _instance = None
    HISTORY_SIZE = 100

    def __new__(cls):
        if cls._instance is None:
            bus = super().__new__(cls)
            bus._lock = threading.Lock()
            bus._listeners: Dict[str, List[_Listener]] = {}
            bus._seq = itertools.count()
            bus._history = deque(maxlen=cls.HISTORY_SIZE)
            bus._enabled = True
            cls._instance = bus
        return cls._instance

    def subscribe(self, event_name: str, callback: Callable, priority: int = 0) -> Callable:
        """Register ``callback(**payload)``; returns it for a later unsubscribe."""
        with self._lock:
            listeners = self._listeners.setdefault(event_name, [])
            listeners.append(_Listener(priority, next(self._seq), callback))
            listeners.sort(key=lambda entry: (-entry.priority, entry.seq))
        logger.debug("Listener %s added for '%s' (priority=%d)",
                     _callback_name(callback), event_name, priority)
        return callback

    def unsubscribe(self, event_name: str, callback: Callable) -> bool:
        """Remove ``callback``; True if it was registered."""
        with self._lock:
            listeners = self._listeners.get(event_name, [])
            kept = [entry for entry in listeners if entry.callback is not callback]
            if kept:
                self._listeners[event_name] = kept
            else:
                self._listeners.pop(event_name, None)
        return len(kept) != len(listeners)

    def emit(self, event_name: str, **payload) -> int:
        """Deliver ``payload`` to every listener of ``event_name``.

        Returns:
            Number of listeners that completed without raising
        """
        if not self._enabled:
            return 0

        with self._lock:
            listeners = tuple(self._listeners.get(event_name, ()))
            self._history.append(EventRecord(event_name, time.time(), tuple(payload)))

        delivered = 0
        for entry in listeners:
            try:
                entry.callback(**payload)
            except Exception as e:
                logger.error("Listener %s failed on '%s': %s",
                             _callback_name(entry.callback), event_name, e)
            else:
                delivered += 1
        return delivered

    def set_enabled(self, enabled: bool):
        """Mute (False) or unmute the bus; muted emits are not recorded."""
        self._enabled = bool(enabled)

    def clear(self, event_name: str = None):
        with self._lock:
            if event_name is None:
                self._listeners.clear()
            else:
                self._listeners.pop(event_name, None)

    @property
    def listener_count(self) -> int:
        with self._lock:
            return sum(len(entries) for entries in self._listeners.values())

    def get_history(self, last_n: int = 10) -> List[EventRecord]:
        with self._lock:
            return list(self._history)[-last_n:]

    def reset(self):
        """Drop listeners and history, unmute (for testing)."""
        with self._lock:
            self._listeners.clear()
            self._history.clear()
        self._enabled = True


class Events:
    """Names of the events emitted by the frame orchestrator."""

    # Primary / secondary hand presence
    HAND_DETECTED = "hand_detected"
    HAND_LOST = "hand_lost"
    SECOND_HAND_DETECTED = "second_hand_detected"
    SECOND_HAND_LOST = "second_hand_lost"

    # Grab gesture
    PINCH_STARTED = "pinch_started"
    PINCH_RELEASED = "pinch_released"

    # Sleep mode and viewport
    TRACKING_PAUSED = "tracking_paused"
    TRACKING_RESUMED = "tracking_resumed"
    WORLD_SCALE_CHANGED = "world_scale_changed"

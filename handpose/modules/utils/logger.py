"""
Logging configuration plus a recorder for hand interaction events.
"""

import os
import time
import logging
import logging.handlers
from collections import Counter, deque, namedtuple
from functools import wraps

from handpose.core.events import Events

CONSOLE_FORMAT = "%(asctime)s  %(levelname)-5s  %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
DATE_FORMAT = "%H:%M:%S"

InteractionRecord = namedtuple("InteractionRecord", ["timestamp", "event", "details"])


def _rotating_file_handler(path, max_size_mb, backup_count):
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        path, maxBytes=int(max_size_mb * 1024 * 1024), backupCount=backup_count)
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))
    return handler


def setup_logging(level="INFO", log_file=None, max_size_mb=10, backup_count=3):
    """Reset the root logger to a console handler and, if ``log_file`` is
    given, a rotating DEBUG file. Unknown level names fall back to INFO."""
    root = logging.getLogger()
    resolved = logging.getLevelName(str(level).upper())
    root.setLevel(resolved if isinstance(resolved, int) else logging.INFO)

    for handler in list(root.handlers):
        root.removeHandler(handler)

    console = logging.StreamHandler()
    console.setLevel(logging.INFO)
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT))
    root.addHandler(console)

    if log_file:
        root.addHandler(_rotating_file_handler(log_file, max_size_mb, backup_count))
    return root


class InteractionLogger:
    """Keeps a bounded trail of interaction events heard on the bus
    (hands entering or leaving, pinches, sleep and wake)."""

    TRACKED_EVENTS = (
        Events.HAND_DETECTED,
        Events.HAND_LOST,
        Events.SECOND_HAND_DETECTED,
        Events.SECOND_HAND_LOST,
        Events.PINCH_STARTED,
        Events.PINCH_RELEASED,
        Events.TRACKING_PAUSED,
        Events.TRACKING_RESUMED,
    )

    def __init__(self, max_history: int = 500):
        self.logger = logging.getLogger("handpose.interaction")
        self._records = deque(maxlen=max_history)
        self._counts = Counter()

    def attach(self, bus):
        for event_name in self.TRACKED_EVENTS:
            bus.subscribe(event_name, self._listener_for(event_name))

    def _listener_for(self, event_name):
        def on_event(**payload):
            self.log_event(event_name, **payload)
        on_event.__name__ = "record_" + event_name
        return on_event

    def log_event(self, event_name, **details):
        self._records.append(InteractionRecord(time.time(), event_name, details))
        self._counts[event_name] += 1
        summary = " ".join("%s=%s" % item for item in details.items())
        self.logger.info("%s %s", event_name, summary)

    def count(self, event_name) -> int:
        """Occurrences of ``event_name`` since creation, including ones already
        dropped from the bounded history."""
        return self._counts[event_name]

    def get_history(self, last_n=None):
        records = list(self._records)
        return records[-last_n:] if last_n else records

    @property
    def total_events(self) -> int:
        return sum(self._counts.values())


def log_timing(func):
    """Log the wall time of each call at DEBUG."""
    timing_logger = logging.getLogger(func.__module__)

    @wraps(func)
    def wrapper(*args, **kwargs):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            timing_logger.debug("%s took %.3fms", func.__name__,
                                (time.perf_counter() - start) * 1000.0)

    return wrapper

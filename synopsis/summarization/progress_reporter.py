"""
Best-effort progress reporting for a summarization run.

Progress is heuristic: the engine reports coarse milestones at fixed points
(chunk loop 10-60%, model load 15/50%, combine rounds 60-85%, final 85-100%).
Events are fire-and-forget:
- each distinct milestone is delivered at most once
- no acknowledgement is expected from the sink
- events are dropped when no sink is attached
- a sink that raises is logged and otherwise ignored

Usage:
    reporter = ProgressReporter(lambda pct, msg: print(pct, msg))
    reporter.report(10, "Processing 6 chunks...")
    reporter.report(None, "Waiting for model...")   # indeterminate

    # UI queue: receives ('progress', (percent, message))
    reporter = ProgressReporter.to_queue(ui_queue)
"""

import threading
from dataclasses import dataclass
from queue import Queue
from typing import Callable

from synopsis.logging_config import debug_log

ProgressSink = Callable[[int | None, str], None]


@dataclass(frozen=True)
class ProgressEvent:
    """
    One progress update.

    Attributes:
        percent: 0-100, or None when progress is indeterminate.
        message: Human-readable status line.
    """
    percent: int | None
    message: str


class ProgressReporter:
    """
    Delivers ProgressEvents to an optional sink.

    Thread-safe: the local worker's dispatcher thread may report model-load
    milestones while the engine reports from the caller's thread.

    Attributes:
        last_event: Most recent delivered event (last value wins).
    """

    def __init__(self, sink: ProgressSink | None = None):
        self.sink = sink
        self.last_event: ProgressEvent | None = None
        self._delivered: set[ProgressEvent] = set()
        self._lock = threading.Lock()

    @classmethod
    def to_queue(cls, ui_queue: Queue) -> "ProgressReporter":
        """Build a reporter posting ('progress', (percent, message)) onto a UI queue."""
        return cls(lambda percent, message: ui_queue.put(('progress', (percent, message))))

    def report(self, percent: float | None, message: str) -> None:
        """
        Emit a milestone.

        Args:
            percent: Completion percentage (clamped to 0-100), or None.
            message: Status text.
        """
        if percent is not None:
            percent = max(0, min(100, int(percent)))
        event = ProgressEvent(percent, message)

        with self._lock:
            if event in self._delivered:
                return
            self._delivered.add(event)
            self.last_event = event

        if self.sink is None:
            return

        try:
            self.sink(event.percent, event.message)
        except Exception as e:
            debug_log(f"[PROGRESS] Sink failed for {event}: {e}")

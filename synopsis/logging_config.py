"""
Unified Logging for Synopsis

Two sinks, one import:
- LOGS_DIR/debug_flow.txt: every debug_log() line, tagged with the pid so the
  caller and the local inference worker process can share one trace
- LOGS_DIR/processing.log: standard logging records from info() and above

In DEBUG_MODE both also echo to the console.

    from synopsis.logging_config import debug_log, info, warning, error, Timer

    debug_log("[REDUCE] Round 2: 6 summaries -> 2 groups")
    with Timer("Summarize"):
        ...

Prefix messages with a bracketed component tag ("[REDUCE]", "[WORKER]", "[HTTP]").
"""

import logging
import os
import sys
import threading
import time
from datetime import datetime

from synopsis.config import DEBUG_FLOW_FILE, DEBUG_MODE, LOG_DATE_FORMAT, LOG_FILE, LOG_FORMAT


class _FlowFile:
    """
    Append-only debug trace shared by every process of one run.

    Opened lazily on first write, so importing this module in the spawned
    worker costs nothing until the worker logs.
    """

    def __init__(self, path):
        self.path = path
        self._handle = None
        self._closed = False
        self._lock = threading.Lock()

    def write(self, message: str):
        with self._lock:
            if self._closed:
                return
            if self._handle is None and not self._open():
                return
            timestamp = datetime.now().strftime("%H:%M:%S.%f")[:-3]
            self._handle.write(f"[{timestamp}] [pid {os.getpid()}] {message}\n")
            self._handle.flush()

    def close(self):
        with self._lock:
            if self._handle is not None:
                self._handle.write(f"=== Session ended {datetime.now().isoformat()} (pid {os.getpid()}) ===\n\n")
                self._handle.close()
                self._handle = None
            self._closed = True

    def _open(self) -> bool:
        try:
            self._handle = open(self.path, 'a', encoding='utf-8')
        except OSError:
            self._closed = True
            return False
        self._handle.write(
            f"=== Synopsis session {datetime.now().isoformat()} "
            f"(pid {os.getpid()}, DEBUG_MODE={DEBUG_MODE}) ===\n"
        )
        return True


def _build_logger() -> logging.Logger:
    logger = logging.getLogger('Synopsis')
    logger.setLevel(logging.DEBUG if DEBUG_MODE else logging.INFO)
    if logger.handlers:
        return logger

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    handlers = []
    try:
        handlers.append(logging.FileHandler(LOG_FILE, encoding='utf-8'))
    except OSError:
        pass  # Read-only log dir; the flow file and console still work
    if DEBUG_MODE:
        handlers.append(logging.StreamHandler(sys.stderr))

    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    return logger


_flow_file = _FlowFile(DEBUG_FLOW_FILE)
_logger = _build_logger()


def _format_duration(seconds: float) -> str:
    if seconds < 1:
        return f"{seconds * 1000:.0f} ms"
    if seconds < 60:
        return f"{seconds:.2f}s"
    return f"{seconds / 60:.1f}m"


def debug_log(message: str):
    """
    Write a trace line to debug_flow.txt (and stderr in DEBUG_MODE).

    Args:
        message: Text to log, prefixed with a [COMPONENT] tag.
    """
    _flow_file.write(message)

    if DEBUG_MODE:
        line = f"[{datetime.now().strftime('%H:%M:%S.%f')[:-3]}] {message}\n"
        try:
            sys.stderr.write(line)
        except UnicodeEncodeError:
            sys.stderr.buffer.write(line.encode('utf-8', errors='replace'))
        sys.stderr.flush()


def debug(message: str):
    """Alias for debug_log."""
    debug_log(message)


def info(message: str):
    _flow_file.write(f"[INFO] {message}")
    _logger.info(message)


def warning(message: str):
    _flow_file.write(f"[WARNING] {message}")
    _logger.warning(message)


def error(message: str, exc_info: bool = False):
    """
    Log an error.

    Args:
        message: Error description.
        exc_info: Attach the active exception's traceback (DEBUG_MODE only).
    """
    _flow_file.write(f"[ERROR] {message}")
    _logger.error(message, exc_info=exc_info and DEBUG_MODE)


def critical(message: str, exc_info: bool = True):
    _flow_file.write(f"[CRITICAL] {message}")
    _logger.critical(message, exc_info=exc_info and DEBUG_MODE)


def debug_timing(operation: str, elapsed_seconds: float):
    """
    Log how long an operation took.

    Example:
        start = time.time()
        summaries = engine.summarize(...)
        debug_timing("[REDUCE] Hierarchical summary", time.time() - start)
        # -> "[REDUCE] Hierarchical summary took 2.34s"
    """
    debug_log(f"{operation} took {_format_duration(elapsed_seconds)}")


class Timer:
    """
    Context manager that logs the duration of a block.

    Usage:
        with Timer("Summarize") as timer:
            summary = engine.summarize(text, backend, budget)
        timer.elapsed  # seconds

    Attributes:
        operation_name: Label used in the log line.
        elapsed: Seconds spent in the block (None until it exits).
    """

    def __init__(self, operation_name: str):
        self.operation_name = operation_name
        self.elapsed: float | None = None
        self._start = None

    def __enter__(self):
        debug_log(f"Starting {self.operation_name}...")
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.elapsed = time.perf_counter() - self._start
        outcome = "failed after" if exc_type else "took"
        debug_log(f"{self.operation_name} {outcome} {_format_duration(self.elapsed)}")
        return False


def close_debug_log():
    """Close debug_flow.txt. Later debug_log() calls are dropped."""
    _flow_file.close()


__all__ = [
    'debug_log',
    'debug',
    'info',
    'warning',
    'error',
    'critical',
    'debug_timing',
    'Timer',
    'close_debug_log',
    'DEBUG_MODE',
]

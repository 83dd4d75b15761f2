"""
Local Worker Lifecycle
Brings up at most one local inference worker and proves it is responsive
before any summarization request is sent to it.

States:
    ABSENT   -> no worker (initial, or after a failed creation)
    CREATING -> one caller is spawning and handshaking; others wait on it
    READY    -> worker answered a ping; requests may be sent

ensure() is single-flight: concurrent callers during CREATING share the same
creation outcome, so exactly one worker is spawned. Readiness is a ping
handshake (every WORKER_PING_INTERVAL_SECONDS, up to WORKER_READY_TIMEOUT_SECONDS);
a worker that never answers raises WorkerInitTimeout and is torn down.

Hosts decide where the worker runs:
- ProcessWorkerHost: separate process (spawn context), the default
- ThreadWorkerHost: daemon thread in this process (SYNOPSIS_WORKER_MODE=thread, tests)
"""

import itertools
import multiprocessing
import queue
import threading
import time
from abc import ABC, abstractmethod
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FuturesTimeoutError
from enum import Enum

from synopsis.ai.inference_worker import TERMINATE, inference_worker_process
from synopsis.config import (
    LOCAL_WORKER_MODE,
    QUEUE_TIMEOUT_SECONDS,
    WORKER_PING_INTERVAL_SECONDS,
    WORKER_READY_TIMEOUT_SECONDS,
)
from synopsis.errors import BackendUnavailableError, WorkerInitTimeout
from synopsis.logging_config import debug_log, info, warning


class WorkerState(Enum):
    ABSENT = "absent"
    CREATING = "creating"
    READY = "ready"


class WorkerSession:
    """
    Request/response channel to one running worker.

    A dispatcher thread reads the response queue and resolves the pending
    request with the matching id. Progress messages go to that request's
    on_progress callback instead.
    """

    def __init__(self, request_queue, response_queue, handle=None):
        self.request_queue = request_queue
        self.response_queue = response_queue
        self.handle = handle
        self._pending = {}
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._closed = threading.Event()
        self._dispatcher = threading.Thread(
            target=self._dispatch_loop, name="synopsis-worker-dispatch", daemon=True
        )
        self._dispatcher.start()

    def is_alive(self) -> bool:
        if self._closed.is_set():
            return False
        return self.handle is None or self.handle.is_alive()

    def request(self, payload: dict, timeout: float, on_progress=None) -> dict:
        """
        Send one request and block for its response.

        Raises:
            concurrent.futures.TimeoutError: No response within timeout.
        """
        request_id = next(self._ids)
        future = Future()
        with self._lock:
            self._pending[request_id] = (future, on_progress)

        self.request_queue.put({**payload, 'id': request_id})
        try:
            return future.result(timeout=timeout)
        finally:
            with self._lock:
                self._pending.pop(request_id, None)

    def close(self):
        """Ask the worker to exit and stop dispatching."""
        if self._closed.is_set():
            return
        self._closed.set()
        self.request_queue.put(TERMINATE)

        if self.handle is not None:
            self.handle.join(timeout=QUEUE_TIMEOUT_SECONDS * 2)
            if self.handle.is_alive() and hasattr(self.handle, 'terminate'):
                warning("Local worker did not exit after TERMINATE; killing it")
                self.handle.terminate()

    def _dispatch_loop(self):
        while not self._closed.is_set():
            try:
                message = self.response_queue.get(timeout=QUEUE_TIMEOUT_SECONDS)
            except queue.Empty:
                continue
            except (EOFError, OSError) as e:
                debug_log(f"[WORKER SESSION] Response queue closed: {e}")
                break
            self._dispatch(message)

    def _dispatch(self, message: dict):
        request_id = message.get('id')
        with self._lock:
            entry = self._pending.get(request_id)

        if entry is None:
            # Late answer to a ping or a timed-out request
            debug_log(f"[WORKER SESSION] Dropping response for finished request #{request_id}")
            return

        future, on_progress = entry
        if message.get('type') == 'progress':
            if on_progress:
                on_progress(message.get('progress'), message.get('status', ''))
            return

        if not future.done():
            future.set_result(message)


class WorkerHost(ABC):
    """Environment facility that hosts the local worker."""

    def __init__(self):
        self._session = None

    def find_live_worker(self) -> WorkerSession | None:
        """Return the worker this host already runs, if it is still alive."""
        if self._session is not None and self._session.is_alive():
            return self._session
        return None

    def spawn_worker(self) -> WorkerSession:
        """Start a new worker and return its (not yet handshaken) session."""
        self._session = self._start()
        return self._session

    @abstractmethod
    def _start(self) -> WorkerSession:
        pass


class ProcessWorkerHost(WorkerHost):
    """Runs the worker in a child process started with the spawn method."""

    def _start(self):
        ctx = multiprocessing.get_context('spawn')
        request_queue = ctx.Queue()
        response_queue = ctx.Queue()
        process = ctx.Process(
            target=inference_worker_process,
            args=(request_queue, response_queue),
            name="synopsis-inference-worker",
            daemon=True,
        )
        process.start()
        debug_log(f"[LIFECYCLE] Spawned worker process pid={process.pid}")
        return WorkerSession(request_queue, response_queue, handle=process)


class ThreadWorkerHost(WorkerHost):
    """Runs the worker loop on a daemon thread in this process."""

    def __init__(self, pipeline_factory=None, worker_target=inference_worker_process):
        super().__init__()
        self.pipeline_factory = pipeline_factory
        self.worker_target = worker_target

    def _start(self):
        request_queue = queue.Queue()
        response_queue = queue.Queue()
        thread = threading.Thread(
            target=self.worker_target,
            args=(request_queue, response_queue, self.pipeline_factory),
            name="synopsis-inference-worker",
            daemon=True,
        )
        thread.start()
        debug_log("[LIFECYCLE] Spawned worker thread")
        return WorkerSession(request_queue, response_queue, handle=thread)


def default_worker_host() -> WorkerHost:
    if LOCAL_WORKER_MODE == 'thread':
        return ThreadWorkerHost()
    return ProcessWorkerHost()


class WorkerLifecycleManager:
    """
    Ensures a single responsive local worker exists.

    Attributes:
        host: Where workers are started.
        ready_timeout: Handshake budget in seconds.
        ping_interval: Seconds between readiness pings.
        spawn_count: Workers spawned by this manager (for diagnostics and tests).
    """

    def __init__(
        self,
        host: WorkerHost = None,
        ready_timeout: float = WORKER_READY_TIMEOUT_SECONDS,
        ping_interval: float = WORKER_PING_INTERVAL_SECONDS,
    ):
        self.host = host or default_worker_host()
        self.ready_timeout = ready_timeout
        self.ping_interval = ping_interval
        self.spawn_count = 0
        self._state = WorkerState.ABSENT
        self._session = None
        self._creation = None
        self._lock = threading.Lock()

    @property
    def state(self) -> WorkerState:
        return self._state

    def ensure(self) -> WorkerSession:
        """
        Return a ready worker session, creating the worker if needed.

        Raises:
            WorkerInitTimeout: The worker never answered the handshake.
            BackendUnavailableError: The worker could not be started.
        """
        with self._lock:
            if self._state is WorkerState.READY:
                if self._session.is_alive():
                    return self._session
                warning("Local worker is no longer running; starting a new one")
                self._session = None
                self._state = WorkerState.ABSENT

            if self._state is WorkerState.CREATING:
                creation = self._creation
                is_creator = False
            else:
                existing = self.host.find_live_worker()
                if existing is not None:
                    debug_log("[LIFECYCLE] Reusing live worker")
                    self._session = existing
                    self._state = WorkerState.READY
                    return existing

                creation = Future()
                self._creation = creation
                self._state = WorkerState.CREATING
                is_creator = True

        if not is_creator:
            debug_log("[LIFECYCLE] Waiting on in-flight worker creation")
            return creation.result()

        try:
            session = self._create()
        except BaseException as e:
            with self._lock:
                self._state = WorkerState.ABSENT
                self._creation = None
            creation.set_exception(e)
            raise

        with self._lock:
            self._session = session
            self._state = WorkerState.READY
            self._creation = None
        creation.set_result(session)
        return session

    def shutdown(self):
        """Stop the worker (if any) and return to ABSENT."""
        with self._lock:
            session = self._session
            self._session = None
            self._state = WorkerState.ABSENT
        if session is not None:
            session.close()
            debug_log("[LIFECYCLE] Worker shut down")

    def _create(self) -> WorkerSession:
        start_time = time.time()
        try:
            session = self.host.spawn_worker()
        except (OSError, RuntimeError) as e:
            raise BackendUnavailableError(f"Could not start local worker: {e}", backend="local") from e
        self.spawn_count += 1

        deadline = time.monotonic() + self.ready_timeout
        attempts = 0
        while True:
            attempts += 1
            ping_sent = time.monotonic()
            try:
                response = session.request({'action': 'ping'}, timeout=self.ping_interval)
                if response.get('ready'):
                    info(f"Local worker ready after {attempts} ping(s) ({time.time() - start_time:.2f}s)")
                    return session
                # Answered but not ready: wait out the interval before pinging again
                remaining = min(ping_sent + self.ping_interval, deadline) - time.monotonic()
                if remaining > 0:
                    time.sleep(remaining)
            except FuturesTimeoutError:
                pass

            if time.monotonic() >= deadline:
                warning(f"Local worker did not answer {attempts} pings within {self.ready_timeout}s")
                session.close()
                raise WorkerInitTimeout(self.ready_timeout)


_default_lifecycle = None
_default_lifecycle_lock = threading.Lock()


def get_worker_lifecycle() -> WorkerLifecycleManager:
    """Process-wide lifecycle manager shared by every LocalWorkerBackend."""
    global _default_lifecycle
    with _default_lifecycle_lock:
        if _default_lifecycle is None:
            _default_lifecycle = WorkerLifecycleManager()
        return _default_lifecycle

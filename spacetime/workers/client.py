"""
Physics computation client with worker-process support and fallback.

Curvature grids are CPU-bound (O(resolution^3 * masses)), so callers on
an asyncio event loop hand them to a PhysicsComputer:

    WorkerPhysicsComputer    runs the grid computer in a separate process
                             and correlates responses by request id
    FallbackPhysicsComputer  runs it on the caller's thread, one loop
                             tick after the call

create_physics_computer() picks one at construction time: it starts a
worker, waits for the INIT/READY handshake and falls back to the
same-thread computer (with a warning) if workers are unavailable or do
not come up in time. The decision is never revisited per call.

PhysicsComputerProvider is the lazily-constructed shared handle passed
to whoever needs a computer; concurrent first calls share a single
construction.

Threading model for the worker path: the pending-request map and all
timers live on the event loop that created the computer. A daemon
reader thread blocks on the worker's outbox pipe and forwards every
response into that loop with call_soon_threadsafe.
"""

import asyncio
import logging
import multiprocessing
import sys
import threading
from abc import ABC, abstractmethod

from spacetime.errors import (
    ComputationError,
    ComputeTimeoutError,
    ValidationError,
    WorkerError,
)
from spacetime.grid import compute_curvature_grid
from spacetime.types import CurvatureGridConfig, CurvatureGridResult
from spacetime.workers.protocol import (
    ErrorCode,
    ErrorResponse,
    ResponseType,
    compute_message,
    create_request_id,
    init_message,
    message_kind,
    terminate_message,
)
from spacetime.workers.worker import run_worker

log = logging.getLogger(__name__)

DEFAULT_INIT_TIMEOUT_MS = 5000
DEFAULT_COMPUTE_TIMEOUT_MS = 30000

# Time a terminated worker gets to exit on its own before it is killed.
TERMINATE_GRACE_MS = 100

# spawn gives the worker a clean interpreter and works on every platform.
WORKER_START_METHOD = "spawn"


def _noop(*args):
    pass


def is_worker_supported():
    """True if this runtime can start worker processes."""
    if sys.platform in ("emscripten", "wasi"):
        return False
    try:
        multiprocessing.get_context(WORKER_START_METHOD)
    except ValueError:
        return False
    return True


class PhysicsClientOptions:
    """
    Construction options for create_physics_computer().

    Parameters
    ----------
    enable_fallback : bool
        Fall back to same-thread computation when no worker can be
        started. When False, construction raises instead.
    init_timeout_ms : float
        Deadline for the INIT/READY handshake.
    compute_timeout_ms : float
        Deadline for each compute() call on the worker path.
    use_worker : bool
        False skips the worker entirely (treated as unsupported).
    on_error : callable, optional
        Called with an ErrorResponse for every worker ERROR message and
        for worker-level failures.
    on_warning : callable, optional
        Called with a message string when fallback is activated.
    """

    def __init__(self, enable_fallback=True,
                 init_timeout_ms=DEFAULT_INIT_TIMEOUT_MS,
                 compute_timeout_ms=DEFAULT_COMPUTE_TIMEOUT_MS,
                 use_worker=True, on_error=None, on_warning=None):
        self.enable_fallback = enable_fallback
        self.init_timeout_ms = init_timeout_ms
        self.compute_timeout_ms = compute_timeout_ms
        self.use_worker = use_worker
        self.on_error = on_error or _noop
        self.on_warning = on_warning or _noop

    @classmethod
    def from_settings(cls, settings, **overrides):
        """Build options from a spacetime.config.SimulationSettings."""
        values = {
            "init_timeout_ms": settings.init_timeout_ms,
            "compute_timeout_ms": settings.compute_timeout_ms,
            "use_worker": settings.use_worker,
        }
        values.update(overrides)
        return cls(**values)


class PhysicsComputer(ABC):
    """Asynchronous curvature grid computer."""

    @property
    @abstractmethod
    def is_worker_based(self):
        """True if computations run in a worker process."""

    @abstractmethod
    async def compute(self, config):
        """
        Compute a curvature grid.

        Parameters
        ----------
        config : CurvatureGridConfig or dict

        Returns
        -------
        CurvatureGridResult

        Raises
        ------
        ValidationError, ComputationError, WorkerError, ComputeTimeoutError
        """

    @abstractmethod
    def terminate(self):
        """Release resources. The computer must not be used afterwards."""


class FallbackPhysicsComputer(PhysicsComputer):
    """Same-thread computer used when no worker is available."""

    @property
    def is_worker_based(self):
        return False

    async def compute(self, config):
        # Yield once so the caller's loop can run before the blocking work.
        await asyncio.sleep(0)
        try:
            return compute_curvature_grid(config)
        except ValidationError:
            raise
        except Exception as exc:
            raise ComputationError(
                str(exc) or "Unknown error during computation") from exc

    def terminate(self):
        pass


class PendingRequest:
    """A COMPUTE awaiting its RESULT or ERROR."""

    __slots__ = ("future", "timeout_handle")

    def __init__(self, future, timeout_handle):
        self.future = future
        self.timeout_handle = timeout_handle

    def settle(self, result=None, error=None):
        """Cancel the timer and complete the future, unless the caller gave up."""
        self.timeout_handle.cancel()
        if self.future.done():
            return
        if error is not None:
            self.future.set_exception(error)
        else:
            self.future.set_result(result)


class WorkerPhysicsComputer(PhysicsComputer):
    """
    Computer backed by a worker process.

    Parameters
    ----------
    process : multiprocessing.Process
        The started, READY worker.
    send_conn : multiprocessing.connection.Connection
        Main -> worker pipe end.
    recv_conn : multiprocessing.connection.Connection
        Worker -> main pipe end.
    options : PhysicsClientOptions
    loop : asyncio.AbstractEventLoop
        Loop that owns the pending-request map and timers.
    """

    def __init__(self, process, send_conn, recv_conn, options, loop):
        self._process = process
        self._send_conn = send_conn
        self._recv_conn = recv_conn
        self._options = options
        self._loop = loop
        self._pending = {}
        self._terminated = False

        # Every ResponseType must have an entry.
        self._handlers = {
            ResponseType.READY: self._on_ready,
            ResponseType.RESULT: self._on_result,
            ResponseType.ERROR: self._on_error,
            ResponseType.PROGRESS: self._on_progress,
        }

        self._reader = threading.Thread(
            target=self._read_responses,
            name="spacetime-worker-reader",
            daemon=True,
        )
        self._reader.start()

    @property
    def is_worker_based(self):
        return True

    @property
    def pending_count(self):
        return len(self._pending)

    # -- event-loop side --------------------------------------------------

    async def compute(self, config):
        if self._terminated:
            raise WorkerError("Worker has been terminated")

        if isinstance(config, CurvatureGridConfig):
            config = config.to_dict()

        request_id = create_request_id()
        future = self._loop.create_future()
        timeout_handle = self._loop.call_later(
            self._options.compute_timeout_ms / 1000.0, self._on_timeout, request_id)
        self._pending[request_id] = PendingRequest(future, timeout_handle)

        try:
            self._send_conn.send(compute_message(request_id, config))
        except Exception as exc:
            self._pending.pop(request_id, None)
            timeout_handle.cancel()
            raise WorkerError("Failed to send compute request: {}".format(exc)) from exc

        try:
            return await future
        finally:
            # Drop the entry if the caller was cancelled before a response.
            entry = self._pending.pop(request_id, None)
            if entry is not None:
                entry.timeout_handle.cancel()

    def terminate(self):
        if self._terminated:
            return
        self._terminated = True
        log.info("Terminating physics worker (pid %s)", self._process.pid)

        self._reject_all(WorkerError("Worker terminated"))

        try:
            self._send_conn.send(terminate_message())
        except (OSError, ValueError) as exc:
            log.debug("TERMINATE not delivered: %s", exc)

        try:
            self._loop.call_later(TERMINATE_GRACE_MS / 1000.0, self._force_terminate)
        except RuntimeError:
            # Loop already closed: nothing left to wait on.
            self._force_terminate()

    def _force_terminate(self):
        if self._process.is_alive():
            self._process.terminate()
        self._send_conn.close()
        # Reap the process off the loop thread; join can block.
        try:
            self._loop.run_in_executor(None, self._process.join, 1.0)
        except RuntimeError:
            self._process.join(timeout=1.0)

    def _handle_response(self, response):
        kind = message_kind(response, ResponseType)
        if kind is None:
            log.warning("Ignoring unknown worker response: %r", response)
            return
        self._handlers[kind](response)

    def _on_ready(self, response):
        log.debug("Worker READY received after initialization")

    def _on_progress(self, response):
        log.debug("Request %s progress %s%%",
                  response.get("requestId"), response.get("percent"))

    def _on_result(self, response):
        pending = self._pending.pop(response.get("requestId"), None)
        if pending is None:
            # Timed out or cancelled already.
            return
        log.debug("Request %s computed in %.1f ms",
                  response.get("requestId"), response.get("computeTimeMs", 0.0))
        try:
            result = CurvatureGridResult.from_dict(response["result"])
        except (KeyError, TypeError) as exc:
            pending.settle(error=WorkerError("Malformed RESULT: {}".format(exc)))
            return
        pending.settle(result=result)

    def _on_error(self, response):
        error = ErrorResponse.from_dict(response)
        if error.request_id is not None:
            pending = self._pending.pop(error.request_id, None)
            if pending is not None:
                pending.settle(error=error.to_exception())
        self._options.on_error(error)

    def _on_timeout(self, request_id):
        pending = self._pending.pop(request_id, None)
        if pending is None:
            return
        pending.settle(error=ComputeTimeoutError(
            "Computation timeout after {} ms".format(self._options.compute_timeout_ms)))

    def _on_worker_failure(self, message):
        log.error("Physics worker failed: %s", message)
        self._options.on_error(ErrorResponse(message, ErrorCode.WORKER_ERROR))
        self._reject_all(WorkerError("Worker error: {}".format(message)))

    def _reject_all(self, error):
        pending, self._pending = self._pending, {}
        for entry in pending.values():
            entry.settle(error=error)

    # -- reader thread ------------------------------------------------------

    def _read_responses(self):
        try:
            while True:
                try:
                    response = self._recv_conn.recv()
                except (EOFError, OSError) as exc:
                    if not self._terminated:
                        self._post(self._on_worker_failure,
                                   "worker channel closed ({})".format(
                                       type(exc).__name__))
                    return
                self._post(self._handle_response, response)
        finally:
            self._recv_conn.close()

    def _post(self, callback, *args):
        try:
            self._loop.call_soon_threadsafe(callback, *args)
        except RuntimeError:
            log.debug("Event loop closed; dropped worker callback %s", callback.__name__)


def _wait_for_ready(conn, timeout_s):
    """
    Block until the worker answers INIT.

    Runs in an executor thread. Returns False on timeout.
    """
    if not conn.poll(timeout_s):
        return False
    response = conn.recv()
    kind = message_kind(response, ResponseType)
    if kind is ResponseType.READY:
        return True
    if kind is ResponseType.ERROR:
        raise WorkerError(ErrorResponse.from_dict(response).message)
    raise WorkerError("Unexpected handshake response: {!r}".format(response))


async def _start_worker(options):
    """Spawn a worker and complete the INIT/READY handshake."""
    loop = asyncio.get_running_loop()
    ctx = multiprocessing.get_context(WORKER_START_METHOD)

    inbox_recv, inbox_send = ctx.Pipe(duplex=False)
    outbox_recv, outbox_send = ctx.Pipe(duplex=False)
    process = ctx.Process(
        target=run_worker,
        args=(inbox_recv, outbox_send),
        name="spacetime-physics-worker",
        daemon=True,
    )

    try:
        process.start()
    except BaseException:
        inbox_send.close()
        outbox_recv.close()
        raise
    finally:
        # Child ends belong to the worker now.
        inbox_recv.close()
        outbox_send.close()

    try:
        inbox_send.send(init_message())
        ready = await loop.run_in_executor(
            None, _wait_for_ready, outbox_recv, options.init_timeout_ms / 1000.0)
        if not ready:
            raise ComputeTimeoutError("Worker initialization timeout")
    except BaseException:
        process.terminate()
        process.join(timeout=1.0)
        inbox_send.close()
        outbox_recv.close()
        raise

    log.info("Physics worker ready (pid %s)", process.pid)
    return WorkerPhysicsComputer(process, inbox_send, outbox_recv, options, loop)


def _warn(options, message):
    log.warning(message)
    options.on_warning(message)


async def create_physics_computer(options=None):
    """
    Create a physics computer, preferring a worker process.

    Parameters
    ----------
    options : PhysicsClientOptions, optional

    Returns
    -------
    PhysicsComputer

    Raises
    ------
    WorkerError
        Workers are unavailable or failed to start and fallback is disabled.
    ComputeTimeoutError
        The worker missed the init deadline and fallback is disabled.
    """
    options = options or PhysicsClientOptions()

    if not options.use_worker or not is_worker_supported():
        if options.enable_fallback:
            _warn(options, "Worker processes not supported in this environment. "
                           "Using same-thread computation.")
            return FallbackPhysicsComputer()
        raise WorkerError("Worker processes are not supported in this environment")

    try:
        return await _start_worker(options)
    except Exception as exc:
        if not options.enable_fallback:
            if isinstance(exc, (WorkerError, ComputeTimeoutError)):
                raise
            raise WorkerError("Worker initialization failed: {}".format(exc)) from exc
        _warn(options, "Failed to initialize physics worker: {}. "
                       "Using same-thread computation.".format(exc))
        return FallbackPhysicsComputer()


class PhysicsComputerProvider:
    """
    Shared, lazily constructed PhysicsComputer.

    Pass one provider to every component that needs a computer instead
    of keeping a module-level instance. The first get() builds the
    computer; callers arriving while it is being built wait on the same
    construction. A failed construction is forgotten so the next get()
    retries. terminate() shuts the computer down and allows a fresh one
    to be built later.

    A provider is bound to the event loop of its first get().

    Parameters
    ----------
    options : PhysicsClientOptions, optional
        Used for every construction.
    factory : coroutine function, optional
        Builds the computer. Defaults to create_physics_computer.
    """

    def __init__(self, options=None, factory=None):
        self._options = options
        self._factory = factory or create_physics_computer
        self._lock = threading.Lock()
        self._instance = None
        self._building = None
        self._generation = 0

    @property
    def instance(self):
        """The constructed computer, or None."""
        return self._instance

    @property
    def is_using_worker(self):
        """True once a worker-backed computer has been constructed."""
        instance = self._instance
        return instance is not None and instance.is_worker_based

    async def get(self):
        with self._lock:
            if self._instance is not None:
                return self._instance
            if self._building is None:
                self._building = asyncio.ensure_future(self._build(self._generation))
            building = self._building
        return await asyncio.shield(building)

    async def _build(self, generation):
        try:
            computer = await self._factory(self._options)
        except BaseException:
            with self._lock:
                if self._generation == generation:
                    self._building = None
            raise

        with self._lock:
            current = self._generation == generation
            if current:
                self._instance = computer
                self._building = None
        if not current:
            computer.terminate()
            raise WorkerError("Provider was terminated during construction")
        return computer

    def terminate(self):
        """Terminate the shared computer, if any, and reset the provider."""
        with self._lock:
            computer = self._instance
            self._instance = None
            self._building = None
            self._generation += 1
        if computer is not None:
            computer.terminate()

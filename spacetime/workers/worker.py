"""
Physics worker process.

run_worker() is the target of the worker process. It reads messages
from its inbox pipe, computes curvature grids, and writes responses to
its outbox pipe until it receives TERMINATE or the main side goes away.
"""

import logging
import time

from spacetime.errors import ValidationError
from spacetime.grid import compute_curvature_grid
from spacetime.workers.protocol import (
    ErrorCode,
    MessageType,
    error_response,
    message_kind,
    ready_response,
    result_response,
)

log = logging.getLogger(__name__)


def handle_init(message, outbox):
    outbox.send(ready_response())
    return True


def handle_compute(message, outbox):
    request_id = message.get("requestId")
    config = message.get("config")
    if request_id is None:
        outbox.send(error_response("COMPUTE requires a requestId", ErrorCode.WORKER_ERROR))
        return True

    start = time.perf_counter()
    try:
        result = compute_curvature_grid(config)
    except ValidationError as exc:
        outbox.send(error_response(str(exc), ErrorCode.VALIDATION_ERROR, request_id))
        return True
    except Exception as exc:
        log.exception("Curvature computation failed for request %s", request_id)
        outbox.send(error_response(
            str(exc) or "Unknown error during computation",
            ErrorCode.COMPUTATION_ERROR, request_id))
        return True

    compute_time_ms = (time.perf_counter() - start) * 1000.0
    outbox.send(result_response(request_id, result.to_dict(), compute_time_ms))
    return True


def handle_terminate(message, outbox):
    return False


# Every MessageType must have an entry.
HANDLERS = {
    MessageType.INIT: handle_init,
    MessageType.COMPUTE: handle_compute,
    MessageType.TERMINATE: handle_terminate,
}


def handle_message(message, outbox):
    """
    Dispatch one message.

    Returns
    -------
    bool
        False when the worker should stop.
    """
    kind = message_kind(message, MessageType)
    if kind is None:
        tag = message.get("type") if isinstance(message, dict) else type(message).__name__
        outbox.send(error_response(
            "Unknown message type: {}".format(tag), ErrorCode.WORKER_ERROR))
        return True
    return HANDLERS[kind](message, outbox)


def run_worker(inbox, outbox):
    """
    Worker process main loop.

    Parameters
    ----------
    inbox : multiprocessing.connection.Connection
        Receives messages from the main side.
    outbox : multiprocessing.connection.Connection
        Sends responses to the main side.
    """
    try:
        while True:
            try:
                message = inbox.recv()
            except EOFError:
                break
            try:
                if not handle_message(message, outbox):
                    break
            except (OSError, EOFError):
                # Main side closed its end; nobody left to answer.
                break
            except Exception as exc:
                outbox.send(error_response(
                    str(exc) or "Unknown worker error", ErrorCode.WORKER_ERROR))
    finally:
        inbox.close()
        outbox.close()

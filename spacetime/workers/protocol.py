"""
Message protocol for the physics worker channel.

Messages are plain dicts (picklable tagged records) with a "type" key.

    Main -> Worker
        {"type": "INIT"}
        {"type": "COMPUTE", "requestId": str, "config": dict}
        {"type": "TERMINATE"}

    Worker -> Main
        {"type": "READY"}
        {"type": "RESULT", "requestId": str, "result": dict, "computeTimeMs": float}
        {"type": "ERROR", "requestId": str or None, "message": str, "code": str}
        {"type": "PROGRESS", "requestId": str, "percent": float}   (reserved)

    INIT -> READY, then any number of COMPUTE -> RESULT | ERROR,
    then TERMINATE (the worker exits without replying).

The message kinds are closed enums. Both ends dispatch through handler
tables keyed by these enums and must cover every member.

IMPORTANT: No unicode characters allowed (Windows charmap constraint).
"""

import uuid
from enum import Enum

from spacetime import errors


class MessageType(str, Enum):
    """Messages sent from the main side to the worker."""

    INIT = "INIT"
    COMPUTE = "COMPUTE"
    TERMINATE = "TERMINATE"


class ResponseType(str, Enum):
    """Messages sent from the worker to the main side."""

    READY = "READY"
    RESULT = "RESULT"
    ERROR = "ERROR"
    PROGRESS = "PROGRESS"


class ErrorCode(str, Enum):
    """Wire error codes. Values match spacetime.errors."""

    VALIDATION_ERROR = errors.VALIDATION_ERROR
    COMPUTATION_ERROR = errors.COMPUTATION_ERROR
    WORKER_ERROR = errors.WORKER_ERROR
    TIMEOUT_ERROR = errors.TIMEOUT_ERROR


def create_request_id():
    """Unique id used to correlate a COMPUTE with its RESULT or ERROR."""
    return uuid.uuid4().hex


def message_kind(message, kinds):
    """
    Decode the "type" tag of a message.

    Parameters
    ----------
    message : object
        Received message.
    kinds : type
        MessageType or ResponseType.

    Returns
    -------
    Enum member or None
        None if the message is not a dict or the tag is unknown.
    """
    if not isinstance(message, dict):
        return None
    try:
        return kinds(message.get("type"))
    except ValueError:
        return None


def init_message():
    return {"type": MessageType.INIT.value}


def compute_message(request_id, config):
    return {
        "type": MessageType.COMPUTE.value,
        "requestId": request_id,
        "config": config,
    }


def terminate_message():
    return {"type": MessageType.TERMINATE.value}


def ready_response():
    return {"type": ResponseType.READY.value}


def result_response(request_id, result, compute_time_ms):
    return {
        "type": ResponseType.RESULT.value,
        "requestId": request_id,
        "result": result,
        "computeTimeMs": compute_time_ms,
    }


def error_response(message, code, request_id=None):
    return {
        "type": ResponseType.ERROR.value,
        "requestId": request_id,
        "message": message,
        "code": ErrorCode(code).value,
    }


def progress_response(request_id, percent):
    return {
        "type": ResponseType.PROGRESS.value,
        "requestId": request_id,
        "percent": percent,
    }


class ErrorResponse:
    """
    Decoded ERROR message, passed to the client's on_error callback.

    Parameters
    ----------
    message : str
        Human-readable failure description.
    code : ErrorCode
        Wire error code.
    request_id : str, optional
        The failed request, when the error belongs to one.
    """

    def __init__(self, message, code, request_id=None):
        self.message = message
        self.code = ErrorCode(code)
        self.request_id = request_id

    def to_exception(self):
        """Rebuild the matching spacetime.errors exception."""
        return errors.error_from_code(self.code.value, self.message)

    def to_dict(self):
        return error_response(self.message, self.code, self.request_id)

    @classmethod
    def from_dict(cls, data):
        try:
            code = ErrorCode(data.get("code"))
        except ValueError:
            code = ErrorCode.WORKER_ERROR
        return cls(
            message=data.get("message") or "Unknown worker error",
            code=code,
            request_id=data.get("requestId"),
        )

    def __repr__(self):
        return "ErrorResponse(code={}, request_id={!r}, message={!r})".format(
            self.code.value, self.request_id, self.message)

"""
Error taxonomy for curvature and orbit computations.

Every error carries a wire ``code`` so that failures raised inside a
worker process can be reported over the message channel and rebuilt as
the same exception type on the caller's side.

    ComputeError
      ValidationError        VALIDATION_ERROR   malformed input, never retried
        OrbitalValidationError
      ComputationError       COMPUTATION_ERROR  failure during a valid computation
      WorkerError            WORKER_ERROR       worker transport / lifecycle failure
      ComputeTimeoutError    TIMEOUT_ERROR      init or compute deadline exceeded
"""

VALIDATION_ERROR = "VALIDATION_ERROR"
COMPUTATION_ERROR = "COMPUTATION_ERROR"
WORKER_ERROR = "WORKER_ERROR"
TIMEOUT_ERROR = "TIMEOUT_ERROR"


class ComputeError(Exception):
    """Base class for all errors surfaced by the compute engine."""

    code = COMPUTATION_ERROR


class ValidationError(ComputeError, ValueError):
    """Input failed a sanity check before any computation ran."""

    code = VALIDATION_ERROR


class OrbitalValidationError(ValidationError):
    """Orbital elements are non-finite or outside their valid domain."""


class ComputationError(ComputeError):
    """Unexpected failure while computing from otherwise valid input."""

    code = COMPUTATION_ERROR


class WorkerError(ComputeError):
    """The worker channel failed, or the computer was terminated."""

    code = WORKER_ERROR


class ComputeTimeoutError(ComputeError, TimeoutError):
    """No response arrived before the deadline."""

    code = TIMEOUT_ERROR


_ERRORS_BY_CODE = {
    VALIDATION_ERROR: ValidationError,
    COMPUTATION_ERROR: ComputationError,
    WORKER_ERROR: WorkerError,
    TIMEOUT_ERROR: ComputeTimeoutError,
}


def error_from_code(code, message):
    """
    Rebuild an exception from a wire error code.

    Unknown codes map to ComputationError so the failure still reaches
    the caller.
    """
    cls = _ERRORS_BY_CODE.get(code, ComputationError)
    return cls(message)

"""
Asynchronous compute dispatch for curvature grids.

    protocol  - wire message kinds, constructors and request ids
    worker    - worker process main loop
    client    - PhysicsComputer implementations, factory and provider
"""

from spacetime.workers.client import (                    # noqa: F401
    FallbackPhysicsComputer,
    PhysicsClientOptions,
    PhysicsComputer,
    PhysicsComputerProvider,
    WorkerPhysicsComputer,
    create_physics_computer,
    is_worker_supported,
)
from spacetime.workers.protocol import (                  # noqa: F401
    ErrorCode,
    ErrorResponse,
    MessageType,
    ResponseType,
    create_request_id,
)

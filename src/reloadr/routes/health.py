"""Health check endpoints for liveness and readiness checks."""
from typing import Literal

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

router = APIRouter(prefix="/health", tags=["health"])


class LivenessResponse(BaseModel):
    """Response model for liveness check.

    Attributes:
        status: Always 'alive' when process is running.
    """

    status: Literal["alive"]


class ReadinessResponse(BaseModel):
    """Response model for readiness check.

    Attributes:
        status: 'ready' while live reload is watching.
        watched_directories: Number of directories being watched.
        connected_clients: Number of open reload streams.
    """

    status: Literal["ready", "not_ready"]
    watched_directories: int
    connected_clients: int


@router.get("/live", response_model=LivenessResponse)
async def liveness() -> LivenessResponse:
    """Liveness check endpoint.

    Returns:
        Liveness status response.
    """
    return LivenessResponse(status="alive")


@router.get("/ready", response_model=ReadinessResponse)
async def readiness(request: Request) -> JSONResponse:
    """Readiness check endpoint.

    Returns 200 while live reload is running, 503 once it was cancelled
    or never started.

    Returns:
        Readiness status with watcher and client counts.
    """
    live_reload = getattr(request.app.state, "live_reload", None)
    if live_reload is None:
        response = ReadinessResponse(
            status="not_ready",
            watched_directories=0,
            connected_clients=0,
        )
    else:
        response = ReadinessResponse(
            status="not_ready" if live_reload.cancelled else "ready",
            watched_directories=len(live_reload.watched),
            connected_clients=live_reload.registry.client_count,
        )
    code = (
        status.HTTP_200_OK
        if response.status == "ready"
        else status.HTTP_503_SERVICE_UNAVAILABLE
    )
    return JSONResponse(content=response.model_dump(), status_code=code)

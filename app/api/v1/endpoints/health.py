"""Health check endpoints. Used for liveness and readiness probes."""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from app.schemas.health import HealthResponse, ReadinessResponse

router = APIRouter()


@router.get("", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Return simple ok status for liveness."""
    return HealthResponse()


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    responses={503: {"description": "Session store unavailable", "model": ReadinessResponse}},
)
async def readiness_check(request: Request) -> ReadinessResponse | JSONResponse:
    """Return 200 when the session store is usable; 503 otherwise."""
    store = getattr(request.app.state, "session_store", None)
    if store is not None and store.is_available():
        return ReadinessResponse()
    return JSONResponse(
        status_code=503,
        content=ReadinessResponse(status="not_ready", sessions="unavailable").model_dump(),
    )

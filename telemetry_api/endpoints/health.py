"""Health, readiness and service metrics endpoints."""

from fastapi import APIRouter, Depends, HTTPException

from ..core.receiver import TelemetryService
from ..dependencies import require_service
from ..schemas import LivenessOut, ServiceHealth

router = APIRouter(tags=["health"])


@router.get("/health")
def health():
    """Liveness probe: always returns ok if process is running."""
    return {"status": "ok"}


@router.get("/ready", response_model=ServiceHealth)
def ready(service: TelemetryService = Depends(require_service)):
    """Readiness probe: checks every store."""
    status = service.health_check()
    if not status["healthy"]:
        raise HTTPException(status_code=503, detail="not ready")
    return ServiceHealth(**status)


@router.get("/api/status", response_model=LivenessOut)
def liveness(service: TelemetryService = Depends(require_service)):
    """Estado cacheado del broker y del nodo crítico."""
    return LivenessOut(**service.tracker.current_state().to_dict())


@router.get("/metrics")
def metrics(service: TelemetryService = Depends(require_service)):
    """Aggregated pipeline, persistence and broadcast counters."""
    return service.stats

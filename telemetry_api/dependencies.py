"""Dependencias FastAPI compartidas por los endpoints."""

from __future__ import annotations

from fastapi import HTTPException, Request

from .core.receiver import TelemetryService


def require_service(request: Request) -> TelemetryService:
    service = getattr(request.app.state, "service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Service not initialized")
    return service

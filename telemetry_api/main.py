from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from common.config import get_settings

from .core.receiver import TelemetryService, start_service, stop_service
from .endpoints import health_router, history_router, observers_router

logger = logging.getLogger(__name__)


def create_app(service: Optional[TelemetryService] = None) -> FastAPI:
    """Construye la app.

    Sin `service` se usa el singleton creado desde el entorno; los tests
    inyectan uno propio.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if service is not None:
            if not service.is_running:
                service.start()
            app.state.service = service
        else:
            app.state.service = start_service()
        logger.info("[API] Telemetry service ready")
        try:
            yield
        finally:
            if service is not None:
                service.stop()
            else:
                stop_service()
            app.state.service = None

    app = FastAPI(title="Pluto Telemetry Service", version="1.0.0", lifespan=lifespan)
    app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])

    app.include_router(health_router)
    app.include_router(history_router)
    app.include_router(observers_router)

    static_dir = Path(service.settings.static_dir if service is not None else get_settings().static_dir)
    if static_dir.is_dir():
        app.mount("/", StaticFiles(directory=str(static_dir), html=True), name="static")
    else:
        logger.info("[API] Static dir %s not found - serving API only", static_dir)

    return app


app = create_app()

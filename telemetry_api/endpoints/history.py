"""Endpoints de lectura de logs y borrado administrativo.

Las lecturas van siempre contra el store live (o battery); el archivo no
se expone ni se borra desde aquí.
"""

from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query

from ..auth import require_admin_key
from ..core.receiver import TelemetryService
from ..dependencies import require_service
from ..infrastructure.persistence import (
    BATTERY_LOGS,
    EARTHQUAKE_LOGS,
    MESSAGES,
    LogStore,
    StoreError,
)
from ..schemas import BatteryRow, ClearResult, EarthquakeRow, MessageRow

logger = logging.getLogger(__name__)

router = APIRouter(tags=["history"])

HISTORY_LIMIT = 500
EARTHQUAKE_LIMIT = 100
BATTERY_LIMIT = 2500


def _read(store: LogStore, table: str, limit: int) -> list[dict]:
    try:
        return store.fetch_recent(table, limit)
    except StoreError as e:
        logger.exception("[API] Read failed store=%s table=%s", store.name, table)
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/api/history", response_model=List[MessageRow])
def get_history(
    limit: int = Query(HISTORY_LIMIT, ge=1, le=HISTORY_LIMIT),
    service: TelemetryService = Depends(require_service),
):
    return _read(service.live, MESSAGES, limit)


@router.get("/api/earthquake", response_model=List[EarthquakeRow])
def get_earthquake_logs(
    limit: int = Query(EARTHQUAKE_LIMIT, ge=1, le=EARTHQUAKE_LIMIT),
    service: TelemetryService = Depends(require_service),
):
    return _read(service.live, EARTHQUAKE_LOGS, limit)


@router.get("/api/battery", response_model=List[BatteryRow])
def get_battery_logs(
    limit: int = Query(BATTERY_LIMIT, ge=1, le=BATTERY_LIMIT),
    service: TelemetryService = Depends(require_service),
):
    return _read(service.battery, BATTERY_LOGS, limit)


@router.delete(
    "/api/history",
    response_model=ClearResult,
    dependencies=[Depends(require_admin_key)],
)
def delete_history(service: TelemetryService = Depends(require_service)):
    """Borra live + battery, reinicia ids y avisa a los observadores."""
    try:
        service.clear_history()
    except StoreError as e:
        raise HTTPException(status_code=500, detail=str(e))
    logger.warning("[API] History cleared by admin request")
    return ClearResult()

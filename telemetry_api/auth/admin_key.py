"""Autenticación por Admin Key para operaciones destructivas.

SECURITY: sin ADMIN_KEY configurado, la operación queda bloqueada.
"""

from __future__ import annotations

import logging
import secrets

from fastapi import Depends, Header, HTTPException

from ..dependencies import require_service
from ..core.receiver import TelemetryService

logger = logging.getLogger(__name__)


def require_admin_key(
    x_admin_key: str | None = Header(default=None, alias="X-Admin-Key"),
    service: TelemetryService = Depends(require_service),
) -> None:
    """Valida la admin key del header X-Admin-Key.

    Responde 403 si falta, si no coincide o si el servidor no tiene
    ADMIN_KEY configurado.
    """
    expected = service.settings.admin_key
    if not expected:
        logger.error("[SECURITY] ADMIN_KEY not configured - admin operations disabled")
        raise HTTPException(status_code=403, detail="Unauthorized")

    if not x_admin_key or not secrets.compare_digest(x_admin_key, expected):
        logger.warning("[SECURITY] Invalid admin key attempt")
        raise HTTPException(status_code=403, detail="Unauthorized")

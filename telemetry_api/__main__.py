"""Entry point: python -m telemetry_api"""

from __future__ import annotations

import logging
import os

import uvicorn

from common.config import get_settings


def main() -> None:
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    settings = get_settings()
    logging.getLogger(__name__).info("[API] Control panel server on http://0.0.0.0:%d", settings.port)
    uvicorn.run("telemetry_api.main:app", host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    main()

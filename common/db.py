from __future__ import annotations

import logging

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine


logger = logging.getLogger(__name__)


def _apply_sqlite_pragmas(dbapi_connection, connection_record) -> None:
    # WAL permite lecturas de los endpoints mientras el worker escribe.
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA journal_mode=WAL;")
        cursor.execute("PRAGMA busy_timeout = 5000;")
    finally:
        cursor.close()


def create_store_engine(url: str, *, name: str) -> Engine:
    """Crea un engine para uno de los stores de logs.

    Para SQLite se activan WAL y busy_timeout en cada conexión nueva.
    """
    is_sqlite = url.startswith("sqlite")
    connect_args = {"check_same_thread": False} if is_sqlite else {}

    engine = create_engine(url, pool_pre_ping=True, future=True, connect_args=connect_args)
    if is_sqlite:
        event.listen(engine, "connect", _apply_sqlite_pragmas)

    logger.info("[DB] Engine created store=%s dialect=%s", name, engine.dialect.name)

    # Test de conexión: deja en logs si el store es alcanzable
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        logger.info("[DB] Connection test OK store=%s", name)
    except Exception:
        logger.exception("[DB] Connection test FAILED store=%s", name)

    return engine

from __future__ import annotations

from typing import Optional
from urllib.parse import quote_plus
import logging

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine

from .config import Settings, get_settings


logger = logging.getLogger(__name__)


_engine: Optional[Engine] = None


def build_sqlalchemy_url(settings: Settings) -> str:
    if settings.db_url:
        return settings.db_url

    # Use the recommended odbc_connect form.
    # This handles:
    # - passwords with special characters
    # - driver names with spaces
    # - SQL Server port syntax (SERVER=host,port)
    odbc_str = (
        f"DRIVER={{{settings.odbc_driver}}};"
        f"SERVER={settings.db_host},{settings.db_port};"
        f"DATABASE={settings.db_name};"
        f"UID={settings.db_user};"
        f"PWD={settings.db_password};"
        "TrustServerCertificate=yes;"
    )

    return f"mssql+pyodbc:///?odbc_connect={quote_plus(odbc_str)}"


def get_engine(settings: Optional[Settings] = None) -> Engine:
    """Devuelve el engine compartido, creándolo en la primera llamada."""
    global _engine

    if _engine is not None:
        return _engine

    settings = settings or get_settings()
    url = build_sqlalchemy_url(settings)

    if settings.db_url:
        logger.info("[DB] Crear engine desde DB_URL")
    else:
        # Log básico de parámetros de conexión (sin contraseña)
        logger.info(
            "[DB] Crear engine SQL Server host=%s port=%s db=%s user=%s driver=%s",
            settings.db_host,
            settings.db_port,
            settings.db_name,
            settings.db_user,
            settings.odbc_driver,
        )

    connect_args = {}
    if url.startswith("sqlite"):
        # El job usa hilos; las conexiones del pool cambian de hilo.
        connect_args["check_same_thread"] = False

    engine = create_engine(url, pool_pre_ping=True, future=True, connect_args=connect_args)

    # Test de conexión: ayuda a ver en logs si el job realmente llega a la BD
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        logger.info("[DB] Test de conexión OK")
    except Exception:
        logger.exception("[DB] Test de conexión FALLÓ")

    _engine = engine
    return engine


def reset_engine() -> None:
    """Descarta el engine compartido (tests y cambios de configuración)."""
    global _engine
    if _engine is not None:
        _engine.dispose()
    _engine = None

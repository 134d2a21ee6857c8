from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


def _default_env_file() -> str:
    # .env en la raíz del repo; las variables reales del entorno tienen prioridad.
    repo_root = Path(__file__).resolve().parents[1]
    return str(repo_root / ".env")


@dataclass(frozen=True)
class Settings:
    db_host: str
    db_port: int
    db_user: str
    db_password: str
    db_name: str

    odbc_driver: str

    # URL SQLAlchemy completa; si existe reemplaza la conexión SQL Server.
    db_url: Optional[str]

    log_level: str

    # Valores por defecto de los monitores de tiempo de operación
    default_unit: str
    reset_period_seconds: float
    max_condition_age_seconds: Optional[float]
    parallel_workers: int


def _optional_float(name: str) -> Optional[float]:
    raw = os.getenv(name, "").strip()
    if not raw:
        return None
    return float(raw)


def get_settings() -> Settings:
    # Load env file (if present) but still allow overriding via real environment variables.
    env_file = os.getenv("OT_ENV_FILE", _default_env_file())
    if env_file and Path(env_file).exists():
        load_dotenv(env_file, override=False)

    db_host = os.getenv("DB_HOST", "localhost")
    db_port = int(os.getenv("DB_PORT", "1434"))
    db_user = os.getenv("DB_USER", "sa")
    db_password = os.getenv("DB_PASSWORD", "")
    db_name = os.getenv("DB_NAME", "iot_monitoring_system")

    # Driver name depends on the OS image.
    # Common values:
    # - ODBC Driver 17 for SQL Server
    # - ODBC Driver 18 for SQL Server
    odbc_driver = os.getenv("ODBC_DRIVER", "ODBC Driver 17 for SQL Server")

    db_url = os.getenv("DB_URL") or None

    return Settings(
        db_host=db_host,
        db_port=db_port,
        db_user=db_user,
        db_password=db_password,
        db_name=db_name,
        odbc_driver=odbc_driver,
        db_url=db_url,
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        default_unit=os.getenv("OT_DEFAULT_UNIT", "seconds").lower(),
        reset_period_seconds=float(os.getenv("OT_RESET_PERIOD_SECONDS", "0")),
        max_condition_age_seconds=_optional_float("OT_MAX_CONDITION_AGE_SECONDS"),
        parallel_workers=max(1, int(os.getenv("OT_PARALLEL_WORKERS", "1"))),
    )

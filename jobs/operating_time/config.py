"""Configuración del job batch de tiempo de operación."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class JobConfig:
    """Parámetros de una ejecución del job."""
    at: datetime
    monitor_key: Optional[str] = None
    workers: int = 1
    max_retries: int = 3

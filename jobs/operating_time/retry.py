"""Reintento de ciclos de monitor ante deadlocks de SQL Server."""

from __future__ import annotations

import logging
import random
import time
from typing import Callable, Optional, TypeVar

from sqlalchemy.exc import OperationalError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEADLOCK_ERROR_CODE = 1205


def _error_code(exc: OperationalError) -> Optional[int]:
    args = getattr(getattr(exc, "orig", None), "args", None) or ()
    if args and isinstance(args[0], tuple) and args[0]:
        return args[0][0]
    if args and isinstance(args[0], int):
        return args[0]
    return None


def is_deadlock(exc: OperationalError) -> bool:
    return _error_code(exc) == DEADLOCK_ERROR_CODE


def run_with_retry(fn: Callable[[], T], max_retries: int = 3, label: str = "-") -> T:
    """Ejecuta `fn` (una transacción completa) con backoff exponencial.

    Solo se reintentan deadlocks; como `fn` abre su propia transacción,
    el read-modify-write del estado se repite completo.
    """
    for attempt in range(1, max_retries + 1):
        try:
            return fn()
        except OperationalError as e:
            if is_deadlock(e) and attempt < max_retries:
                delay = min(1000 * (2 ** (attempt - 1)), 5000)
                jitter = random.uniform(0, delay * 0.1)
                total_delay = (delay + jitter) / 1000.0
                logger.warning(
                    "Deadlock detectado monitor=%s (intento %d/%d), reintentando en %.2fs...",
                    label, attempt, max_retries, total_delay,
                )
                time.sleep(total_delay)
                continue
            raise
    raise RuntimeError("max_retries debe ser >= 1")

"""Excepciones del módulo de tiempo de operación."""

from __future__ import annotations


class OperatingTimeError(Exception):
    """Error base del módulo."""


class MonitorConfigError(OperatingTimeError):
    """Fila de configuración de monitor inválida."""

    def __init__(self, monitor_key: str, reason: str):
        super().__init__(f"monitor={monitor_key}: {reason}")
        self.monitor_key = monitor_key
        self.reason = reason

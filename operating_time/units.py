"""Conversión de duraciones a la unidad de cálculo configurada."""

from __future__ import annotations

from datetime import timedelta
from enum import Enum


class CalculationUnit(Enum):
    """Unidad en la que se acumula el tiempo de operación."""

    SECONDS = "seconds"
    MINUTES = "minutes"
    HOURS = "hours"
    DAYS = "days"

    @classmethod
    def parse(cls, raw: "str | CalculationUnit") -> "CalculationUnit":
        """Acepta el valor ('hours') o el nombre ('HOURS') sin distinguir mayúsculas."""
        if isinstance(raw, CalculationUnit):
            return raw
        key = str(raw).strip().lower()
        for unit in cls:
            if unit.value == key:
                return unit
        raise ValueError(f"Unidad de cálculo desconocida: {raw!r}")


_SECONDS_PER_UNIT = {
    CalculationUnit.SECONDS: 1.0,
    CalculationUnit.MINUTES: 60.0,
    CalculationUnit.HOURS: 3600.0,
    CalculationUnit.DAYS: 86400.0,
}


def convert(duration: timedelta, unit: CalculationUnit) -> float:
    """Convierte una duración a la unidad indicada, nunca negativa.

    Deltas negativos (relojes desfasados, muestras fuera de orden) se
    recortan a 0 para que el total acumulado nunca disminuya.
    """
    value = duration.total_seconds() / _SECONDS_PER_UNIT[unit]
    return max(value, 0.0)

"""Modelos de estado del calculador de tiempo de operación."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum


# Marca de "timestamp no establecido" (tick 0 del formato persistido)
UNSET_TIMESTAMP = datetime(1, 1, 1, tzinfo=timezone.utc)


class TimeStateKind(Enum):
    """Variantes del estado. El valor es el nombre persistido."""

    RESET = "Reset"          # Sin acumular, total en 0
    OPERATING = "Operating"  # Acumulando desde last_timestamp
    HOLDING = "Hold"         # Congelado; puede resetearse tras el período de gracia


@dataclass(frozen=True)
class TimeState:
    """Estado actual de un monitor de tiempo de operación.

    Se reconstruye en cada ciclo desde el registro persistido; no vive
    en memoria entre evaluaciones.
    """

    kind: TimeStateKind
    previous_value: float
    last_timestamp: datetime

    @classmethod
    def reset(cls, last_timestamp: datetime = UNSET_TIMESTAMP) -> TimeState:
        return cls(TimeStateKind.RESET, 0.0, last_timestamp)

    @classmethod
    def operating(cls, previous_value: float, last_timestamp: datetime) -> TimeState:
        return cls(TimeStateKind.OPERATING, previous_value, last_timestamp)

    @classmethod
    def holding(cls, previous_value: float, last_timestamp: datetime) -> TimeState:
        return cls(TimeStateKind.HOLDING, previous_value, last_timestamp)

    @property
    def name(self) -> str:
        return self.kind.value

    @property
    def has_unset_timestamp(self) -> bool:
        return self.last_timestamp == UNSET_TIMESTAMP

    def __str__(self) -> str:
        return f"{self.name}({self.previous_value}, {self.last_timestamp.isoformat()})"


DEFAULT_STATE = TimeState.reset()

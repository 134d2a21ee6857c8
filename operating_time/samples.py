"""Modelo de muestras e interfaces de series temporales.

Las series (condición, estado persistido, salida) son colaboradores
externos: el calculador solo necesita "última muestra en o antes de T"
y, para el estado, poder escribir una muestra nueva.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional


class Quality(Enum):
    GOOD = "good"
    BAD = "bad"
    UNCERTAIN = "uncertain"


class SampleType(Enum):
    """Tipo de valor que transporta una serie."""
    BOOLEAN = "boolean"
    STRING = "string"
    DOUBLE = "double"


class UpdateMode(Enum):
    """Cómo se actualiza una serie en el historiador."""
    ON_WRITE = "on_write"
    CALCULATED = "calculated"
    POLLED = "polled"


def to_utc(ts: datetime) -> datetime:
    """Normaliza a UTC aware. Los datetimes naive se asumen UTC."""
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


@dataclass(frozen=True)
class Sample:
    """Muestra de una serie temporal."""
    timestamp: datetime
    value: Any
    quality: Quality = Quality.GOOD

    @property
    def is_good(self) -> bool:
        return self.quality == Quality.GOOD

    def with_quality(self, quality: Quality) -> "Sample":
        return Sample(timestamp=self.timestamp, value=self.value, quality=quality)


_TRUE_STRINGS = {"true", "1"}
_FALSE_STRINGS = {"false", "0"}


def to_bool(value: Any) -> Optional[bool]:
    """Interpreta un valor de muestra como booleano.

    Returns:
        True/False, o None si el valor no es convertible
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        if isinstance(value, float) and math.isnan(value):
            return None
        return value != 0
    if isinstance(value, str):
        key = value.strip().lower()
        if key in _TRUE_STRINGS:
            return True
        if key in _FALSE_STRINGS:
            return False
    return None


class ISampleSource(ABC):
    """Serie temporal consultable por "última muestra en o antes de T"."""

    @property
    @abstractmethod
    def sample_type(self) -> SampleType:
        """Tipo de valor de la serie."""

    @abstractmethod
    def latest_at_or_before(self, time: datetime) -> Optional[Sample]:
        """Última muestra con timestamp <= time (buena o no), o None."""


class IStatusStore(ISampleSource):
    """Serie de texto donde se persiste el estado entre ciclos."""

    @property
    @abstractmethod
    def update_mode(self) -> UpdateMode:
        """Modo de actualización; debe ser ON_WRITE para persistir estado."""

    @abstractmethod
    def write(self, sample: Sample) -> None:
        """Agrega (o reemplaza en el mismo timestamp) una muestra."""

"""Codec del registro de estado persistido.

Formato (compatible con el historial ya almacenado):

    "<Variante>:<valor previo>:<ticks UTC>"

- Variante: Reset | Operating | Hold
- Valor previo: literal decimal de punto flotante ("100", "0.5", "1E+20")
- Ticks: intervalos de 100 ns desde 0001-01-01T00:00:00Z

Decodificación tolerante: un registro ausente o mal formado produce el
estado por defecto (Reset en UNSET_TIMESTAMP), nunca una excepción.
"""

from __future__ import annotations

import logging
import math
import re
from datetime import datetime, timedelta
from typing import Optional

from .samples import to_utc
from .state_models import DEFAULT_STATE, UNSET_TIMESTAMP, TimeState, TimeStateKind

logger = logging.getLogger(__name__)

SEPARATOR = ":"

TICKS_PER_SECOND = 10_000_000
TICKS_PER_MICROSECOND = 10
MAX_TICKS = 3_155_378_975_999_999_999

_INTEGER_RE = re.compile(r"^\s*[+-]?\d+\s*$")
_STATE_BY_NAME = {kind.value: kind for kind in TimeStateKind}


def datetime_to_ticks(ts: datetime) -> int:
    delta = to_utc(ts) - UNSET_TIMESTAMP
    seconds = delta.days * 86400 + delta.seconds
    return seconds * TICKS_PER_SECOND + delta.microseconds * TICKS_PER_MICROSECOND


def ticks_to_datetime(ticks: int) -> datetime:
    """Convierte ticks a datetime UTC (resolución de microsegundos).

    Raises:
        ValueError: si los ticks están fuera del rango representable
    """
    if ticks < 0 or ticks > MAX_TICKS:
        raise ValueError(f"ticks fuera de rango: {ticks}")
    return UNSET_TIMESTAMP + timedelta(microseconds=ticks // TICKS_PER_MICROSECOND)


def format_value(value: float) -> str:
    """Formato de ida y vuelta más corto: '100', '0.5', '1E+20', '1E-05'."""
    text = repr(float(value))
    if "e" in text:
        mantissa, exponent = text.split("e")
        if mantissa.endswith(".0"):
            mantissa = mantissa[:-2]
        sign = "-" if exponent.startswith("-") else "+"
        digits = exponent.lstrip("+-").rjust(2, "0")
        return f"{mantissa}E{sign}{digits}"
    if text.endswith(".0"):
        return text[:-2]
    return text


def encode(state: TimeState) -> str:
    return SEPARATOR.join(
        (state.name, format_value(state.previous_value), str(datetime_to_ticks(state.last_timestamp)))
    )


def _parse_value(raw: str) -> float:
    try:
        value = float(raw)
    except ValueError:
        return 0.0
    if not math.isfinite(value) or value < 0:
        return 0.0
    return value


def _parse_timestamp(raw: str) -> datetime:
    if not _INTEGER_RE.match(raw):
        return UNSET_TIMESTAMP
    try:
        return ticks_to_datetime(int(raw))
    except ValueError:
        return UNSET_TIMESTAMP


def decode(record: Optional[str]) -> TimeState:
    """Decodifica el registro persistido.

    Args:
        record: Texto persistido (None o vacío si no hay registro)

    Returns:
        TimeState decodificado, o DEFAULT_STATE si el registro no es válido
    """
    if not record:
        return DEFAULT_STATE

    parts = record.split(SEPARATOR)
    if len(parts) != 3:
        logger.debug("state_decode_fallback reason=fields record=%r", record)
        return DEFAULT_STATE

    kind = _STATE_BY_NAME.get(parts[0])
    if kind is None:
        logger.debug("state_decode_fallback reason=variant record=%r", record)
        return DEFAULT_STATE

    previous_value = _parse_value(parts[1])
    last_timestamp = _parse_timestamp(parts[2])

    if kind == TimeStateKind.RESET:
        return TimeState.reset(last_timestamp)
    if kind == TimeStateKind.OPERATING:
        return TimeState.operating(previous_value, last_timestamp)
    return TimeState.holding(previous_value, last_timestamp)

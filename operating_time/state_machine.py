"""Máquina de estados del tiempo de operación.

Transiciones puras: cada función recibe el estado actual y devuelve el
estado siguiente, o None si no hay cambio.

    Reset ──true──► Operating ──false──► Hold ──(reset_period)──► Reset
                        ▲                 │
                        └──────true───────┘

Reglas:
- Reset vuelve a acumular desde 0; Hold retoma desde el valor congelado
- Operating → Hold congela el valor acumulado al momento de la condición falsa
- Hold expira cuando timestamp >= last_timestamp + reset_period y el nuevo
  Reset queda en last_timestamp + reset_period
- Reset con timestamp sin establecer registra el primer timestamp visto
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from .state_models import UNSET_TIMESTAMP, TimeState, TimeStateKind
from .units import CalculationUnit, convert


def value_at(state: TimeState, time: datetime, unit: CalculationUnit) -> float:
    """Valor del tiempo de operación en `time`."""
    if state.kind == TimeStateKind.OPERATING:
        return state.previous_value + convert(time - state.last_timestamp, unit)
    if state.kind == TimeStateKind.HOLDING:
        return state.previous_value
    return 0.0


def expiry_time(state: TimeState, reset_period: timedelta) -> Optional[datetime]:
    """Momento en que un Hold pasa a Reset; None si excede el rango de fechas."""
    try:
        return state.last_timestamp + reset_period
    except OverflowError:
        return None


def _bootstrap_reset(state: TimeState, timestamp: datetime) -> Optional[TimeState]:
    if state.has_unset_timestamp:
        return TimeState.reset(timestamp)
    return None


def _check_expiry(state: TimeState, time: datetime, reset_period: timedelta) -> Optional[TimeState]:
    reset_after = expiry_time(state, reset_period)
    if reset_after is not None and time >= reset_after:
        return TimeState.reset(reset_after)
    return None


def on_condition_true(state: TimeState, timestamp: datetime) -> Optional[TimeState]:
    if state.kind == TimeStateKind.RESET:
        return TimeState.operating(0.0, timestamp)
    if state.kind == TimeStateKind.HOLDING:
        return TimeState.operating(state.previous_value, timestamp)
    return None


def on_condition_false(
    state: TimeState,
    timestamp: datetime,
    unit: CalculationUnit,
    reset_period: timedelta,
) -> Optional[TimeState]:
    if state.kind == TimeStateKind.RESET:
        return _bootstrap_reset(state, timestamp)
    if state.kind == TimeStateKind.OPERATING:
        return TimeState.holding(value_at(state, timestamp, unit), timestamp)
    return _check_expiry(state, timestamp, reset_period)


def on_clock_advance(state: TimeState, time: datetime, reset_period: timedelta) -> Optional[TimeState]:
    if state.kind == TimeStateKind.RESET:
        return _bootstrap_reset(state, time)
    if state.kind == TimeStateKind.HOLDING:
        return _check_expiry(state, time, reset_period)
    return None


def apply_condition(
    state: TimeState,
    condition: Optional[bool],
    timestamp: Optional[datetime],
    unit: CalculationUnit,
    reset_period: timedelta,
) -> Optional[TimeState]:
    """Aplica la muestra de condición; condition=None es "sin muestra".

    Sin muestra equivale a una condición falsa en UNSET_TIMESTAMP. En
    Operating esto produce un Hold en UNSET_TIMESTAMP con el valor previo
    (sin el tramo acumulado desde last_timestamp); la expiración de ese
    Hold queda en manos de on_clock_advance. Comportamiento heredado,
    conservado tal cual.
    """
    if condition is None or timestamp is None:
        return on_condition_false(state, UNSET_TIMESTAMP, unit, reset_period)
    if condition:
        return on_condition_true(state, timestamp)
    return on_condition_false(state, timestamp, unit, reset_period)

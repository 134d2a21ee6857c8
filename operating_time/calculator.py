"""Calculador de tiempo de operación.

Orquesta un ciclo de evaluación:

1. Valida la configuración (errores reportados, el ciclo continúa)
2. Decodifica el estado persistido (o Reset por defecto)
3. Lee la última muestra de condición en o antes del tiempo de evaluación
4. Aplica la condición y luego el avance de reloj a la máquina de estados
5. Persiste el estado resultante en el tiempo de evaluación
6. Devuelve el valor en el tiempo de evaluación con calidad GOOD

El read-modify-write del paso 2 al 5 no es atómico: el host debe
serializar las evaluaciones de un mismo monitor.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List, Optional, Tuple

from . import state_codec
from .filters import SampleFilter
from .samples import ISampleSource, IStatusStore, Quality, Sample, to_bool, to_utc
from .state_machine import apply_condition, on_clock_advance, value_at
from .state_models import TimeState
from .units import CalculationUnit
from .validation import ConfigurationIssue, validate_configuration

logger = logging.getLogger(__name__)


@dataclass
class EvaluationResult:
    """Resultado de un ciclo de evaluación."""
    sample: Sample
    state: TimeState
    previous_state: TimeState
    transitions: List[Tuple[TimeState, TimeState]] = field(default_factory=list)
    issues: List[ConfigurationIssue] = field(default_factory=list)

    @property
    def value(self) -> float:
        return self.sample.value


class OperatingTimeCalculator:
    """Calcula el tiempo de operación acumulado a partir de una condición booleana.

    Colaboradores inyectados explícitamente; el calculador no guarda estado
    entre ciclos, toda la continuidad pasa por la serie de estado.
    """

    def __init__(
        self,
        condition_source: Optional[ISampleSource] = None,
        status_store: Optional[IStatusStore] = None,
        unit: CalculationUnit = CalculationUnit.SECONDS,
        reset_period: timedelta = timedelta(0),
        condition_filter: Optional[SampleFilter] = None,
        monitor_key: str = "-",
    ) -> None:
        self._condition_source = condition_source
        self._status_store = status_store
        self._unit = unit
        self._reset_period = reset_period
        self._condition_filter = condition_filter
        self._monitor_key = monitor_key

    @property
    def unit(self) -> CalculationUnit:
        return self._unit

    @property
    def reset_period(self) -> timedelta:
        return self._reset_period

    def evaluate(self, time: datetime) -> EvaluationResult:
        """Ejecuta un ciclo completo en `time`."""
        time = to_utc(time)
        issues = validate_configuration(
            self._condition_source, self._status_store, self._monitor_key
        )

        state = self._load_state(time)
        previous_state = state
        transitions: List[Tuple[TimeState, TimeState]] = []

        condition, condition_ts = self._read_condition(time)
        state = self._change_state(
            state,
            apply_condition(state, condition, condition_ts, self._unit, self._reset_period),
            transitions,
        )
        state = self._change_state(
            state,
            on_clock_advance(state, time, self._reset_period),
            transitions,
        )

        if self._status_store is not None:
            self._status_store.write(Sample(time, state_codec.encode(state), Quality.GOOD))

        sample = Sample(time, value_at(state, time, self._unit), Quality.GOOD)
        return EvaluationResult(
            sample=sample,
            state=state,
            previous_state=previous_state,
            transitions=transitions,
            issues=issues,
        )

    def _load_state(self, time: datetime) -> TimeState:
        status = _latest_good(self._status_store, time)
        if status is None or status.value is None:
            return state_codec.decode(None)
        return state_codec.decode(str(status.value))

    def _read_condition(self, time: datetime) -> Tuple[Optional[bool], Optional[datetime]]:
        sample = _latest_good(self._condition_source, time, self._condition_filter)
        if sample is None:
            return None, None

        condition = to_bool(sample.value)
        if condition is None:
            logger.warning(
                "condition_unconvertible monitor=%s value=%r ts=%s",
                self._monitor_key, sample.value, sample.timestamp.isoformat(),
            )
            return None, None
        return condition, to_utc(sample.timestamp)

    def _change_state(
        self,
        current: TimeState,
        new_state: Optional[TimeState],
        transitions: List[Tuple[TimeState, TimeState]],
    ) -> TimeState:
        if new_state is None:
            return current
        logger.debug(
            "state_change monitor=%s %s -> %s (%s)",
            self._monitor_key, current.name, new_state.name, new_state.previous_value,
        )
        transitions.append((current, new_state))
        return new_state


def _latest_good(
    source: Optional[ISampleSource],
    time: datetime,
    sample_filter: Optional[SampleFilter] = None,
) -> Optional[Sample]:
    """Última muestra en o antes de `time`, solo si es buena."""
    if source is None:
        return None
    sample = source.latest_at_or_before(time)
    if sample is None:
        return None
    if sample_filter is not None:
        sample = sample_filter(sample, time)
    return sample if sample.is_good else None

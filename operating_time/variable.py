"""Configuración fluida de una variable de tiempo de operación.

Ejemplo:
    variable = (
        OperatingTimeVariable("crusher_01")
        .using_condition(running_stream)
        .store_status_in(status_stream)
        .reset_after(timedelta(hours=8))
        .total_hours()
    )
    sample = variable.get_sample(now)
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from .calculator import EvaluationResult, OperatingTimeCalculator
from .filters import SampleFilter, max_age_filter
from .samples import ISampleSource, IStatusStore, Sample
from .units import CalculationUnit


class OperatingTimeVariable:
    """Agrupa la configuración y crea un calculador nuevo por evaluación."""

    def __init__(self, name: str = "-"):
        self.name = name
        self._condition_source: Optional[ISampleSource] = None
        self._status_store: Optional[IStatusStore] = None
        self._reset_period = timedelta(0)
        self._unit = CalculationUnit.SECONDS
        self._condition_filter: Optional[SampleFilter] = None

    def using_condition(self, condition_source: ISampleSource) -> OperatingTimeVariable:
        self._condition_source = condition_source
        return self

    def store_status_in(self, status_store: IStatusStore) -> OperatingTimeVariable:
        self._status_store = status_store
        return self

    def reset_after(self, reset_period: timedelta) -> OperatingTimeVariable:
        self._reset_period = reset_period
        return self

    def ignore_samples_older_than(self, max_age: timedelta) -> OperatingTimeVariable:
        self._condition_filter = max_age_filter(max_age)
        return self

    def total_seconds(self) -> OperatingTimeVariable:
        self._unit = CalculationUnit.SECONDS
        return self

    def total_minutes(self) -> OperatingTimeVariable:
        self._unit = CalculationUnit.MINUTES
        return self

    def total_hours(self) -> OperatingTimeVariable:
        self._unit = CalculationUnit.HOURS
        return self

    def total_days(self) -> OperatingTimeVariable:
        self._unit = CalculationUnit.DAYS
        return self

    def build_calculator(self) -> OperatingTimeCalculator:
        return OperatingTimeCalculator(
            condition_source=self._condition_source,
            status_store=self._status_store,
            unit=self._unit,
            reset_period=self._reset_period,
            condition_filter=self._condition_filter,
            monitor_key=self.name,
        )

    def evaluate(self, time: datetime) -> EvaluationResult:
        return self.build_calculator().evaluate(time)

    def get_sample(self, time: datetime) -> Sample:
        return self.evaluate(time).sample

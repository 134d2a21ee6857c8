"""Configuración de un monitor de tiempo de operación."""

from __future__ import annotations

from datetime import timedelta
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .filters import SampleFilter, max_age_filter
from .units import CalculationUnit

# Mayor duración representable como timedelta (días enteros)
MAX_PERIOD_SECONDS = float(timedelta.max.days * 86400)


class MonitorConfig(BaseModel):
    """Fila de ot_monitors validada.

    condition_series / status_series pueden faltar: el calculador lo
    reporta como error de configuración y sigue con valores por defecto.
    """

    monitor_key: str = Field(..., min_length=1, max_length=200)
    condition_series: Optional[str] = None
    status_series: Optional[str] = None
    output_series: Optional[str] = None
    unit: str = CalculationUnit.SECONDS.value
    reset_seconds: float = Field(default=0.0, ge=0, le=MAX_PERIOD_SECONDS, allow_inf_nan=False)
    max_condition_age_seconds: Optional[float] = Field(
        default=None, gt=0, le=MAX_PERIOD_SECONDS, allow_inf_nan=False,
    )
    enabled: bool = True

    @field_validator("unit", mode="before")
    @classmethod
    def validate_unit(cls, v):
        if v is None:
            return CalculationUnit.SECONDS.value
        return CalculationUnit.parse(v).value

    @field_validator("condition_series", "status_series", "output_series", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def calculation_unit(self) -> CalculationUnit:
        return CalculationUnit.parse(self.unit)

    @property
    def reset_period(self) -> timedelta:
        return timedelta(seconds=self.reset_seconds)

    def condition_filter(self) -> Optional[SampleFilter]:
        if self.max_condition_age_seconds is None:
            return None
        return max_age_filter(timedelta(seconds=self.max_condition_age_seconds))

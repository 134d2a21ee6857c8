"""Cálculo de tiempo de operación a partir de una condición booleana.

Estructura modular:
- units.py: CalculationUnit + convert
- samples.py: Sample, Quality, interfaces de series
- state_models.py: TimeState (Reset / Operating / Hold)
- state_machine.py: Transiciones puras
- state_codec.py: Registro persistido "<Variante>:<valor>:<ticks>"
- validation.py: Errores de configuración
- filters.py: Filtros de muestras de condición (ignore_old_samples)
- calculator.py: Ciclo de evaluación
- variable.py: Configuración fluida
- monitor_config.py: Configuración de monitores (job batch)
- stores/: Series en memoria y SQL
"""

from .calculator import EvaluationResult, OperatingTimeCalculator
from .errors import MonitorConfigError, OperatingTimeError
from .filters import all_samples, ignore_old_samples, max_age_filter
from .monitor_config import MonitorConfig
from .samples import (
    ISampleSource,
    IStatusStore,
    Quality,
    Sample,
    SampleType,
    UpdateMode,
)
from .state_codec import decode, encode
from .state_models import DEFAULT_STATE, UNSET_TIMESTAMP, TimeState, TimeStateKind
from .units import CalculationUnit, convert
from .validation import ConfigurationIssue, validate_configuration
from .variable import OperatingTimeVariable

__all__ = [
    "OperatingTimeCalculator",
    "EvaluationResult",
    "OperatingTimeVariable",
    "MonitorConfig",
    "OperatingTimeError",
    "MonitorConfigError",
    "ISampleSource",
    "IStatusStore",
    "Sample",
    "Quality",
    "SampleType",
    "UpdateMode",
    "TimeState",
    "TimeStateKind",
    "DEFAULT_STATE",
    "UNSET_TIMESTAMP",
    "CalculationUnit",
    "convert",
    "encode",
    "decode",
    "ConfigurationIssue",
    "validate_configuration",
    "all_samples",
    "ignore_old_samples",
    "max_age_filter",
]

"""Validación de configuración del calculador.

Los errores de configuración se reportan (log ERROR + lista de issues)
pero no abortan el ciclo: los consumidores esperan una muestra por ciclo.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from .samples import ISampleSource, IStatusStore, SampleType, UpdateMode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConfigurationIssue:
    """Problema de configuración detectado antes del ciclo."""
    code: str
    message: str


MISSING_STATUS_STORE = "missing_status_store"
STATUS_NOT_STRING = "status_not_string"
STATUS_NOT_ON_WRITE = "status_not_on_write"
MISSING_CONDITION = "missing_condition"
CONDITION_NOT_BOOLEAN = "condition_not_boolean"


def validate_configuration(
    condition_source: Optional[ISampleSource],
    status_store: Optional[IStatusStore],
    monitor_key: str = "-",
) -> List[ConfigurationIssue]:
    """Verifica tipos de serie y modo de actualización.

    Returns:
        Lista de issues (vacía si la configuración es válida)
    """
    issues: List[ConfigurationIssue] = []

    if status_store is None:
        issues.append(ConfigurationIssue(
            MISSING_STATUS_STORE,
            "No hay serie de estado configurada; el estado no se persistirá entre ciclos",
        ))
    else:
        if status_store.sample_type != SampleType.STRING:
            issues.append(ConfigurationIssue(
                STATUS_NOT_STRING,
                f"La serie de estado debe ser STRING (es {status_store.sample_type.value})",
            ))
        if status_store.update_mode != UpdateMode.ON_WRITE:
            issues.append(ConfigurationIssue(
                STATUS_NOT_ON_WRITE,
                f"La serie de estado debe ser ON_WRITE (es {status_store.update_mode.value})",
            ))

    if condition_source is None:
        issues.append(ConfigurationIssue(
            MISSING_CONDITION,
            "No hay serie de condición configurada; se trata como condición ausente",
        ))
    elif condition_source.sample_type != SampleType.BOOLEAN:
        issues.append(ConfigurationIssue(
            CONDITION_NOT_BOOLEAN,
            f"La serie de condición debe ser BOOLEAN (es {condition_source.sample_type.value})",
        ))

    for issue in issues:
        logger.error("config_error monitor=%s code=%s %s", monitor_key, issue.code, issue.message)

    return issues

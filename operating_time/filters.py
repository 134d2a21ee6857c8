"""Filtros de muestras de condición.

Un filtro recibe la muestra (y el tiempo de evaluación) y devuelve la
muestra a usar. Marcar una muestra como BAD la convierte en "sin muestra"
para la máquina de estados.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from .samples import Quality, Sample, to_utc

logger = logging.getLogger(__name__)

SampleFilter = Callable[[Sample, datetime], Sample]

DEFAULT_MAX_AGE = timedelta(minutes=5)


def all_samples(sample: Sample, now: datetime) -> Sample:
    return sample


def ignore_old_samples(
    sample: Sample,
    now: Optional[datetime] = None,
    max_age: timedelta = DEFAULT_MAX_AGE,
) -> Sample:
    """Marca como BAD las muestras más viejas que max_age."""
    now = to_utc(now) if now is not None else datetime.now(timezone.utc)
    age = now - to_utc(sample.timestamp)
    if age < max_age:
        return sample

    logger.warning("Ignoring old samples. Age=%.1f min", age.total_seconds() / 60.0)
    return sample.with_quality(Quality.BAD)


def max_age_filter(max_age: timedelta) -> SampleFilter:
    """Filtro ignore_old_samples con una edad máxima fija."""
    def _filter(sample: Sample, now: datetime) -> Sample:
        return ignore_old_samples(sample, now, max_age)
    return _filter

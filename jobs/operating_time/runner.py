"""Orquestador del job de tiempo de operación.

Un ciclo = evaluar cada monitor habilitado una vez en `cfg.at`.
Cada monitor corre en su propia transacción; monitores distintos son
independientes y se evalúan en paralelo (ThreadPoolExecutor).
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

from pydantic import ValidationError
from sqlalchemy.engine import Engine

from common.config import Settings, get_settings
from common.db import get_engine
from operating_time.calculator import EvaluationResult, OperatingTimeCalculator
from operating_time.errors import MonitorConfigError
from operating_time.monitor_config import MonitorConfig
from operating_time.samples import SampleType
from operating_time.stores.sql import SqlSampleStream, ensure_schema

from .config import JobConfig
from .db_queries import list_monitor_rows
from .retry import run_with_retry

logger = logging.getLogger(__name__)


@dataclass
class RunSummary:
    """Resultado agregado de run_once."""
    ok: int = 0
    failed: int = 0
    skipped: int = 0
    results: Dict[str, EvaluationResult] = field(default_factory=dict)
    errors: Dict[str, str] = field(default_factory=dict)


# Un lock por monitor: el read-modify-write del estado no es atómico.
# Cada entrada lleva un contador de usuarios y se borra al llegar a cero.
_locks_guard = threading.Lock()
_monitor_locks: Dict[str, List] = {}


@contextmanager
def _monitor_lock(monitor_key: str) -> Iterator[None]:
    with _locks_guard:
        entry = _monitor_locks.get(monitor_key)
        if entry is None:
            entry = _monitor_locks[monitor_key] = [threading.Lock(), 0]
        entry[1] += 1
    try:
        with entry[0]:
            yield
    finally:
        with _locks_guard:
            entry[1] -= 1
            if entry[1] == 0:
                del _monitor_locks[monitor_key]


def build_monitor(row: dict, settings: Settings) -> MonitorConfig:
    """Valida una fila de ot_monitors completando con los defaults de Settings."""
    data = dict(row)
    if data.get("unit") is None:
        data["unit"] = settings.default_unit
    if data.get("reset_seconds") is None:
        data["reset_seconds"] = settings.reset_period_seconds
    if data.get("max_condition_age_seconds") is None:
        data["max_condition_age_seconds"] = settings.max_condition_age_seconds
    try:
        return MonitorConfig(**data)
    except ValidationError as e:
        raise MonitorConfigError(str(data.get("monitor_key")), str(e)) from e


def evaluate_monitor(conn, monitor: MonitorConfig, cfg: JobConfig) -> EvaluationResult:
    """Evalúa un monitor sobre una conexión ya abierta (sin commit)."""
    condition = (
        SqlSampleStream(conn, monitor.condition_series, SampleType.BOOLEAN)
        if monitor.condition_series else None
    )
    status = (
        SqlSampleStream(conn, monitor.status_series, SampleType.STRING)
        if monitor.status_series else None
    )
    calculator = OperatingTimeCalculator(
        condition_source=condition,
        status_store=status,
        unit=monitor.calculation_unit,
        reset_period=monitor.reset_period,
        condition_filter=monitor.condition_filter(),
        monitor_key=monitor.monitor_key,
    )
    result = calculator.evaluate(cfg.at)

    if monitor.output_series:
        SqlSampleStream(conn, monitor.output_series, SampleType.DOUBLE).write(result.sample)

    return result


def _process_monitor(engine: Engine, monitor: MonitorConfig, cfg: JobConfig) -> EvaluationResult:
    def _cycle() -> EvaluationResult:
        with engine.begin() as conn:
            return evaluate_monitor(conn, monitor, cfg)

    with _monitor_lock(monitor.monitor_key):
        return run_with_retry(_cycle, max_retries=cfg.max_retries, label=monitor.monitor_key)


def run_once(
    cfg: JobConfig,
    engine: Optional[Engine] = None,
    settings: Optional[Settings] = None,
) -> RunSummary:
    """Evalúa todos los monitores habilitados en cfg.at."""
    engine = engine or get_engine()
    settings = settings or get_settings()
    summary = RunSummary()

    with engine.begin() as conn:
        ensure_schema(conn)
        rows = list_monitor_rows(conn, cfg.monitor_key)

    monitors: List[MonitorConfig] = []
    for row in rows:
        try:
            monitors.append(build_monitor(row, settings))
        except MonitorConfigError as e:
            summary.skipped += 1
            summary.errors[e.monitor_key] = e.reason
            logger.error("monitor_config_invalid monitor=%s err=%s", e.monitor_key, e.reason)

    t0 = time.monotonic()
    with ThreadPoolExecutor(max_workers=max(1, cfg.workers)) as pool:
        futures = {
            pool.submit(_process_monitor, engine, monitor, cfg): monitor.monitor_key
            for monitor in monitors
        }
        for fut in as_completed(futures):
            key = futures[fut]
            try:
                result = fut.result()
                summary.ok += 1
                summary.results[key] = result
                logger.info(
                    "monitor_evaluated monitor=%s state=%s value=%s issues=%d",
                    key, result.state.name, result.value, len(result.issues),
                )
            except Exception as exc:
                summary.failed += 1
                summary.errors[key] = str(exc)
                logger.error("monitor_failed monitor=%s err=%s", key, exc)

    cycle_ms = (time.monotonic() - t0) * 1000
    logger.info(
        "operating_time_cycle ms=%.1f monitors=%d ok=%d fail=%d skipped=%d workers=%d at=%s",
        cycle_ms, len(rows), summary.ok, summary.failed, summary.skipped,
        cfg.workers, cfg.at.isoformat(),
    )
    return summary

"""Series temporales sobre SQL (SQL Server en producción, SQLite en tests).

Tablas:
- ot_samples: muestras de todas las series (condición, estado, salida)
- ot_monitors: configuración de monitores del job batch

Los timestamps se guardan como ticks (BIGINT) con la misma base que el
registro de estado, así el orden y la igualdad son exactos en cualquier
motor.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import inspect, text
from sqlalchemy.engine import Connection

from ..samples import IStatusStore, Quality, Sample, SampleType, UpdateMode
from ..state_codec import datetime_to_ticks, format_value, ticks_to_datetime

logger = logging.getLogger(__name__)


SAMPLES_TABLE = "ot_samples"
MONITORS_TABLE = "ot_monitors"

_DDL = {
    SAMPLES_TABLE: """
        CREATE TABLE ot_samples (
            series_id NVARCHAR(200) NOT NULL,
            ts_ticks BIGINT NOT NULL,
            value NVARCHAR(400) NULL,
            quality VARCHAR(16) NOT NULL,
            PRIMARY KEY (series_id, ts_ticks)
        )
    """,
    MONITORS_TABLE: """
        CREATE TABLE ot_monitors (
            monitor_key NVARCHAR(200) NOT NULL PRIMARY KEY,
            condition_series NVARCHAR(200) NULL,
            status_series NVARCHAR(200) NULL,
            output_series NVARCHAR(200) NULL,
            unit VARCHAR(16) NOT NULL,
            reset_seconds FLOAT NOT NULL,
            max_condition_age_seconds FLOAT NULL,
            enabled INT NOT NULL
        )
    """,
}


def ensure_schema(conn: Connection) -> list[str]:
    """Crea las tablas que falten. Retorna los nombres creados."""
    inspector = inspect(conn)
    created = []
    for table, ddl in _DDL.items():
        if inspector.has_table(table):
            continue
        conn.execute(text(ddl))
        created.append(table)
        logger.info("[DB] Tabla creada: %s", table)
    return created


def _encode_value(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bool):
        return "True" if value else "False"
    if isinstance(value, float):
        return format_value(value)
    return str(value)


def _decode_value(raw: Optional[str], sample_type: SampleType) -> Any:
    if raw is None or sample_type != SampleType.DOUBLE:
        return raw
    try:
        return float(raw)
    except ValueError:
        return raw


def _decode_quality(raw: Optional[str]) -> Quality:
    try:
        return Quality(str(raw or "").lower())
    except ValueError:
        return Quality.BAD


class SqlSampleStream(IStatusStore):
    """Serie temporal identificada por series_id en ot_samples."""

    def __init__(
        self,
        conn: Connection,
        series_id: str,
        sample_type: SampleType,
        update_mode: UpdateMode = UpdateMode.ON_WRITE,
    ):
        self._conn = conn
        self._series_id = series_id
        self._sample_type = sample_type
        self._update_mode = update_mode

    @property
    def series_id(self) -> str:
        return self._series_id

    @property
    def sample_type(self) -> SampleType:
        return self._sample_type

    @property
    def update_mode(self) -> UpdateMode:
        return self._update_mode

    def latest_at_or_before(self, time: datetime) -> Optional[Sample]:
        row = self._conn.execute(
            text("""
                SELECT ts_ticks, value, quality FROM ot_samples
                WHERE series_id = :series_id
                AND ts_ticks = (
                    SELECT MAX(ts_ticks) FROM ot_samples
                    WHERE series_id = :series_id AND ts_ticks <= :ts_ticks
                )
            """),
            {"series_id": self._series_id, "ts_ticks": datetime_to_ticks(time)},
        ).fetchone()

        if not row:
            return None

        return Sample(
            timestamp=ticks_to_datetime(int(row.ts_ticks)),
            value=_decode_value(row.value, self._sample_type),
            quality=_decode_quality(row.quality),
        )

    def write(self, sample: Sample) -> None:
        params = {
            "series_id": self._series_id,
            "ts_ticks": datetime_to_ticks(sample.timestamp),
        }
        self._conn.execute(
            text("DELETE FROM ot_samples WHERE series_id = :series_id AND ts_ticks = :ts_ticks"),
            params,
        )
        self._conn.execute(
            text("""
                INSERT INTO ot_samples (series_id, ts_ticks, value, quality)
                VALUES (:series_id, :ts_ticks, :value, :quality)
            """),
            {**params, "value": _encode_value(sample.value), "quality": sample.quality.value},
        )

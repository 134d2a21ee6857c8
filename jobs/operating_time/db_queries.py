"""SQL helper functions for the operating-time job.

All monitor queries are centralized here. No business logic.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import text

from operating_time.monitor_config import MonitorConfig


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def list_monitor_rows(conn, monitor_key: Optional[str] = None) -> list[dict]:
    """Filas crudas de monitores habilitados (sin validar)."""
    query = """
        SELECT monitor_key, condition_series, status_series, output_series,
               unit, reset_seconds, max_condition_age_seconds, enabled
        FROM ot_monitors
        WHERE enabled = 1
    """
    params: dict = {}
    if monitor_key is not None:
        query += " AND monitor_key = :monitor_key"
        params["monitor_key"] = monitor_key
    query += " ORDER BY monitor_key"

    rows = conn.execute(text(query), params).fetchall()
    return [dict(r._mapping) for r in rows]


def upsert_monitor(conn, monitor: MonitorConfig) -> None:
    conn.execute(
        text("DELETE FROM ot_monitors WHERE monitor_key = :monitor_key"),
        {"monitor_key": monitor.monitor_key},
    )
    conn.execute(
        text("""
            INSERT INTO ot_monitors (
                monitor_key, condition_series, status_series, output_series,
                unit, reset_seconds, max_condition_age_seconds, enabled
            ) VALUES (
                :monitor_key, :condition_series, :status_series, :output_series,
                :unit, :reset_seconds, :max_condition_age_seconds, :enabled
            )
        """),
        {
            "monitor_key": monitor.monitor_key,
            "condition_series": monitor.condition_series,
            "status_series": monitor.status_series,
            "output_series": monitor.output_series,
            "unit": monitor.unit,
            "reset_seconds": monitor.reset_seconds,
            "max_condition_age_seconds": monitor.max_condition_age_seconds,
            "enabled": 1 if monitor.enabled else 0,
        },
    )

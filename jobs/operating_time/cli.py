"""CLI entry point for the operating-time job.

Evalúa una sola vez; la periodicidad la define el host (cron, scheduler).
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime
from typing import Optional, Sequence

from common.config import get_settings
from common.logging_setup import configure_logging
from operating_time.samples import to_utc

from .config import JobConfig
from .db_queries import utc_now
from .runner import run_once

logger = logging.getLogger(__name__)


def _parse_at(raw: str) -> datetime:
    try:
        return to_utc(datetime.fromisoformat(raw.replace("Z", "+00:00")))
    except ValueError:
        raise argparse.ArgumentTypeError(f"fecha ISO-8601 inválida: {raw!r}")


def main(argv: Optional[Sequence[str]] = None) -> int:
    settings = get_settings()
    configure_logging(settings.log_level)

    p = argparse.ArgumentParser(description="Operating-time job (una evaluación por monitor)")
    p.add_argument("--at", type=_parse_at, default=None, help="tiempo de evaluación ISO-8601 (default: ahora UTC)")
    p.add_argument("--monitor", default=None, help="evaluar solo este monitor_key")
    p.add_argument("--workers", type=int, default=settings.parallel_workers)
    p.add_argument("--max-retries", type=int, default=3)
    args = p.parse_args(argv)

    cfg = JobConfig(
        at=args.at or utc_now(),
        monitor_key=args.monitor,
        workers=max(1, args.workers),
        max_retries=max(1, args.max_retries),
    )

    logger.info("Operating-time job started")
    logger.info("Config: at=%s monitor=%s workers=%d", cfg.at.isoformat(), cfg.monitor_key, cfg.workers)

    summary = run_once(cfg, settings=settings)
    return 1 if summary.failed else 0


if __name__ == "__main__":
    sys.exit(main())

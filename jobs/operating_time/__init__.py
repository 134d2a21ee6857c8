"""Job batch de tiempo de operación.

Modules:
- config: JobConfig dataclass
- retry: Reintento de ciclos ante deadlocks
- db_queries: Consultas SQL de monitores
- runner: Orquestador (run_once)
- cli: CLI entry point (main)
"""

from .config import JobConfig
from .runner import RunSummary, evaluate_monitor, run_once
from .cli import main

__all__ = ["JobConfig", "RunSummary", "evaluate_monitor", "run_once", "main"]

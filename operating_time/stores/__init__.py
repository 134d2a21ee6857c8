"""Implementaciones de series temporales.

- memory.py: InMemorySampleStream
- sql.py: SqlSampleStream + ensure_schema
"""

from .memory import InMemorySampleStream
from .sql import SqlSampleStream, ensure_schema

__all__ = ["InMemorySampleStream", "SqlSampleStream", "ensure_schema"]

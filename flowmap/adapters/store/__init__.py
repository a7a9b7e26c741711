"""Store adapters - Implementations of UsageStorePort.

Available implementations:
- SQLUsageStore: SQLAlchemy-backed store (PostGIS or plain SQL)
"""

from .sql_store import SQLUsageStore

__all__ = ["SQLUsageStore"]

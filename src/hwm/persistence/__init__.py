from .duckdb_store import AnalyticsStore
from .etl import refresh_analytics
from .migrations import MigrationRunner
from .sqlite_store import SaveStore

__all__ = [
    "AnalyticsStore",
    "MigrationRunner",
    "SaveStore",
    "refresh_analytics",
]

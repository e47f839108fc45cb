from __future__ import annotations

import logging
from pathlib import Path

from hwm.persistence.duckdb_store import AnalyticsStore

logger = logging.getLogger(__name__)


def refresh_analytics(save_path: Path, analytics_path: Path, season_id: str) -> AnalyticsStore:
    store = AnalyticsStore(analytics_path)
    loaded = store.refresh_from_sqlite(save_path, season_id=season_id)
    logger.info("analytics refreshed for %s: %d box score lines", season_id, loaded)
    return store

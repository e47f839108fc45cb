from __future__ import annotations

import hashlib
from datetime import UTC, datetime
from uuid import uuid4


def now_utc() -> datetime:
    return datetime.now(UTC)


def make_id(prefix: str) -> str:
    return f"{prefix}_{uuid4().hex[:12]}"


def stable_id(prefix: str, *parts: object) -> str:
    """Deterministic id for fixtures and replayed runs; same parts, same id."""
    digest = hashlib.sha256(":".join(str(p) for p in parts).encode("utf-8")).hexdigest()
    return f"{prefix}_{digest[:12]}"

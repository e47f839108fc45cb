from .errors import EngineIntegrityError, build_forensic_artifact, contract_violation, persist_forensic_artifact
from .events import EventBus
from .ids import make_id, now_utc, stable_id
from .randomness import PythonRandomSource, gameplay_random, seeded_random, weighted_choice

__all__ = [
    "EngineIntegrityError",
    "EventBus",
    "PythonRandomSource",
    "build_forensic_artifact",
    "contract_violation",
    "gameplay_random",
    "make_id",
    "now_utc",
    "persist_forensic_artifact",
    "seeded_random",
    "stable_id",
    "weighted_choice",
]

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Protocol, Sequence


class Position(str, Enum):
    PG = "PG"
    SG = "SG"
    SF = "SF"
    PF = "PF"
    C = "C"


class StatCategory(str, Enum):
    USAGE = "usage"
    SHOT_ATTEMPT = "shot_attempt"
    SHOT_CREATION = "shot_creation"
    CATCH_AND_SHOOT = "catch_and_shoot"
    THREE_POINT_ATTEMPT = "three_point_attempt"
    POST_ATTEMPT = "post_attempt"
    SHOT_MAKE = "shot_make"
    DEFENSIVE_IMPACT = "defensive_impact"
    ASSIST = "assist"
    REBOUND = "rebound"
    BLOCK = "block"
    STEAL = "steal"
    TURNOVER = "turnover"


class CoachingSpecialization(str, Enum):
    OFFENSIVE = "offensive"
    DEFENSIVE = "defensive"
    PLAYER_DEVELOPMENT = "player_development"
    TEAM_CHEMISTRY = "team_chemistry"


class SimFidelity(str, Enum):
    DETAILED = "detailed"
    FAST = "fast"


class StatStream(str, Enum):
    REGULAR_SEASON = "regular_season"
    PLAYOFFS = "playoffs"


class PossessionAction(str, Enum):
    TWO_POINT = "two_point"
    THREE_POINT = "three_point"
    PASS_TWO_POINT = "pass_two_point"
    PASS_THREE_POINT = "pass_three_point"
    TURNOVER = "turnover"


class PossessionResult(str, Enum):
    MADE_SHOT = "made_shot"
    MISSED_SHOT = "missed_shot"
    BLOCKED_SHOT = "blocked_shot"
    SHOOTING_FOUL = "shooting_foul"
    STEAL = "steal"
    TURNOVER = "turnover"


class RandomSource(Protocol):
    def rand(self) -> float: ...

    def randint(self, a: int, b: int) -> int: ...

    def choice(self, items: Sequence[Any]) -> Any: ...

    def shuffle(self, items: list[Any]) -> None: ...

    def spawn(self, substream_id: str) -> RandomSource: ...


@dataclass(slots=True)
class NarrativeEvent:
    event_id: str
    time: datetime
    scope: str
    event_type: str
    actors: list[str]
    claims: list[str]
    evidence_handles: list[str]
    severity: str


@dataclass(slots=True)
class ValidationIssue:
    code: str
    severity: str
    field_path: str
    entity_id: str
    message: str


@dataclass(slots=True)
class ValidationResult:
    ok: bool
    issues: list[ValidationIssue]


class ValidationError(ValueError):
    def __init__(self, issues: list[ValidationIssue]) -> None:
        message = "; ".join(f"{i.code}:{i.entity_id}:{i.message}" for i in issues)
        super().__init__(message)
        self.issues = issues


@dataclass(slots=True)
class ForensicArtifact:
    artifact_id: str
    timestamp: datetime
    engine_scope: str
    error_code: str
    message: str
    state_snapshot: Mapping[str, Any]
    context: Mapping[str, Any]
    identifiers: Mapping[str, str]
    causal_fragment: Sequence[str]
